"""
Session factory owning the adapter and the mapped entity set.
"""

from __future__ import annotations

import weakref
from threading import Lock
from typing import TYPE_CHECKING, Any, List, Optional, Tuple

from ..adapters import create_adapter
from ..adapters.base import DatabaseAdapter
from ..metadata import EntityMetadata, MetadataRegistry, metadata_registry
from ..schema import SchemaBuilder
from ..utils import get_logger
from .errors import IllegalStateError
from .session import Session

if TYPE_CHECKING:
    from ..config import PersistenceConfiguration
    from ..hooks import HookDispatcher


class SessionFactory:
    """
    Creates sessions sharing one adapter, metadata registry and hook set.
    """

    def __init__(
        self,
        config: "PersistenceConfiguration",
        *,
        adapter: Optional[DatabaseAdapter] = None,
        registry: Optional[MetadataRegistry] = None,
        hooks: Optional["HookDispatcher"] = None,
    ) -> None:
        self.config = config
        self.registry = registry or metadata_registry
        self.hooks = hooks
        self.connection_config = config.connection_config()
        self.adapter = adapter or create_adapter(
            self.connection_config, slow_query_ms=config.slow_query_ms
        )
        self.logger = get_logger("persistence.factory")
        self._entities: List[EntityMetadata] = [
            self.registry.scan_and_register(entity_type) for entity_type in config.entity_classes
        ]
        self._sessions: "weakref.WeakSet[Session]" = weakref.WeakSet()
        self._lock = Lock()
        self._open = True
        self.logger.info(
            "Session factory ready for %s with %d entities",
            self.connection_config.describe(),
            len(self._entities),
        )

    def __repr__(self) -> str:
        return f"<SessionFactory {self.connection_config.dsn.redacted()}>"

    def __enter__(self) -> "SessionFactory":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def entities(self) -> Tuple[EntityMetadata, ...]:
        return tuple(self._entities)

    def create_session(self) -> Session:
        self._require_open()
        session = Session(
            self.adapter,
            registry=self.registry,
            hooks=self.hooks,
            slow_query_ms=self.config.slow_query_ms,
            factory=self,
        )
        with self._lock:
            self._sessions.add(session)
        return session

    def active_sessions(self) -> int:
        with self._lock:
            return len(self._sessions)

    def close(self) -> None:
        if not self._open:
            return
        with self._lock:
            sessions = list(self._sessions)
        for session in sessions:
            if session.is_transaction_active():
                self.logger.warning("Rolling back active transaction of %r on factory close", session)
                session.get_transaction().rollback()
            session.close()
        self.adapter.shutdown()
        self._open = False
        self.logger.info("Session factory closed")

    def is_open(self) -> bool:
        return self._open

    # Schema -----------------------------------------------------------
    def create_schema(self) -> None:
        builder = SchemaBuilder(self.adapter.dialect, self.registry)
        self._execute_ddl(builder.create_all_sql(self._entities))

    def drop_schema(self) -> None:
        builder = SchemaBuilder(self.adapter.dialect, self.registry)
        self._execute_ddl(builder.drop_all_sql(self._entities))

    def _execute_ddl(self, statements: List[str]) -> None:
        self._require_open()
        connection = self.adapter.acquire()
        try:
            self.adapter.set_autocommit(connection, True)
            cursor = connection.cursor()
            try:
                for sql in statements:
                    self.logger.debug("DDL: %s", sql)
                    cursor.execute(sql)
            finally:
                cursor.close()
        finally:
            self.adapter.release(connection)

    # ------------------------------------------------------------------ #
    def _session_closed(self, session: Session) -> None:
        with self._lock:
            self._sessions.discard(session)

    def _require_open(self) -> None:
        if not self._open:
            raise IllegalStateError("Session factory is closed")


def create_session_factory(config: "PersistenceConfiguration", **kwargs: Any) -> SessionFactory:
    return SessionFactory(config, **kwargs)
