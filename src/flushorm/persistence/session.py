"""
Session façade coordinating the persistence context and transactions.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Dict, Iterator, List, Optional

from ..adapters.base import DatabaseAdapter
from ..engine.executor import StatementExecutor
from ..metadata import CodecRegistry, EntityMetadata, MetadataRegistry, default_codecs, metadata_registry
from ..sql.generators import Statement
from ..utils import StatementTracker, get_logger
from .action_queue import ActionQueue
from .context import PersistenceContext
from .errors import IllegalStateError
from .persisters import EntityDeleter, EntityLoader, EntityPersister, EntityUpdater
from .transaction import EntityTransaction, TransactionCoordinator

if TYPE_CHECKING:
    from ..hooks import HookDispatcher
    from ..query import Query
    from .factory import SessionFactory


class Session:
    """
    Unit-of-work owner for one caller.

    Entities are registered with :meth:`persist`, read with :meth:`find` and
    scheduled for deletion with :meth:`remove`. Nothing reaches the database
    until :meth:`flush` or a transaction commit. A session is meant for one
    thread at a time.
    """

    def __init__(
        self,
        adapter: DatabaseAdapter,
        *,
        registry: Optional[MetadataRegistry] = None,
        codecs: Optional[CodecRegistry] = None,
        hooks: Optional["HookDispatcher"] = None,
        tracker: Optional[StatementTracker] = None,
        slow_query_ms: Optional[int] = None,
        factory: Optional["SessionFactory"] = None,
    ) -> None:
        if hooks is None:
            from ..hooks import hooks as default_hooks

            hooks = default_hooks
        self.adapter = adapter
        self.dialect = adapter.dialect
        self.registry = registry or metadata_registry
        self.codecs = codecs or default_codecs(self.dialect.name)
        self.hooks = hooks
        self.statements = tracker or StatementTracker()
        self.executor = StatementExecutor(adapter, tracker=self.statements, slow_query_ms=slow_query_ms)

        components: Dict[str, Any] = {"registry": self.registry, "codecs": self.codecs, "hooks": hooks}
        self.loader = EntityLoader(self.dialect, self.executor, **components)
        self.action_queue = ActionQueue(
            EntityPersister(self.dialect, self.executor, **components),
            EntityUpdater(self.dialect, self.executor, **components),
            EntityDeleter(self.dialect, self.executor, **components),
        )
        self.context = PersistenceContext(self.action_queue, self.registry)
        self._transaction: EntityTransaction | None = None
        self._open = True
        self._factory = factory
        self.logger = get_logger("persistence.session")

    def __repr__(self) -> str:
        state = "open" if self._open else "closed"
        return f"<Session {state} managed={len(self.context)}>"

    # ------------------------------------------------------------------ #
    # Context management
    # ------------------------------------------------------------------ #
    def __enter__(self) -> "Session":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if self.is_transaction_active():
                self.get_transaction().rollback()
        finally:
            self.close()

    # ------------------------------------------------------------------ #
    # Transactions
    # ------------------------------------------------------------------ #
    def get_transaction(self) -> EntityTransaction:
        self._require_open()
        if self._transaction is None or self._transaction.status.is_terminal:
            coordinator = TransactionCoordinator(self.adapter)
            coordinator.set_flush_callback(self.flush)
            coordinator.set_clear_callback(self.context.clear)
            self._transaction = EntityTransaction(coordinator, hooks=self.hooks, owner=self)
        return self._transaction

    def is_transaction_active(self) -> bool:
        return self._transaction is not None and self._transaction.is_active()

    @contextmanager
    def transaction(self) -> Iterator["Session"]:
        """
        Begin a transaction, commit on success and roll back on error.
        """
        tx = self.get_transaction()
        tx.begin()
        try:
            yield self
        except Exception:
            if tx.is_active():
                tx.rollback()
            raise
        tx.commit()

    # ------------------------------------------------------------------ #
    # Entity operations
    # ------------------------------------------------------------------ #
    def persist(self, entity: Any) -> None:
        self._require_open()
        self._require_transaction()
        if entity is None:
            raise ValueError("Entity must not be None")
        if self.context.contains(entity):
            raise ValueError(f"{type(entity).__name__} instance is already managed")
        self.context.add_entity(entity)

    def find(self, entity_type: type, identifier: Any) -> Any | None:
        self._require_open()
        if entity_type is None:
            raise ValueError("Entity type must not be None")
        if identifier is None:
            raise ValueError("Identifier must not be None")
        cached = self.context.get_entity(entity_type, identifier)
        if cached is not None:
            return cached

        self._require_transaction()
        entity = self.loader.load(self._connection(), entity_type, identifier)
        if entity is not None:
            self.context.register_loaded(entity)
        return entity

    def remove(self, entity: Any) -> None:
        self._require_open()
        self.context.remove_entity(entity)

    def detach(self, entity: Any) -> None:
        self._require_open()
        self.context.detach(entity)

    def contains(self, entity: Any) -> bool:
        self._require_open()
        return self.context.contains(entity)

    def flush(self) -> None:
        self._require_open()
        self._require_transaction()
        self.context.flush(self._connection())

    def clear(self) -> None:
        self._require_open()
        self.context.clear()

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #
    def create_query(self, text: str, result_type: Optional[type] = None) -> "Query":
        from ..query import Query

        self._require_open()
        return Query(self, text, result_type)

    def run_query(self, statement: Statement) -> List[Dict[str, Any]]:
        self._require_open()
        self._require_transaction()
        return self.executor.execute_query(self._connection(), statement)

    def map_row(self, metadata: EntityMetadata, row: Dict[str, Any]) -> Any:
        """
        Resolve a result row to its managed instance, loading it if needed.
        """
        identifier = metadata.identifier
        key_value = self.codecs.decode(row.get(identifier.column_name), identifier.python_type)
        if key_value is not None:
            managed = self.context.get_entity(metadata.entity_type, key_value)
            if managed is not None:
                return managed
        entity = self.loader.materialize(metadata, row)
        self.context.register_loaded(entity)
        return entity

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #
    def close(self) -> None:
        if not self._open:
            return
        if self.is_transaction_active():
            raise IllegalStateError(
                "Cannot close a session with an active transaction; commit or roll back first"
            )
        try:
            self.context.clear()
        finally:
            self._open = False
            if self._factory is not None:
                self._factory._session_closed(self)

    def is_open(self) -> bool:
        return self._open

    # ------------------------------------------------------------------ #
    def _connection(self) -> Any:
        return self.get_transaction().coordinator.get_connection()

    def _require_open(self) -> None:
        if not self._open:
            raise IllegalStateError("Session is closed")

    def _require_transaction(self) -> None:
        if not self.is_transaction_active():
            raise IllegalStateError("Transaction is not active")
