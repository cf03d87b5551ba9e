"""
SQLite connection provider.
"""

from __future__ import annotations

import sqlite3
import uuid
from threading import Lock
from typing import Any

from ..dialects.sqlite import SQLiteDialect
from ..utils import get_logger
from ..utils.performance import resolve_slow_query_ms
from .base import AdapterConnectionError, ConnectionConfig, DatabaseAdapter

MEMORY_DATABASE = ":memory:"


class SQLiteAdapter(DatabaseAdapter):
    """
    Provider wrapping the Python stdlib sqlite3 module.

    Every :meth:`acquire` opens its own connection, so two transactions never
    share one database transaction. ``:memory:`` is served as a named
    shared-cache database private to this adapter; an extra connection keeps
    it alive until :meth:`shutdown`.
    """

    def __init__(self, config: ConnectionConfig, slow_query_ms: int | None = None) -> None:
        self.config = config
        self.dialect = SQLiteDialect()
        self.path = self._normalize_path(config)
        self.logger = get_logger("adapters.sqlite")
        self.slow_query_ms = resolve_slow_query_ms(default=100, override=slow_query_ms)
        self._memory_uri = f"file:flushorm-{uuid.uuid4().hex}?mode=memory&cache=shared"
        self._keepalive: sqlite3.Connection | None = None
        self._lock = Lock()

    @property
    def is_memory(self) -> bool:
        return self.path == MEMORY_DATABASE

    # ------------------------------------------------------------------ #
    # Connection management
    # ------------------------------------------------------------------ #
    def acquire(self) -> sqlite3.Connection:
        if self.is_memory:
            with self._lock:
                if self._keepalive is None:
                    self._keepalive = self._connect()
        return self._connect()

    def release(self, connection: Any) -> None:
        connection.close()

    def set_autocommit(self, connection: Any, enabled: bool) -> None:
        connection.isolation_level = None if enabled else self._isolation_level()

    def last_insert_id(self, cursor: Any, table: str, pk_column: str) -> Any:
        return cursor.lastrowid

    def shutdown(self) -> None:
        with self._lock:
            if self._keepalive is not None:
                self._keepalive.close()
                self._keepalive = None

    # ------------------------------------------------------------------ #
    def _connect(self) -> sqlite3.Connection:
        timeout = self.config.timeout if self.config.timeout is not None else 5.0
        target = self._memory_uri if self.is_memory else self.path
        self.logger.debug("Opening SQLite connection to %s", self.path)
        try:
            connection = sqlite3.connect(
                target,
                isolation_level=None if self.config.autocommit else self._isolation_level(),
                timeout=timeout,
                check_same_thread=False,
                uri=self.is_memory,
            )
            connection.execute("PRAGMA foreign_keys = ON")
        except sqlite3.Error as exc:
            raise AdapterConnectionError(f"Failed to open SQLite database {self.path!r}") from exc
        return connection

    def _isolation_level(self) -> str:
        return self.config.isolation_level or "DEFERRED"

    @staticmethod
    def _normalize_path(config: ConnectionConfig) -> str:
        path = config.dsn.path
        if not path or path == "/":
            return MEMORY_DATABASE
        # sqlite:///relative.db -> "relative.db"; sqlite:////abs.db -> "/abs.db"
        return path[1:] if path.startswith("/") else path
