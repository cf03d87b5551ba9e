"""
PostgreSQL connection provider.
"""

from __future__ import annotations

from typing import Any

from ..dialects.postgres import PostgresDialect
from ..utils import get_logger
from ..utils.performance import resolve_slow_query_ms
from .base import (
    AdapterConfigurationError,
    AdapterConnectionError,
    ConnectionConfig,
    DatabaseAdapter,
)


def _load_driver():
    try:
        import psycopg

        return psycopg
    except ImportError:
        return None


class PostgresAdapter(DatabaseAdapter):
    """
    Provider wrapping the psycopg PostgreSQL driver. Generated keys are read
    through ``RETURNING`` by the executor.
    """

    def __init__(self, config: ConnectionConfig, slow_query_ms: int | None = None) -> None:
        self.config = config
        self.dialect = PostgresDialect()
        self.logger = get_logger("adapters.postgres")
        self.slow_query_ms = resolve_slow_query_ms(default=100, override=slow_query_ms)

    def acquire(self) -> Any:
        driver = _load_driver()
        if driver is None:
            raise AdapterConfigurationError("psycopg is required to use PostgresAdapter.")
        self.logger.info("Connecting to PostgreSQL %s", self.config.describe())
        try:
            connection = driver.connect(**self.connect_kwargs())
        except Exception as exc:
            raise AdapterConnectionError("Failed to connect to PostgreSQL.") from exc
        connection.autocommit = self.config.autocommit
        if self.config.isolation_level:
            level = self.config.isolation_level.upper().replace(" ", "_")
            connection.isolation_level = driver.IsolationLevel[level]
        return connection

    def connect_kwargs(self) -> dict[str, Any]:
        """
        Keyword arguments for ``psycopg.connect``. libpq parameters such as
        ``sslmode`` travel through the URL query string unchanged.
        """
        dsn = self.config.dsn
        kwargs: dict[str, Any] = {
            "host": dsn.host or "localhost",
            "user": dsn.username,
            "password": dsn.password,
            "dbname": dsn.database,
        }
        if dsn.port:
            kwargs["port"] = dsn.port
        if self.config.timeout:
            kwargs["connect_timeout"] = int(self.config.timeout)
        kwargs.update(self.config.options)
        return kwargs

    def release(self, connection: Any) -> None:
        if not getattr(connection, "closed", False):
            connection.close()

    def set_autocommit(self, connection: Any, enabled: bool) -> None:
        connection.autocommit = enabled

    def last_insert_id(self, cursor: Any, table: str, pk_column: str) -> Any:
        row = cursor.fetchone()
        if not row:
            raise AdapterConnectionError("No RETURNING data available for last insert id.")
        return row[0]

    def shutdown(self) -> None:
        return None
