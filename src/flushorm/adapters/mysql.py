"""
MySQL connection provider.
"""

from __future__ import annotations

from typing import Any

from ..dialects.mysql import MySQLDialect
from ..utils import get_logger
from ..utils.performance import resolve_slow_query_ms
from .base import (
    AdapterConfigurationError,
    AdapterConnectionError,
    ConnectionConfig,
    DatabaseAdapter,
    parse_flag,
)


def _load_driver():
    try:
        import pymysql  # type: ignore[import-untyped]

        return pymysql
    except ImportError:
        try:
            import MySQLdb

            return MySQLdb
        except ImportError:
            return None


_NUMERIC_OPTIONS = ("connect_timeout", "read_timeout", "write_timeout")


class MySQLAdapter(DatabaseAdapter):
    """
    Provider wrapping a MySQL DB-API driver (PyMySQL or mysqlclient).
    """

    def __init__(self, config: ConnectionConfig, slow_query_ms: int | None = None) -> None:
        self.config = config
        self.dialect = MySQLDialect()
        self.logger = get_logger("adapters.mysql")
        self.slow_query_ms = resolve_slow_query_ms(default=100, override=slow_query_ms)

    def acquire(self) -> Any:
        driver = _load_driver()
        if driver is None:
            raise AdapterConfigurationError(
                "PyMySQL or mysqlclient is required to use MySQLAdapter."
            )
        self.logger.info("Connecting to MySQL %s", self.config.describe())
        try:
            connection = driver.connect(**self.connect_kwargs())
        except Exception as exc:
            raise AdapterConnectionError("Failed to connect to MySQL.") from exc
        self.set_autocommit(connection, self.config.autocommit)
        return connection

    def connect_kwargs(self) -> dict[str, Any]:
        """
        Keyword arguments for the driver's ``connect``. ``ssl_*`` query
        parameters are folded into the nested ``ssl`` dict both drivers expect.
        """
        dsn = self.config.dsn
        kwargs: dict[str, Any] = {
            "host": dsn.host or "localhost",
            "user": dsn.username,
            "password": dsn.password,
            "database": dsn.database,
        }
        if dsn.port:
            kwargs["port"] = dsn.port
        if self.config.timeout:
            kwargs["connect_timeout"] = int(self.config.timeout)
        ssl: dict[str, Any] = {}
        for key, value in self.config.options.items():
            if key == "ssl_check_hostname":
                ssl["check_hostname"] = parse_flag(key, value)
            elif key.startswith("ssl_"):
                ssl[key[4:]] = value
            elif key in _NUMERIC_OPTIONS:
                kwargs[key] = int(value)
            else:
                kwargs[key] = value
        if ssl:
            kwargs["ssl"] = ssl
        return kwargs

    def release(self, connection: Any) -> None:
        connection.close()

    def set_autocommit(self, connection: Any, enabled: bool) -> None:
        # PyMySQL and mysqlclient both expose autocommit as a method.
        connection.autocommit(bool(enabled))

    def last_insert_id(self, cursor: Any, table: str, pk_column: str) -> Any:
        return cursor.lastrowid

    def shutdown(self) -> None:
        return None
