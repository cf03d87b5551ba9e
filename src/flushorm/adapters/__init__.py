"""
Connection providers for the supported database backends.
"""

from .base import (
    AdapterConfigurationError,
    AdapterConnectionError,
    AdapterError,
    ConnectionConfig,
    DatabaseAdapter,
)
from .mysql import MySQLAdapter
from .postgres import PostgresAdapter
from .sqlite import SQLiteAdapter

_ADAPTERS = {
    "sqlite": SQLiteAdapter,
    "postgresql": PostgresAdapter,
    "mysql": MySQLAdapter,
}


def create_adapter(config: ConnectionConfig, slow_query_ms: int | None = None) -> DatabaseAdapter:
    """
    Instantiate the provider matching the DSN scheme of ``config``.
    """
    try:
        adapter_cls = _ADAPTERS[config.backend]
    except KeyError as exc:
        raise AdapterConfigurationError(f"No adapter for backend '{config.backend}'") from exc
    return adapter_cls(config, slow_query_ms=slow_query_ms)


__all__ = [
    "ConnectionConfig",
    "DatabaseAdapter",
    "AdapterError",
    "AdapterConfigurationError",
    "AdapterConnectionError",
    "SQLiteAdapter",
    "PostgresAdapter",
    "MySQLAdapter",
    "create_adapter",
]
