"""
Connection provider protocol and connection configuration.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Optional, Protocol

from ..dialects.base import Dialect
from ..security.dsns import DSNConfig, parse_dsn


class AdapterError(RuntimeError):
    """Base error for adapter-related failures."""


class AdapterConfigurationError(AdapterError):
    """Raised when configuration or required dependencies are invalid."""


class AdapterConnectionError(AdapterError):
    """Raised when establishing or using a connection fails."""


def parse_flag(name: str, raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    text = str(raw).strip().lower()
    if text in ("1", "true", "yes", "on"):
        return True
    if text in ("0", "false", "no", "off"):
        return False
    raise AdapterConfigurationError(f"Invalid boolean value for '{name}': {raw!r}")


def _seconds(name: str, raw: Any) -> float:
    try:
        return float(raw)
    except (TypeError, ValueError) as exc:
        raise AdapterConfigurationError(f"Invalid number of seconds for '{name}': {raw!r}") from exc


# URL query parameters consumed by the providers themselves; anything else
# in the query string is handed to the driver's connect() call.
_SETTINGS: Dict[str, Callable[[str, Any], Any]] = {
    "autocommit": parse_flag,
    "timeout": _seconds,
    "isolation_level": lambda name, raw: str(raw),
}


@dataclass(frozen=True)
class ConnectionConfig:
    """
    A parsed database URL plus the provider settings read from it.
    """

    dsn: DSNConfig
    autocommit: bool = False
    isolation_level: Optional[str] = None
    timeout: Optional[float] = None
    options: Mapping[str, Any] = field(default_factory=dict)
    source: Optional[str] = None

    @classmethod
    def from_url(
        cls,
        url: str,
        *,
        options: Optional[Mapping[str, Any]] = None,
        source: Optional[str] = None,
        **settings: Any,
    ) -> "ConnectionConfig":
        """
        Parse ``url``. Keyword ``settings`` win over the query string and
        ``options`` win over driver parameters found in it.
        """
        try:
            dsn = parse_dsn(url)
            dsn.backend
        except ValueError as exc:
            raise AdapterConfigurationError(str(exc)) from exc
        unknown = set(settings) - set(_SETTINGS)
        if unknown:
            raise AdapterConfigurationError(f"Unknown connection settings: {sorted(unknown)}")

        query = dict(dsn.query)
        values = {
            name: convert(name, query.pop(name))
            for name, convert in _SETTINGS.items()
            if name in query
        }
        values.update({name: _SETTINGS[name](name, raw) for name, raw in settings.items()})
        return cls(dsn=dsn, options={**query, **(options or {})}, source=source, **values)

    @property
    def backend(self) -> str:
        try:
            return self.dsn.backend
        except ValueError as exc:
            raise AdapterConfigurationError(str(exc)) from exc

    def describe(self) -> str:
        """
        Credential-free label for log lines, prefixed with the URL's source.
        """
        redacted = self.dsn.redacted()
        return f"{self.source} ({redacted})" if self.source else redacted


class DatabaseAdapter(Protocol):
    """
    Connection provider consumed by transactions and the statement executor.

    Adapters hand out DB-API connections; they never run entity statements
    themselves.
    """

    dialect: Dialect
    config: ConnectionConfig
    slow_query_ms: int

    def acquire(self) -> Any:
        """
        Return a connection ready for use. Raises :class:`AdapterConnectionError`.
        """

    def release(self, connection: Any) -> None:
        """
        Give back a connection obtained from :meth:`acquire`.
        """

    def set_autocommit(self, connection: Any, enabled: bool) -> None:
        """
        Switch the driver's autocommit mode on ``connection``.
        """

    def last_insert_id(self, cursor: Any, table: str, pk_column: str) -> Any:
        """
        Retrieve the primary key value generated by the previous insert.
        """

    def shutdown(self) -> None:
        """
        Close resources held by the adapter. Implementations should be idempotent.
        """
