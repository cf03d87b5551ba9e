"""DSN parsing and redaction utilities."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional
from urllib.parse import parse_qs, urlencode, urlparse

from .redaction import REDACTED_VALUE, redact_query_params

_BACKEND_ALIASES = {
    "sqlite": "sqlite",
    "sqlite3": "sqlite",
    "postgres": "postgresql",
    "postgresql": "postgresql",
    "psycopg": "postgresql",
    "mysql": "mysql",
    "mariadb": "mysql",
    "pymysql": "mysql",
}


@dataclass
class DSNConfig:
    driver: str
    username: Optional[str]
    password: Optional[str]
    host: Optional[str]
    port: Optional[int]
    database: Optional[str]
    path: str
    query: dict[str, str] = field(default_factory=dict)

    @property
    def backend(self) -> str:
        """
        Canonical backend name (``sqlite``, ``postgresql`` or ``mysql``).
        Driver suffixes such as ``postgresql+psycopg`` are ignored.
        """
        scheme = self.driver.split("+", 1)[0].lower()
        try:
            return _BACKEND_ALIASES[scheme]
        except KeyError as exc:
            raise ValueError(f"Unsupported DSN scheme '{self.driver}'") from exc

    def redacted(self) -> str:
        """
        Return the DSN with credentials and sensitive query values redacted.
        """
        netloc = ""
        if self.username:
            netloc += self.username
            if self.password:
                netloc += f":{REDACTED_VALUE}"
            netloc += "@"
        if self.host:
            netloc += self.host
        if self.port:
            netloc += f":{self.port}"

        query_string = urlencode(redact_query_params(self.query)) if self.query else ""

        # Keep the double slash even when netloc is empty (sqlite:///path).
        result = f"{self.driver}://"
        if netloc:
            result += netloc
        result += self.path or ""
        if query_string:
            result += f"?{query_string}"
        return result


def parse_dsn(dsn: str) -> DSNConfig:
    if not dsn or not dsn.strip():
        raise ValueError("DSN must not be blank")
    parsed = urlparse(dsn)
    if not parsed.scheme:
        raise ValueError(f"DSN '{dsn}' is missing a scheme")
    query = {k: v[0] for k, v in parse_qs(parsed.query).items()}
    return DSNConfig(
        driver=parsed.scheme,
        username=parsed.username,
        password=parsed.password,
        host=parsed.hostname,
        port=parsed.port,
        database=parsed.path.lstrip("/") or None,
        path=parsed.path or "",
        query=query,
    )
