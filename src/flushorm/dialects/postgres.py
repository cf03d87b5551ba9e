"""
PostgreSQL dialect.
"""

from __future__ import annotations

from .base import Dialect, DialectCapabilities


class PostgresDialect(Dialect):
    """
    Identity columns whose generated keys are read back with ``RETURNING``.
    """

    name = "postgresql"
    placeholder = "%s"
    capabilities = DialectCapabilities(
        supports_returning=True,
        supports_schema_namespaces=True,
        generated_key_type="BIGINT",
        generated_key_clause="GENERATED BY DEFAULT AS IDENTITY PRIMARY KEY",
    )
