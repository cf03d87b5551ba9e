"""
MySQL dialect.
"""

from __future__ import annotations

from .base import Dialect, DialectCapabilities


class MySQLDialect(Dialect):
    """
    Backtick quoting; ``AUTO_INCREMENT`` keys are read from ``cursor.lastrowid``.
    """

    name = "mysql"
    quote_char = "`"
    placeholder = "%s"
    capabilities = DialectCapabilities(
        supports_schema_namespaces=True,
        generated_key_type="BIGINT",
        generated_key_clause="AUTO_INCREMENT PRIMARY KEY",
        empty_insert="() VALUES ()",
    )
