"""
SQLite dialect.
"""

from __future__ import annotations

from .base import Dialect, DialectCapabilities


class SQLiteDialect(Dialect):
    """
    qmark placeholders; generated keys come from ``cursor.lastrowid``.
    """

    name = "sqlite"
    capabilities = DialectCapabilities(generated_key_clause="PRIMARY KEY AUTOINCREMENT")
