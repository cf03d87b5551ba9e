"""
Backend SQL rendering rules shared by generators, the query translator and
the schema builder.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class DialectCapabilities:
    """
    What a backend supports and how it spells backend-specific DDL and DML.
    """

    supports_returning: bool = False
    supports_schema_namespaces: bool = False
    generated_key_type: str = "INTEGER"
    generated_key_clause: str = "PRIMARY KEY"
    empty_insert: str = "DEFAULT VALUES"


class Dialect:
    """
    Renders identifiers, placeholders and column definitions. Backends are
    declared as subclasses overriding the class attributes only.
    """

    name: str = "generic"
    quote_char: str = '"'
    placeholder: str = "?"
    capabilities: DialectCapabilities = DialectCapabilities()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"

    def quote_identifier(self, identifier: str) -> str:
        quote = self.quote_char
        return f"{quote}{identifier.replace(quote, quote * 2)}{quote}"

    def format_table(self, table_name: str) -> str:
        """
        Quote ``table_name``; ``schema.table`` is split only where the backend
        has schema namespaces.
        """
        if self.capabilities.supports_schema_namespaces and "." in table_name:
            return ".".join(self.quote_identifier(part) for part in table_name.split(".", 1))
        return self.quote_identifier(table_name)

    def parameter_placeholder(self, position: int | None = None) -> str:
        return self.placeholder

    def render_column_definition(self, column: str, column_type: str, *, nullable: bool) -> str:
        definition = f"{self.quote_identifier(column)} {column_type}"
        return definition if nullable else f"{definition} NOT NULL"

    def render_generated_key(self, column: str) -> str:
        capabilities = self.capabilities
        return (
            f"{self.quote_identifier(column)} "
            f"{capabilities.generated_key_type} {capabilities.generated_key_clause}"
        )
