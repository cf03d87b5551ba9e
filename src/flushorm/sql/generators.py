"""
Generators rendering parameterized INSERT, UPDATE, DELETE and SELECT
statements from entity metadata.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Tuple

from ..dialects.base import Dialect
from ..metadata import AttributeMetadata, CodecRegistry, EntityMetadata, default_codecs


@dataclass(frozen=True)
class Statement:
    """
    SQL text with its positional parameters.

    ``columns`` names the column each parameter is bound to (used to redact
    sensitive values in logs). ``key_column`` is set on INSERTs whose
    identifier is generated by the database; ``returning`` is true when the
    key is read back through ``RETURNING``.
    """

    sql: str
    params: Tuple[Any, ...] = ()
    columns: Tuple[str, ...] = ()
    table: Optional[str] = None
    key_column: Optional[str] = None
    returning: bool = False


class _SqlGenerator:
    def __init__(self, dialect: Dialect, codecs: Optional[CodecRegistry] = None) -> None:
        self.dialect = dialect
        self.codecs = codecs or default_codecs(dialect.name)

    def _table(self, metadata: EntityMetadata) -> str:
        return self.dialect.format_table(metadata.table_name)

    def _placeholders(self, count: int, start: int = 1) -> List[str]:
        return [self.dialect.parameter_placeholder(start + offset) for offset in range(count)]

    def _encode(self, value: Any) -> Any:
        return self.codecs.encode(value)

    def select_list(self, metadata: EntityMetadata) -> str:
        return ", ".join(self.dialect.quote_identifier(column) for column in metadata.column_names())


class InsertSqlGenerator(_SqlGenerator):
    def generate(self, metadata: EntityMetadata, entity: Any) -> Statement:
        columns: List[str] = []
        params: List[Any] = []

        identifier = metadata.identifier
        identifier_value = identifier.get_value(entity)
        key_column = None
        if identifier_value is None:
            if not identifier.generated:
                raise ValueError(
                    f"{metadata.entity_name} has no identifier value and it is not generated"
                )
            key_column = identifier.column_name
        else:
            columns.append(identifier.column_name)
            params.append(self._encode(identifier_value))

        for attribute in metadata.attributes:
            if not attribute.insertable:
                continue
            columns.append(attribute.column_name)
            params.append(self._encode(attribute.get_value(entity)))

        table = self._table(metadata)
        if columns:
            column_sql = ", ".join(self.dialect.quote_identifier(column) for column in columns)
            placeholder_sql = ", ".join(self._placeholders(len(columns)))
            sql = f"INSERT INTO {table} ({column_sql}) VALUES ({placeholder_sql})"
        else:
            sql = f"INSERT INTO {table} {self.dialect.capabilities.empty_insert}"

        returning = key_column is not None and self.dialect.capabilities.supports_returning
        if returning:
            sql += f" RETURNING {self.dialect.quote_identifier(key_column)}"

        return Statement(
            sql=sql,
            params=tuple(params),
            columns=tuple(columns),
            table=metadata.table_name,
            key_column=key_column,
            returning=returning,
        )


class UpdateSqlGenerator(_SqlGenerator):
    def generate(
        self,
        metadata: EntityMetadata,
        entity: Any,
        attributes: Sequence[AttributeMetadata] | None = None,
    ) -> Statement | None:
        """
        Render an UPDATE setting ``attributes`` (all updatable attributes by
        default). Returns ``None`` when there is nothing to set.
        """
        targets = [
            attribute
            for attribute in (metadata.attributes if attributes is None else attributes)
            if attribute.updatable
        ]
        if not targets:
            return None

        identifier_value = metadata.identifier_value(entity)
        if identifier_value is None:
            raise ValueError(f"Cannot update {metadata.entity_name} without an identifier value")

        placeholders = self._placeholders(len(targets) + 1)
        assignments = ", ".join(
            f"{self.dialect.quote_identifier(attribute.column_name)} = {placeholder}"
            for attribute, placeholder in zip(targets, placeholders)
        )
        key_sql = f"{self.dialect.quote_identifier(metadata.identifier.column_name)} = {placeholders[-1]}"
        params = [self._encode(attribute.get_value(entity)) for attribute in targets]
        params.append(self._encode(identifier_value))
        return Statement(
            sql=f"UPDATE {self._table(metadata)} SET {assignments} WHERE {key_sql}",
            params=tuple(params),
            columns=tuple(a.column_name for a in targets) + (metadata.identifier.column_name,),
            table=metadata.table_name,
        )


class DeleteSqlGenerator(_SqlGenerator):
    def generate(self, metadata: EntityMetadata, identifier: Any) -> Statement:
        if identifier is None:
            raise ValueError(f"Cannot delete {metadata.entity_name} without an identifier value")
        key_sql = (
            f"{self.dialect.quote_identifier(metadata.identifier.column_name)} = "
            f"{self.dialect.parameter_placeholder(1)}"
        )
        return Statement(
            sql=f"DELETE FROM {self._table(metadata)} WHERE {key_sql}",
            params=(self._encode(identifier),),
            columns=(metadata.identifier.column_name,),
            table=metadata.table_name,
        )


class SelectSqlGenerator(_SqlGenerator):
    def by_identifier(self, metadata: EntityMetadata, identifier: Any) -> Statement:
        key_sql = (
            f"{self.dialect.quote_identifier(metadata.identifier.column_name)} = "
            f"{self.dialect.parameter_placeholder(1)}"
        )
        return Statement(
            sql=f"SELECT {self.select_list(metadata)} FROM {self._table(metadata)} WHERE {key_sql}",
            params=(self._encode(identifier),),
            columns=(metadata.identifier.column_name,),
            table=metadata.table_name,
        )
