"""
Translation of parsed queries into dialect SQL.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from ..dialects.base import Dialect
from ..metadata import EntityMetadata, MappingError, MetadataRegistry, metadata_registry
from .errors import QuerySyntaxError
from .parser import Parameter, SelectStatement

_SQL_OPERATORS = {"!=": "<>"}


@dataclass(frozen=True)
class TranslatedQuery:
    sql: str
    parameter_order: Tuple[Parameter, ...]
    metadata: EntityMetadata


class QueryTranslator:
    def __init__(self, dialect: Dialect, registry: Optional[MetadataRegistry] = None) -> None:
        self.dialect = dialect
        self.registry = registry or metadata_registry

    def translate(self, statement: SelectStatement) -> TranslatedQuery:
        try:
            metadata = self.registry.get_metadata_by_entity_name(statement.entity_name)
        except MappingError as exc:
            raise QuerySyntaxError(f"Unknown entity '{statement.entity_name}'") from exc

        quote = self.dialect.quote_identifier
        select_list = ", ".join(quote(column) for column in metadata.column_names())
        sql = f"SELECT {select_list} FROM {self.dialect.format_table(metadata.table_name)}"

        clauses: List[str] = []
        order: List[Parameter] = []
        for position, condition in enumerate(statement.conditions, start=1):
            try:
                column = metadata.column_for(condition.attribute)
            except MappingError as exc:
                raise QuerySyntaxError(
                    f"Entity '{metadata.entity_name}' has no attribute '{condition.attribute}'"
                ) from exc
            operator = _SQL_OPERATORS.get(condition.operator, condition.operator)
            placeholder = self.dialect.parameter_placeholder(position)
            clauses.append(f"{quote(column)} {operator} {placeholder}")
            order.append(condition.parameter)
        if clauses:
            sql += " WHERE " + " AND ".join(clauses)
        return TranslatedQuery(sql=sql, parameter_order=tuple(order), metadata=metadata)
