"""
Schema builder converting entity metadata into DDL statements.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

from ..core.relations import ForeignKey
from ..dialects.base import Dialect
from ..metadata import EntityMetadata, MappingError, MetadataRegistry, metadata_registry
from ..utils import get_logger


class SchemaBuilder:
    """
    Produces dialect-specific CREATE/DROP TABLE statements.
    """

    def __init__(self, dialect: Dialect, registry: Optional[MetadataRegistry] = None) -> None:
        self.dialect = dialect
        self.registry = registry or metadata_registry
        self.logger = get_logger("schema.builder")

    def create_table_sql(self, metadata: EntityMetadata) -> str:
        column_list = ", ".join(self._render_columns(metadata))
        table_name = self.dialect.format_table(metadata.table_name)
        return f"CREATE TABLE IF NOT EXISTS {table_name} ({column_list})"

    def drop_table_sql(self, metadata: EntityMetadata) -> str:
        table_name = self.dialect.format_table(metadata.table_name)
        self.logger.warning("DROP TABLE generated for %s", table_name)
        return f"DROP TABLE IF EXISTS {table_name}"

    def create_all_sql(self, entities: Iterable[EntityMetadata]) -> List[str]:
        return [self.create_table_sql(metadata) for metadata in self.dependency_order(entities)]

    def drop_all_sql(self, entities: Iterable[EntityMetadata]) -> List[str]:
        ordered = self.dependency_order(entities)
        return [self.drop_table_sql(metadata) for metadata in reversed(ordered)]

    def dependency_order(self, entities: Iterable[EntityMetadata]) -> List[EntityMetadata]:
        """
        Order entities so that referenced tables come before referencing ones.
        """
        pending = list(entities)
        names = {metadata.entity_name for metadata in pending}
        ordered: List[EntityMetadata] = []
        placed: set[str] = set()
        while pending:
            progressed = False
            for metadata in list(pending):
                targets = {
                    target
                    for target in self._references(metadata)
                    if target in names and target != metadata.entity_name
                }
                if targets <= placed:
                    ordered.append(metadata)
                    placed.add(metadata.entity_name)
                    pending.remove(metadata)
                    progressed = True
            if not progressed:
                # reference cycle: keep declaration order for the remainder
                ordered.extend(pending)
                break
        return ordered

    # ------------------------------------------------------------------ #
    def _render_columns(self, metadata: EntityMetadata) -> List[str]:
        identifier = metadata.identifier
        if identifier.generated:
            pieces = [self.dialect.render_generated_key(identifier.column_name)]
        else:
            pieces = [
                f"{self._column(identifier.column_name, identifier.db_type, nullable=False)} PRIMARY KEY"
            ]
        for attribute in metadata.attributes:
            db_type = attribute.db_type
            if db_type is None and isinstance(attribute.field, ForeignKey):
                db_type = self._reference_type(attribute.field)
            column_def = self._column(attribute.column_name, db_type, nullable=attribute.nullable)
            extras: List[str] = []
            if attribute.unique:
                extras.append("UNIQUE")
            if isinstance(attribute.field, ForeignKey):
                extras.append(self._references_clause(attribute.field))
            if extras:
                column_def = f"{column_def} {' '.join(extras)}"
            pieces.append(column_def)
        return pieces

    def _column(self, column: str, db_type: Optional[str], *, nullable: bool) -> str:
        if not db_type:
            raise MappingError(f"Column '{column}' has no db_type for schema generation")
        return self.dialect.render_column_definition(column, db_type, nullable=nullable)

    def _reference_type(self, field: ForeignKey) -> Optional[str]:
        target = self.registry.get_metadata_by_entity_name(field.target_name()).identifier
        if target.generated:
            return self.dialect.capabilities.generated_key_type
        return target.db_type

    def _references_clause(self, field: ForeignKey) -> str:
        target = self.registry.get_metadata_by_entity_name(field.target_name())
        table = self.dialect.format_table(target.table_name)
        column = self.dialect.quote_identifier(target.identifier.column_name)
        return f"REFERENCES {table} ({column}) ON DELETE {field.on_delete}"

    @staticmethod
    def _references(metadata: EntityMetadata) -> Sequence[str]:
        return [
            attribute.field.target_name()
            for attribute in metadata.attributes
            if isinstance(attribute.field, ForeignKey)
        ]
