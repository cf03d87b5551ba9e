"""
Builds :class:`EntityMetadata` from entity declarations.
"""

from __future__ import annotations

from typing import Any

from ..core.entity import Entity
from ..core.fields import Field
from ..utils import get_logger
from ..utils.naming import is_valid_identifier
from .descriptors import AttributeMetadata, EntityMetadata, IdentifierMetadata
from .errors import MappingError


class EntityMetadataProcessor:
    """
    Resolves the identifier, the ordered attribute list and the accessor
    pairs for an entity class.
    """

    def __init__(self) -> None:
        self.logger = get_logger("metadata.processor")

    def process(self, entity_type: Any) -> EntityMetadata:
        if not isinstance(entity_type, type) or not issubclass(entity_type, Entity):
            raise MappingError(f"{entity_type!r} is not an entity class")
        options = getattr(entity_type, "_meta", None)
        if options is None:
            raise MappingError(f"{entity_type.__name__} does not declare any fields")
        if options.abstract:
            raise MappingError(f"Abstract entity '{entity_type.__name__}' cannot be mapped")
        if options.primary_key is None:
            raise MappingError(f"Entity '{entity_type.__name__}' has no identifier field")

        self._check_identifier(options.table_name, "table")
        if options.schema:
            self._check_identifier(options.schema, "schema")

        pk = options.primary_key
        identifier = IdentifierMetadata(
            name=pk.require_name(),
            column_name=self._column(pk),
            python_type=pk.python_type,
            getter=pk.value_from,
            setter=pk.assign,
            generated=pk.generated,
            db_type=pk.db_type,
            field=pk,
        )
        attributes = tuple(
            AttributeMetadata(
                name=field.require_name(),
                column_name=self._column(field),
                python_type=field.python_type,
                getter=field.value_from,
                setter=field.assign,
                nullable=field.nullable,
                unique=field.unique,
                insertable=field.insertable,
                updatable=field.updatable,
                db_type=field.db_type,
                field=field,
            )
            for field in options.get_fields()
            if field is not pk
        )
        metadata = EntityMetadata(
            entity_type=entity_type,
            entity_name=options.entity_name,
            table_name=options.table,
            identifier=identifier,
            attributes=attributes,
            factory=entity_type.instantiate,
        )
        self.logger.debug(
            "Processed entity %s -> %s (%d attributes)",
            metadata.entity_name,
            metadata.table_name,
            len(attributes),
        )
        return metadata

    def _column(self, field: Field) -> str:
        column = field.column_name()
        self._check_identifier(column, "column")
        return column

    @staticmethod
    def _check_identifier(name: str, kind: str) -> None:
        if not is_valid_identifier(name):
            raise MappingError(f"Invalid {kind} name '{name}'")
