"""
Persisters turning entity state into statements and rows back into entities.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple

from ..dialects.base import Dialect
from ..engine.executor import StatementExecutor
from ..metadata import (
    AttributeMetadata,
    CodecRegistry,
    EntityMetadata,
    MetadataRegistry,
    default_codecs,
    metadata_registry,
)
from ..sql.generators import (
    DeleteSqlGenerator,
    InsertSqlGenerator,
    SelectSqlGenerator,
    UpdateSqlGenerator,
)
from ..utils import get_logger
from ..validation import validate_instance

if TYPE_CHECKING:
    from ..hooks import HookDispatcher


def _changed_attributes(
    metadata: EntityMetadata, snapshot: Tuple[Any, ...], current: Tuple[Any, ...]
) -> List[AttributeMetadata]:
    return [
        attribute
        for attribute, before, after in zip(metadata.attributes, snapshot, current)
        if before != after
    ]


class _EntityStatementRunner:
    def __init__(
        self,
        dialect: Dialect,
        executor: StatementExecutor,
        *,
        registry: Optional[MetadataRegistry] = None,
        codecs: Optional[CodecRegistry] = None,
        hooks: Optional["HookDispatcher"] = None,
    ) -> None:
        self.dialect = dialect
        self.executor = executor
        self.registry = registry or metadata_registry
        self.codecs = codecs or default_codecs(dialect.name)
        if hooks is None:
            from ..hooks import hooks as default_hooks

            hooks = default_hooks
        self.hooks = hooks

    def metadata(self, entity_type: type) -> EntityMetadata:
        return self.registry.scan_and_register(entity_type)

    def snapshot(self, entity: Any) -> Tuple[Any, ...]:
        return self.metadata(type(entity)).snapshot(entity)

    def _validate(self, entity: Any) -> None:
        if hasattr(entity, "_meta"):
            validate_instance(entity)


class EntityPersister(_EntityStatementRunner):
    """
    Writes new entities. Validation and the ``before_insert`` hook run before
    the statement is built.
    """

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.generator = InsertSqlGenerator(self.dialect, self.codecs)
        self.logger = get_logger("persistence.persister")

    def insert(self, connection: Any, entity: Any) -> Any | None:
        """
        Insert ``entity`` and return the database-generated identifier, if any.
        """
        metadata = self.metadata(type(entity))
        self.hooks.fire("before_insert", entity)
        self._validate(entity)
        statement = self.generator.generate(metadata, entity)
        generated = self.executor.execute_insert(connection, statement)
        if generated is not None:
            generated = self.codecs.decode(generated, metadata.identifier.python_type)
            metadata.identifier.set_value(entity, generated)
        self.hooks.fire("after_insert", entity)
        return generated


class EntityUpdater(_EntityStatementRunner):
    """
    Writes the attributes that changed since the last snapshot.
    """

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.generator = UpdateSqlGenerator(self.dialect, self.codecs)
        self.logger = get_logger("persistence.updater")

    def update(self, connection: Any, entity: Any, snapshot: Tuple[Any, ...]) -> Tuple[Any, ...]:
        """
        Run the UPDATE and return the snapshot the entry should now hold.
        """
        metadata = self.metadata(type(entity))
        current = metadata.snapshot(entity)
        changed = _changed_attributes(metadata, snapshot, current)
        if not changed:
            return current

        self.hooks.fire("before_update", entity, changed=tuple(a.name for a in changed))
        self._validate(entity)
        # hooks may have touched further attributes
        current = metadata.snapshot(entity)
        changed = _changed_attributes(metadata, snapshot, current)
        statement = self.generator.generate(metadata, entity, changed)
        if statement is not None:
            affected = self.executor.execute_update(connection, statement)
            if affected == 0:
                self.logger.warning(
                    "UPDATE matched no row for %s id=%r",
                    metadata.entity_name,
                    metadata.identifier_value(entity),
                )
        self.hooks.fire("after_update", entity)
        return current


class EntityDeleter(_EntityStatementRunner):
    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.generator = DeleteSqlGenerator(self.dialect, self.codecs)
        self.logger = get_logger("persistence.deleter")

    def delete(self, connection: Any, entity: Any) -> int:
        metadata = self.metadata(type(entity))
        self.hooks.fire("before_delete", entity)
        statement = self.generator.generate(metadata, metadata.identifier_value(entity))
        affected = self.executor.execute_update(connection, statement)
        if affected == 0:
            self.logger.warning(
                "DELETE matched no row for %s id=%r",
                metadata.entity_name,
                metadata.identifier_value(entity),
            )
        self.hooks.fire("after_delete", entity)
        return affected


class EntityLoader(_EntityStatementRunner):
    """
    Reads rows and materializes entity instances through the attribute
    setters.
    """

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.generator = SelectSqlGenerator(self.dialect, self.codecs)

    def load(self, connection: Any, entity_type: type, identifier: Any) -> Any | None:
        metadata = self.metadata(entity_type)
        statement = self.generator.by_identifier(metadata, identifier)
        rows = self.executor.execute_query(connection, statement)
        if not rows:
            return None
        return self.materialize(metadata, rows[0])

    def materialize(self, metadata: EntityMetadata, row: Dict[str, Any]) -> Any:
        entity = metadata.factory()
        identifier = metadata.identifier
        identifier.set_value(
            entity, self.codecs.decode(row.get(identifier.column_name), identifier.python_type)
        )
        for attribute in metadata.attributes:
            value = row.get(attribute.column_name)
            attribute.set_value(entity, self.codecs.decode(value, attribute.python_type))
        return entity
