"""
Process-wide registry of entity metadata.
"""

from __future__ import annotations

from threading import Lock
from typing import Dict, Optional, Tuple

from ..utils import get_logger
from .descriptors import EntityMetadata
from .errors import MappingError
from .processor import EntityMetadataProcessor


class MetadataRegistry:
    """
    Maps entity types and entity names to :class:`EntityMetadata`.

    Writers serialize on a lock and replace the lookup tables wholesale, so
    readers never lock. The first metadata registered for a type wins; later
    registrations of the same type return the existing entry.
    """

    def __init__(self, processor: Optional[EntityMetadataProcessor] = None) -> None:
        self.processor = processor or EntityMetadataProcessor()
        self._by_type: Dict[type, EntityMetadata] = {}
        self._by_name: Dict[str, EntityMetadata] = {}
        self._lock = Lock()
        self.logger = get_logger("metadata.registry")

    def register(self, entity_type: type, metadata: EntityMetadata) -> EntityMetadata:
        with self._lock:
            existing = self._by_type.get(entity_type)
            if existing is not None:
                return existing
            clash = self._by_name.get(metadata.entity_name)
            if clash is not None and clash.entity_type is not entity_type:
                raise MappingError(
                    f"Entity name '{metadata.entity_name}' is already mapped to "
                    f"{clash.entity_type.__qualname__}"
                )
            by_type = dict(self._by_type)
            by_type[entity_type] = metadata
            by_name = dict(self._by_name)
            by_name[metadata.entity_name] = metadata
            self._by_type = by_type
            self._by_name = by_name
        self.logger.debug("Registered entity %s", metadata.entity_name)
        return metadata

    def scan_and_register(self, entity_type: type) -> EntityMetadata:
        existing = self._by_type.get(entity_type)
        if existing is not None:
            return existing
        return self.register(entity_type, self.processor.process(entity_type))

    def get_metadata(self, entity_type: type) -> EntityMetadata:
        metadata = self._by_type.get(entity_type)
        if metadata is None:
            name = getattr(entity_type, "__name__", repr(entity_type))
            raise MappingError(f"No metadata registered for entity type {name}")
        return metadata

    def get_metadata_by_entity_name(self, entity_name: str) -> EntityMetadata:
        metadata = self._by_name.get(entity_name)
        if metadata is None:
            raise MappingError(f"Unknown entity name '{entity_name}'")
        return metadata

    def has_metadata(self, entity_type: type) -> bool:
        return entity_type in self._by_type

    def registered_types(self) -> Tuple[type, ...]:
        return tuple(self._by_type)


metadata_registry = MetadataRegistry()
