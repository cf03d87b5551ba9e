"""
Persistence context: the first-level cache and change tracker of a session.
"""

from __future__ import annotations

import weakref
from typing import Any, Dict, Iterator, Optional, Tuple

from ..metadata import EntityMetadata, MetadataRegistry, metadata_registry
from ..utils import get_logger
from .action_queue import ActionQueue
from .entry import EntityEntry, EntityStatus
from .errors import DuplicateIdentityError, EntityKeyError, InvalidStateError, NotManagedError
from .identity_map import EntityKey, IdentityMap


class PersistenceContext:
    """
    Tracks every entity instance a session manages.

    Two maps are kept: the identity map (``EntityKey`` to instance) and the
    entry map (instance identity to :class:`EntityEntry`). Entries hold a
    strong reference to their entity, which keeps ``id(entity)`` stable for
    as long as the instance is tracked.
    """

    def __init__(
        self,
        action_queue: ActionQueue,
        registry: Optional[MetadataRegistry] = None,
    ) -> None:
        self.action_queue = action_queue
        self.registry = registry or metadata_registry
        self.identity_map = IdentityMap()
        self._entries: Dict[int, EntityEntry] = {}
        self._detached: "weakref.WeakSet[Any]" = weakref.WeakSet()
        self.logger = get_logger("persistence.context")

    # Registration -------------------------------------------------------
    def add_entity(self, entity: Any) -> EntityEntry:
        """
        Start managing a new entity and schedule its INSERT.
        """
        existing = self._entries.get(id(entity))
        if existing is not None:
            return existing
        if entity in self._detached:
            raise InvalidStateError(
                f"Cannot persist a detached {type(entity).__name__}; its row is already written"
            )
        metadata = self._metadata(entity)
        entry = self._track(entity, metadata)
        on_generated_key = self._bind_generated_key if entry.key is None else None
        self.action_queue.add_insertion(entity, entry, on_generated_key)
        return entry

    def register_loaded(self, entity: Any) -> EntityEntry:
        """
        Start managing an instance that already has a row; nothing is queued.
        """
        existing = self._entries.get(id(entity))
        if existing is not None:
            return existing
        metadata = self._metadata(entity)
        if metadata.identifier_value(entity) is None:
            raise EntityKeyError(
                f"Loaded {metadata.entity_name} instance has no identifier value"
            )
        return self._track(entity, metadata)

    def get_entity(self, entity_type: type, identifier: Any) -> Any | None:
        return self.identity_map.get(EntityKey(entity_type, identifier))

    def get_entry(self, entity: Any) -> EntityEntry | None:
        return self._entries.get(id(entity))

    def contains(self, entity: Any) -> bool:
        return id(entity) in self._entries

    def remove_entity(self, entity: Any) -> None:
        entry = self._require_entry(entity)
        if entry.status is not EntityStatus.MANAGED:
            raise InvalidStateError(
                f"Cannot remove a {entry.status.value} {type(entity).__name__}"
            )
        entry.mark_removed()
        self.action_queue.add_deletion(entity)

    def detach(self, entity: Any) -> None:
        entry = self._require_entry(entity)
        entry.mark_detached()
        if entry.key is not None:
            self.identity_map.release(entry.key, entity)
        del self._entries[id(entity)]
        self._detached.add(entity)

    # Flush --------------------------------------------------------------
    def flush(self, connection: Any) -> None:
        """
        Queue updates for modified entities, run every pending action and
        evict removed entities. Nothing is evicted or cleared if an action
        fails.
        """
        for entry in list(self._entries.values()):
            if not entry.is_managed or self.action_queue.has_pending_insertion(entry.entity):
                continue
            if entry.is_modified(self._metadata(entry.entity)):
                self.action_queue.add_update(entry.entity, entry)

        self.action_queue.execute_actions(connection)
        self.action_queue.clear()

        for entity_id, entry in list(self._entries.items()):
            if entry.is_removed:
                if entry.key is not None:
                    self.identity_map.release(entry.key, entry.entity)
                del self._entries[entity_id]

    def clear(self) -> None:
        self.identity_map.clear()
        self._entries.clear()
        self.action_queue.clear()

    # Introspection ------------------------------------------------------
    def entries(self) -> Tuple[EntityEntry, ...]:
        return tuple(self._entries.values())

    def __iter__(self) -> Iterator[Any]:
        return iter([entry.entity for entry in self._entries.values()])

    def __len__(self) -> int:
        return len(self._entries)

    # Internal helpers ---------------------------------------------------
    def _metadata(self, entity: Any) -> EntityMetadata:
        if entity is None:
            raise ValueError("Entity must not be None")
        return self.registry.scan_and_register(type(entity))

    def _track(self, entity: Any, metadata: EntityMetadata) -> EntityEntry:
        identifier = metadata.identifier_value(entity)
        key: EntityKey | None = None
        if identifier is not None:
            key = EntityKey(type(entity), identifier)
            self._claim(key, entity)
        elif not metadata.identifier.generated:
            raise EntityKeyError(
                f"{metadata.entity_name} requires an identifier value before it can be persisted"
            )
        entry = EntityEntry(entity, metadata.snapshot(entity), key)
        self._entries[id(entity)] = entry
        if key is not None:
            self.identity_map.bind(key, entity)
        return entry

    def _claim(self, key: EntityKey, entity: Any) -> None:
        current = self.identity_map.get(key)
        if current is not None and current is not entity:
            raise DuplicateIdentityError(f"Another instance is already managed as {key!r}")

    def _bind_generated_key(self, entity: Any, identifier: Any) -> None:
        entry = self._entries.get(id(entity))
        if entry is None or entry.key is not None:
            return
        key = EntityKey(type(entity), identifier)
        self._claim(key, entity)
        entry.key = key
        if entry.is_managed or entry.is_removed:
            self.identity_map.bind(key, entity)
        self.logger.debug("Bound generated identifier %r", key)

    def _require_entry(self, entity: Any) -> EntityEntry:
        if entity is None:
            raise ValueError("Entity must not be None")
        entry = self._entries.get(id(entity))
        if entry is None:
            raise NotManagedError(f"{type(entity).__name__} instance is not managed")
        return entry
