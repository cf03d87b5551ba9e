"""
Per-instance bookkeeping held by the persistence context.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any, Iterable, Optional, Tuple

from .errors import InvalidStateError

if TYPE_CHECKING:
    from ..metadata import EntityMetadata
    from .identity_map import EntityKey


class EntityStatus(Enum):
    MANAGED = "managed"
    REMOVED = "removed"
    DETACHED = "detached"


class EntityEntry:
    """
    Tracks one entity instance: its loaded-state snapshot, lifecycle status
    and the identity-map key it occupies (``None`` until a generated
    identifier is known).
    """

    __slots__ = ("entity", "snapshot", "status", "key")

    def __init__(
        self,
        entity: Any,
        snapshot: Iterable[Any],
        key: Optional["EntityKey"] = None,
    ) -> None:
        self.entity = entity
        self.snapshot: Tuple[Any, ...] = tuple(snapshot)
        self.status = EntityStatus.MANAGED
        self.key = key

    def __repr__(self) -> str:
        return f"<EntityEntry {type(self.entity).__name__} {self.status.value} key={self.key!r}>"

    @property
    def is_managed(self) -> bool:
        return self.status is EntityStatus.MANAGED

    @property
    def is_removed(self) -> bool:
        return self.status is EntityStatus.REMOVED

    @property
    def is_detached(self) -> bool:
        return self.status is EntityStatus.DETACHED

    def mark_removed(self) -> None:
        if self.status is not EntityStatus.MANAGED:
            raise InvalidStateError(
                f"Cannot remove a {self.status.value} {type(self.entity).__name__}"
            )
        self.status = EntityStatus.REMOVED

    def mark_detached(self) -> None:
        if self.status is EntityStatus.DETACHED:
            raise InvalidStateError(f"{type(self.entity).__name__} is already detached")
        self.status = EntityStatus.DETACHED

    def update_snapshot(self, values: Iterable[Any]) -> None:
        values = tuple(values)
        if len(values) != len(self.snapshot):
            raise ValueError(
                f"Snapshot length mismatch: expected {len(self.snapshot)}, got {len(values)}"
            )
        self.snapshot = values

    def is_modified(self, metadata: "EntityMetadata") -> bool:
        if self.status is not EntityStatus.MANAGED:
            return False
        return metadata.snapshot(self.entity) != self.snapshot
