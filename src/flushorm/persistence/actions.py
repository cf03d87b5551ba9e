"""
Staged write actions executed by the action queue during flush.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Optional

if TYPE_CHECKING:
    from .entry import EntityEntry
    from .persisters import EntityDeleter, EntityPersister, EntityUpdater

GeneratedKeyCallback = Callable[[Any, Any], None]


class EntityAction(ABC):
    entity: Any

    @abstractmethod
    def execute(self, connection: Any) -> None:
        """Run the statement for this action on ``connection``."""


@dataclass(frozen=True)
class InsertAction(EntityAction):
    entity: Any
    persister: "EntityPersister" = field(repr=False)
    entry: Optional["EntityEntry"] = field(default=None, repr=False)
    on_generated_key: Optional[GeneratedKeyCallback] = field(default=None, repr=False)

    def execute(self, connection: Any) -> None:
        generated = self.persister.insert(connection, self.entity)
        if generated is not None and self.on_generated_key is not None:
            self.on_generated_key(self.entity, generated)
        if self.entry is not None:
            self.entry.update_snapshot(self.persister.snapshot(self.entity))


@dataclass(frozen=True)
class UpdateAction(EntityAction):
    entity: Any
    entry: "EntityEntry" = field(repr=False)
    updater: "EntityUpdater" = field(repr=False)

    def execute(self, connection: Any) -> None:
        snapshot = self.updater.update(connection, self.entity, self.entry.snapshot)
        self.entry.update_snapshot(snapshot)


@dataclass(frozen=True)
class DeleteAction(EntityAction):
    entity: Any
    deleter: "EntityDeleter" = field(repr=False)

    def execute(self, connection: Any) -> None:
        self.deleter.delete(connection, self.entity)
