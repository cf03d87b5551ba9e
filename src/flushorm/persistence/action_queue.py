"""
Action queue batching entity writes until flush.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, List, Optional, Set, Tuple

from ..utils import get_logger
from .actions import (
    DeleteAction,
    EntityAction,
    GeneratedKeyCallback,
    InsertAction,
    UpdateAction,
)

if TYPE_CHECKING:
    from .entry import EntityEntry
    from .persisters import EntityDeleter, EntityPersister, EntityUpdater


class ActionQueue:
    """
    Holds pending insertions, updates and deletions.

    ``execute_actions`` always runs insertions first, then updates, then
    deletions, each list in the order actions were added. The queue is left
    untouched when an action fails; callers clear it explicitly.
    """

    def __init__(
        self,
        persister: "EntityPersister",
        updater: "EntityUpdater",
        deleter: "EntityDeleter",
    ) -> None:
        self.persister = persister
        self.updater = updater
        self.deleter = deleter
        self.insertions: List[InsertAction] = []
        self.updates: List[UpdateAction] = []
        self.deletions: List[DeleteAction] = []
        self._pending_inserts: Set[int] = set()
        self.logger = get_logger("persistence.action_queue")

    # Registration -------------------------------------------------------
    def add_insertion(
        self,
        entity: Any,
        entry: Optional["EntityEntry"] = None,
        on_generated_key: Optional[GeneratedKeyCallback] = None,
    ) -> None:
        self.insertions.append(InsertAction(entity, self.persister, entry, on_generated_key))
        self._pending_inserts.add(id(entity))

    def add_update(self, entity: Any, entry: "EntityEntry") -> None:
        self.updates.append(UpdateAction(entity, entry, self.updater))

    def add_deletion(self, entity: Any) -> None:
        self.deletions.append(DeleteAction(entity, self.deleter))

    def has_pending_insertion(self, entity: Any) -> bool:
        return id(entity) in self._pending_inserts

    # Execution ----------------------------------------------------------
    def execute_actions(self, connection: Any) -> None:
        actions = self.pending()
        if not actions:
            return
        self.logger.debug(
            "Executing %d insert(s), %d update(s), %d delete(s)",
            len(self.insertions),
            len(self.updates),
            len(self.deletions),
        )
        for action in actions:
            action.execute(connection)

    def pending(self) -> Tuple[EntityAction, ...]:
        return (*self.insertions, *self.updates, *self.deletions)

    def clear(self) -> None:
        self.insertions.clear()
        self.updates.clear()
        self.deletions.clear()
        self._pending_inserts.clear()

    def is_empty(self) -> bool:
        return not (self.insertions or self.updates or self.deletions)

    def __len__(self) -> int:
        return len(self.insertions) + len(self.updates) + len(self.deletions)
