"""
Hook dispatcher coordinating lifecycle events.
"""

from __future__ import annotations

from collections import defaultdict
from threading import RLock
from typing import Any, Callable, Dict, List, Optional

HookHandler = Callable[..., None]

LIFECYCLE_EVENTS = frozenset(
    {
        "before_insert",
        "after_insert",
        "before_update",
        "after_update",
        "before_delete",
        "after_delete",
        "after_commit",
        "after_rollback",
    }
)


class HookDispatcher:
    """
    Maintains global and per-entity hook handlers.

    Handlers are called as ``handler(instance, **context)``. Entity-specific
    handlers run after global ones. Exceptions raised by a handler propagate
    to the caller, aborting the write in progress.
    """

    def __init__(self) -> None:
        self._global_handlers: Dict[str, List[HookHandler]] = defaultdict(list)
        self._entity_handlers: Dict[type, Dict[str, List[HookHandler]]] = defaultdict(
            lambda: defaultdict(list)
        )
        self._lock = RLock()

    def register(self, event: str, handler: HookHandler, *, entity: Optional[type] = None) -> None:
        if event not in LIFECYCLE_EVENTS:
            raise ValueError(f"Unknown lifecycle event '{event}'")
        with self._lock:
            if entity is not None:
                self._entity_handlers[entity][event].append(handler)
            else:
                self._global_handlers[event].append(handler)

    def unregister(self, event: str, handler: HookHandler, *, entity: Optional[type] = None) -> None:
        with self._lock:
            if entity is not None:
                handlers = self._entity_handlers.get(entity, {}).get(event, [])
            else:
                handlers = self._global_handlers.get(event, [])
            if handler in handlers:
                handlers.remove(handler)

    def fire(self, event: str, instance: Any, **context: Any) -> None:
        with self._lock:
            handlers = list(self._global_handlers.get(event, []))
            if instance is not None:
                per_entity = self._entity_handlers.get(type(instance))
                if per_entity:
                    handlers.extend(per_entity.get(event, []))
        for handler in handlers:
            handler(instance, **context)

    def clear(self) -> None:
        with self._lock:
            self._global_handlers.clear()
            self._entity_handlers.clear()


hooks = HookDispatcher()
