"""
Identity map ensuring a single in-memory instance per row.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterator

from .errors import EntityKeyError


@dataclass(frozen=True)
class EntityKey:
    """
    Identity of a row: the entity type plus its identifier value.
    """

    entity_type: type
    identifier: Any

    def __post_init__(self) -> None:
        if self.entity_type is None:
            raise EntityKeyError("Entity type must not be None")
        if self.identifier is None:
            raise EntityKeyError(
                f"Identifier of {self.entity_type.__name__} must not be None"
            )

    def __repr__(self) -> str:
        return f"EntityKey({self.entity_type.__name__}, {self.identifier!r})"


class IdentityMap:
    """
    Stores entity instances keyed by :class:`EntityKey`.
    """

    def __init__(self) -> None:
        self._store: Dict[EntityKey, Any] = {}

    def get(self, key: EntityKey) -> Any | None:
        return self._store.get(key)

    def bind(self, key: EntityKey, entity: Any) -> None:
        self._store[key] = entity

    def release(self, key: EntityKey, entity: Any) -> None:
        """
        Drop ``key`` if it is still bound to ``entity``.
        """
        if self._store.get(key) is entity:
            del self._store[key]

    def clear(self) -> None:
        self._store.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._store

    def __iter__(self) -> Iterator[EntityKey]:
        return iter(list(self._store))

    def __len__(self) -> int:
        return len(self._store)
