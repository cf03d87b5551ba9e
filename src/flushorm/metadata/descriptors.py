"""
Static descriptor tables describing how an entity type maps to a table.

Descriptors are built once per entity type during registration; the
accessor pairs they hold are resolved at that point so per-call access never
goes through attribute name lookup.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional, Tuple

from .errors import MappingError

if TYPE_CHECKING:
    from ..core.fields import Field

Getter = Callable[[Any], Any]
Setter = Callable[[Any, Any], None]


@dataclass(frozen=True)
class AttributeMetadata:
    """
    One non-identifier column.
    """

    name: str
    column_name: str
    python_type: type
    getter: Getter = field(repr=False, compare=False)
    setter: Setter = field(repr=False, compare=False)
    nullable: bool = True
    unique: bool = False
    insertable: bool = True
    updatable: bool = True
    db_type: Optional[str] = None
    field: Optional["Field"] = field(default=None, repr=False, compare=False)

    def get_value(self, entity: Any) -> Any:
        return self.getter(entity)

    def set_value(self, entity: Any, value: Any) -> None:
        self.setter(entity, value)


@dataclass(frozen=True)
class IdentifierMetadata:
    """
    The identifier column. ``generated`` identifiers are assigned by the
    database during INSERT.
    """

    name: str
    column_name: str
    python_type: type
    getter: Getter = field(repr=False, compare=False)
    setter: Setter = field(repr=False, compare=False)
    generated: bool = False
    db_type: Optional[str] = None
    field: Optional["Field"] = field(default=None, repr=False, compare=False)

    def get_value(self, entity: Any) -> Any:
        return self.getter(entity)

    def set_value(self, entity: Any, value: Any) -> None:
        self.setter(entity, value)


@dataclass(frozen=True)
class EntityMetadata:
    entity_type: type
    entity_name: str
    table_name: str
    identifier: IdentifierMetadata
    attributes: Tuple[AttributeMetadata, ...]
    factory: Callable[[], Any] = field(repr=False, compare=False)
    _by_name: Dict[str, AttributeMetadata] = field(
        default_factory=dict, init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        # frozen dataclass: populate the lookup table once.
        self._by_name.update({attribute.name: attribute for attribute in self.attributes})

    def get_attribute(self, name: str) -> AttributeMetadata:
        try:
            return self._by_name[name]
        except KeyError as exc:
            raise MappingError(
                f"Entity '{self.entity_name}' has no attribute named '{name}'"
            ) from exc

    def column_for(self, name: str) -> str:
        """
        Column for an attribute or the identifier, by attribute name.
        """
        if name == self.identifier.name:
            return self.identifier.column_name
        return self.get_attribute(name).column_name

    def identifier_value(self, entity: Any) -> Any:
        return self.identifier.get_value(entity)

    def snapshot(self, entity: Any) -> Tuple[Any, ...]:
        """
        Current attribute values in declaration order, identifier excluded.
        """
        return tuple(attribute.get_value(entity) for attribute in self.attributes)

    def column_names(self) -> Tuple[str, ...]:
        return (self.identifier.column_name,) + tuple(a.column_name for a in self.attributes)
