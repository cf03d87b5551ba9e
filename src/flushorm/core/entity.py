"""
Entity base class and declaration metadata.
"""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional, Type

from ..utils import camel_to_snake
from .fields import AutoField, Field


class EntityConfigurationError(Exception):
    """Raised when an entity class is misdeclared."""


@dataclass
class EntityOptions:
    """
    Declaration-level metadata collected by :class:`EntityMeta`.
    """

    entity: Type["Entity"]
    entity_name: str = ""
    table_name: str = ""
    schema: Optional[str] = None
    abstract: bool = False
    fields: "OrderedDict[str, Field]" = field(default_factory=OrderedDict)
    primary_key: Optional[Field] = None

    def add_field(self, field_obj: Field) -> None:
        if field_obj.name in self.fields:
            raise EntityConfigurationError(
                f"Duplicate field name '{field_obj.name}' on entity '{self.entity.__name__}'"
            )
        self.fields[field_obj.name] = field_obj
        if field_obj.primary_key:
            if self.primary_key and self.primary_key is not field_obj:
                raise EntityConfigurationError(
                    f"Multiple primary keys defined on entity '{self.entity.__name__}'"
                )
            self.primary_key = field_obj

    @property
    def table(self) -> str:
        if self.schema:
            return f"{self.schema}.{self.table_name}"
        return self.table_name

    def get_field(self, name: str) -> Field:
        try:
            return self.fields[name]
        except KeyError as exc:
            raise KeyError(f"Unknown field '{name}' on entity '{self.entity.__name__}'") from exc

    def get_fields(self) -> Iterable[Field]:
        return self.fields.values()


class EntityMeta(type):
    """
    Metaclass collecting field descriptors in declaration order.
    """

    def __new__(mcls, name: str, bases: tuple[type, ...], attrs: Dict[str, Any]) -> "EntityMeta":
        if not bases:
            return super().__new__(mcls, name, bases, attrs)

        declared_fields: Dict[str, Field] = {}
        for attr_name, value in list(attrs.items()):
            if isinstance(value, Field):
                declared_fields[attr_name] = attrs.pop(attr_name)

        cls = super().__new__(mcls, name, bases, attrs)

        meta = attrs.get("Meta")
        entity_name = name
        table_name = camel_to_snake(name)
        schema = None
        abstract = False
        if meta:
            entity_name = getattr(meta, "entity_name", entity_name)
            table_name = getattr(meta, "table", table_name)
            schema = getattr(meta, "schema", None)
            abstract = getattr(meta, "abstract", False)

        cls._meta = EntityOptions(
            entity=cls,
            entity_name=entity_name,
            table_name=table_name,
            schema=schema,
            abstract=abstract,
        )

        for base in reversed(cls.__mro__[1:]):
            base_meta = base.__dict__.get("_meta")
            if base_meta is None or not base_meta.abstract:
                continue
            for attr_name, inherited in base_meta.fields.items():
                if attr_name in declared_fields:
                    continue
                inherited_field = inherited.clone()
                inherited_field.contribute_to_class(cls, attr_name)
                cls._meta.add_field(inherited_field)

        sorted_fields = sorted(declared_fields.items(), key=lambda item: item[1].creation_counter)
        for attr_name, field_obj in sorted_fields:
            field_obj.contribute_to_class(cls, attr_name)
            cls._meta.add_field(field_obj)

        if not cls._meta.primary_key and not cls._meta.abstract:
            if "id" in cls._meta.fields:
                raise EntityConfigurationError(
                    f"Entity '{cls.__name__}' defines a field named 'id' but no primary key. "
                    "Either set primary_key=True on that field or define a different name."
                )
            auto_field = AutoField()
            auto_field.contribute_to_class(cls, "id")
            cls._meta.add_field(auto_field)
            cls._meta.fields = OrderedDict(
                sorted(
                    cls._meta.fields.items(),
                    key=lambda item: (0 if item[0] == "id" else 1, item[1].creation_counter),
                )
            )

        return cls


class Entity(metaclass=EntityMeta):
    """
    Base class for persistent objects. Instances are plain data holders; all
    persistence goes through a :class:`~flushorm.persistence.Session`.
    """

    _meta: EntityOptions

    def __init__(self, **kwargs: Any) -> None:
        self._field_values: Dict[str, Any] = {}

        unknown = set(kwargs) - set(self._meta.fields)
        if unknown:
            raise TypeError(
                f"{self.__class__.__name__}() got unexpected field(s): {', '.join(sorted(unknown))}"
            )

        for field_obj in self._meta.get_fields():
            if field_obj.name in kwargs:
                setattr(self, field_obj.name, kwargs[field_obj.name])
            elif field_obj.has_default:
                setattr(self, field_obj.name, field_obj.get_default())

    @classmethod
    def instantiate(cls) -> "Entity":
        """
        Create an empty instance without applying defaults; used when
        materializing rows.
        """
        instance = cls.__new__(cls)
        instance._field_values = {}
        return instance

    def __repr__(self) -> str:
        field_parts = ", ".join(
            f"{name}={self._field_values[name]!r}"
            for name in self._meta.fields
            if name in self._field_values
        )
        return f"<{self.__class__.__name__} {field_parts}>"

    @property
    def pk(self) -> Any:
        if not self._meta.primary_key:
            raise EntityConfigurationError(
                f"Entity '{self.__class__.__name__}' does not define a primary key."
            )
        return getattr(self, self._meta.primary_key.name)

    def to_dict(self) -> Dict[str, Any]:
        return {name: getattr(self, name) for name in self._meta.fields}

    # Validation --------------------------------------------------------
    def full_clean(self) -> None:
        from ..validation import validate_instance

        validate_instance(self)

    def clean(self) -> None:
        """
        Hook for subclasses to implement entity-level validation.
        """
        return None

    @classmethod
    def register_hook(cls, event: str, handler) -> None:
        from ..hooks import hooks

        hooks.register(event, handler, entity=cls)
