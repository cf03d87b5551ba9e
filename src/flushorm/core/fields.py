"""
Field descriptors used to declare entity attributes.
"""

from __future__ import annotations

import copy
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING, Any, Callable, Iterable, Optional, Sequence, cast

if TYPE_CHECKING:
    from .entity import Entity


class FieldError(Exception):
    """Internal exception for field configuration issues."""


class Field:
    """
    Base class for entity field descriptors.

    Fields store attribute values on the instance and carry the column
    metadata later turned into :class:`~flushorm.metadata.AttributeMetadata`.
    """

    python_type: type = object
    _creation_counter = 0

    def __init__(
        self,
        *,
        primary_key: bool = False,
        unique: bool = False,
        nullable: bool = True,
        default: Any = None,
        db_type: Optional[str] = None,
        db_column: Optional[str] = None,
        insertable: bool = True,
        updatable: bool = True,
        choices: Optional[Sequence[Any]] = None,
        validators: Optional[Iterable[Callable[[Any], None]]] = None,
    ) -> None:
        self.primary_key = primary_key
        self.unique = unique
        self.nullable = nullable
        self.default = default
        self.db_type = db_type
        self.db_column = db_column
        self.insertable = insertable
        self.updatable = updatable
        self.choices = tuple(choices) if choices is not None else None
        self.validators = list(validators or [])

        self.entity: type["Entity"] | None = None
        self.name: str | None = None
        self.creation_counter = Field._creation_counter
        Field._creation_counter += 1

    # Descriptor protocol -------------------------------------------------
    def __get__(self, instance: object | None, owner: type | None = None) -> Any:
        if instance is None:
            return self
        return self.value_from(instance)

    def __set__(self, instance: object, value: Any) -> None:
        name = self.require_name()
        if value is None:
            if not self.nullable and not self.primary_key:
                raise ValueError(f"Field '{name}' cannot be None")
            self.assign(instance, None)
            return

        if self.choices and value not in self.choices:
            raise ValueError(f"Value '{value}' for field '{name}' not in choices {self.choices}")

        self.assign(instance, self.to_python(value))

    # Accessor pair -------------------------------------------------------
    def value_from(self, instance: object) -> Any:
        """
        Read the stored value without triggering defaults.
        """
        entity = cast("Entity", instance)
        return entity._field_values.get(self.require_name())

    def assign(self, instance: object, value: Any) -> None:
        """
        Store ``value`` as-is, bypassing conversion and choice checks.
        """
        entity = cast("Entity", instance)
        entity._field_values[self.require_name()] = value

    # Metadata helpers ----------------------------------------------------
    def bind(self, entity: type["Entity"], name: str) -> None:
        self.entity = entity
        self.name = name
        if self.db_column is None:
            self.db_column = name

    def contribute_to_class(self, entity: type["Entity"], name: str) -> None:
        """
        Attach the field to the entity class as a descriptor.
        """
        self.bind(entity, name)
        setattr(entity, name, self)

    def require_name(self) -> str:
        if self.name is None:
            raise FieldError("Field name is not set.")
        return self.name

    def column_name(self) -> str:
        if self.db_column:
            return self.db_column
        return self.require_name()

    @property
    def generated(self) -> bool:
        """True when the database assigns the value on insert."""
        return False

    def clone(self) -> "Field":
        """
        Unbound copy used when an entity inherits fields from an abstract base.
        """
        cloned = copy.copy(self)
        cloned.validators = list(self.validators)
        cloned.entity = None
        cloned.name = None
        return cloned

    # Conversion / validation ---------------------------------------------
    @property
    def has_default(self) -> bool:
        return self.default is not None

    def get_default(self) -> Any:
        if callable(self.default):
            return self.default()
        return self.default

    def to_python(self, value: Any) -> Any:
        return value

    def run_validators(self, value: Any) -> None:
        for validator in self.validators:
            validator(value)


class AutoField(Field):
    """
    Database-generated integer identifier, the default primary key.
    """

    python_type = int

    def __init__(self, **kwargs: Any) -> None:
        kwargs.setdefault("db_type", "INTEGER")
        super().__init__(primary_key=True, nullable=False, **kwargs)

    @property
    def generated(self) -> bool:
        return True

    def to_python(self, value: Any) -> int | None:
        if value is None:
            return value
        try:
            return int(value)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Invalid value '{value}' for AutoField") from exc


class IntegerField(Field):
    python_type = int

    def __init__(self, **kwargs: Any) -> None:
        kwargs.setdefault("db_type", "INTEGER")
        super().__init__(**kwargs)

    def to_python(self, value: Any) -> int | None:
        if value is None:
            return value
        if isinstance(value, bool):
            raise ValueError(f"Invalid integer value '{value}'")
        try:
            return int(value)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Invalid integer value '{value}'") from exc


class FloatField(Field):
    python_type = float

    def __init__(self, **kwargs: Any) -> None:
        kwargs.setdefault("db_type", "REAL")
        super().__init__(**kwargs)

    def to_python(self, value: Any) -> float | None:
        if value is None:
            return value
        try:
            return float(value)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Invalid float value '{value}'") from exc


class DecimalField(Field):
    python_type = Decimal

    def __init__(self, *, max_digits: int = 19, decimal_places: int = 2, **kwargs: Any) -> None:
        kwargs.setdefault("db_type", f"NUMERIC({max_digits}, {decimal_places})")
        super().__init__(**kwargs)
        self.max_digits = max_digits
        self.decimal_places = decimal_places

    def to_python(self, value: Any) -> Decimal | None:
        if value is None:
            return value
        try:
            return Decimal(str(value))
        except (InvalidOperation, ValueError) as exc:
            raise ValueError(f"Invalid decimal value '{value}'") from exc


class BooleanField(Field):
    python_type = bool

    def __init__(self, *, default: Any = False, **kwargs: Any) -> None:
        kwargs.setdefault("db_type", "BOOLEAN")
        kwargs.setdefault("nullable", False)
        super().__init__(default=default, **kwargs)

    @property
    def has_default(self) -> bool:
        return True

    def to_python(self, value: Any) -> bool | None:
        if value is None:
            return value
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            lowered = value.lower()
            if lowered in {"true", "t", "1"}:
                return True
            if lowered in {"false", "f", "0"}:
                return False
        if isinstance(value, (int, float)):
            return bool(value)
        raise ValueError(f"Invalid boolean value '{value}'")


class StringField(Field):
    python_type = str

    def __init__(self, *, max_length: int = 255, **kwargs: Any) -> None:
        kwargs.setdefault("db_type", f"VARCHAR({max_length})")
        super().__init__(**kwargs)
        self.max_length = max_length

    def to_python(self, value: Any) -> str | None:
        if value is None:
            return value
        result = str(value)
        if self.max_length and len(result) > self.max_length:
            field_name = self.require_name()
            raise ValueError(f"Value for field '{field_name}' exceeds max_length {self.max_length}")
        return result


class DateTimeField(Field):
    python_type = datetime

    def __init__(self, *, auto_now_add: bool = False, **kwargs: Any) -> None:
        kwargs.setdefault("db_type", "TIMESTAMP")
        super().__init__(**kwargs)
        self.auto_now_add = auto_now_add

    @property
    def has_default(self) -> bool:
        return self.auto_now_add or super().has_default

    def get_default(self) -> Any:
        if self.auto_now_add:
            return datetime.now(timezone.utc)
        return super().get_default()

    def to_python(self, value: Any) -> datetime | None:
        if value is None or isinstance(value, datetime):
            return value
        if isinstance(value, str):
            try:
                return datetime.fromisoformat(value)
            except ValueError as exc:
                raise ValueError(f"Invalid datetime value '{value}' for field '{self.name}'") from exc
        raise ValueError(f"Expected datetime for field '{self.name}', received {value!r}")


class DateField(Field):
    python_type = date

    def __init__(self, **kwargs: Any) -> None:
        kwargs.setdefault("db_type", "DATE")
        super().__init__(**kwargs)

    def to_python(self, value: Any) -> date | None:
        if value is None:
            return value
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        if isinstance(value, str):
            try:
                return date.fromisoformat(value)
            except ValueError as exc:
                raise ValueError(f"Invalid date value '{value}' for field '{self.name}'") from exc
        raise ValueError(f"Expected date for field '{self.name}', received {value!r}")
