"""
Declarative building blocks for FlushORM entities.
"""

from .entity import Entity, EntityConfigurationError, EntityMeta, EntityOptions
from .fields import (
    AutoField,
    BooleanField,
    DateField,
    DateTimeField,
    DecimalField,
    Field,
    FieldError,
    FloatField,
    IntegerField,
    StringField,
)
from .relations import ForeignKey

__all__ = [
    "AutoField",
    "BooleanField",
    "DateField",
    "DateTimeField",
    "DecimalField",
    "Entity",
    "EntityConfigurationError",
    "EntityMeta",
    "EntityOptions",
    "Field",
    "FieldError",
    "FloatField",
    "ForeignKey",
    "IntegerField",
    "StringField",
]
