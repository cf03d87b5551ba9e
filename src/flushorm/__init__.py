"""
FlushORM public package initialization.

Entities are declared with field descriptors, registered in a process-wide
metadata registry and persisted through sessions created by a
:class:`SessionFactory`.
"""

from .core.entity import Entity, EntityConfigurationError  # noqa: F401
from .core.fields import (
    AutoField,
    BooleanField,
    DateField,
    DateTimeField,
    DecimalField,
    FloatField,
    IntegerField,
    StringField,
)  # noqa: F401
from .core.relations import ForeignKey  # noqa: F401
from .persistence import (  # noqa: F401
    DuplicateIdentityError,
    EntityTransaction,
    IllegalStateError,
    InvalidStateError,
    NotManagedError,
    PersistenceError,
    PersistenceIOError,
    Session,
    SessionFactory,
    TransactionError,
    create_session_factory,
)
from .config import PersistenceConfiguration  # noqa: F401
from .hooks import hooks  # noqa: F401
from .metadata import MappingError, metadata_registry  # noqa: F401
from .query import NoResultError, NonUniqueResultError, Query, QuerySyntaxError  # noqa: F401
from .schema import SchemaBuilder  # noqa: F401
from .validation import ValidationError  # noqa: F401

__all__ = [
    "Entity",
    "EntityConfigurationError",
    "AutoField",
    "BooleanField",
    "DateField",
    "DateTimeField",
    "DecimalField",
    "FloatField",
    "IntegerField",
    "StringField",
    "ForeignKey",
    "Session",
    "SessionFactory",
    "EntityTransaction",
    "PersistenceConfiguration",
    "create_session_factory",
    "Query",
    "SchemaBuilder",
    "MappingError",
    "metadata_registry",
    "PersistenceError",
    "NotManagedError",
    "InvalidStateError",
    "IllegalStateError",
    "DuplicateIdentityError",
    "TransactionError",
    "PersistenceIOError",
    "QuerySyntaxError",
    "NoResultError",
    "NonUniqueResultError",
    "ValidationError",
    "hooks",
]
