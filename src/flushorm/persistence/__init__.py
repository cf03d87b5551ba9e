"""
Persistence layer: persistence context, action queue, transactions and sessions.
"""

from .action_queue import ActionQueue
from .actions import DeleteAction, EntityAction, InsertAction, UpdateAction
from .context import PersistenceContext
from .entry import EntityEntry, EntityStatus
from .errors import (
    DuplicateIdentityError,
    EntityKeyError,
    IllegalStateError,
    InvalidStateError,
    NotManagedError,
    PersistenceError,
    PersistenceIOError,
    TransactionError,
)
from .identity_map import EntityKey, IdentityMap
from .persisters import EntityDeleter, EntityLoader, EntityPersister, EntityUpdater
from .session import Session
from .factory import SessionFactory, create_session_factory
from .transaction import EntityTransaction, TransactionCoordinator, TransactionStatus

__all__ = [
    "ActionQueue",
    "DeleteAction",
    "DuplicateIdentityError",
    "EntityAction",
    "EntityDeleter",
    "EntityEntry",
    "EntityKey",
    "EntityKeyError",
    "EntityLoader",
    "EntityPersister",
    "EntityStatus",
    "EntityTransaction",
    "EntityUpdater",
    "IdentityMap",
    "IllegalStateError",
    "InsertAction",
    "InvalidStateError",
    "NotManagedError",
    "PersistenceContext",
    "PersistenceError",
    "PersistenceIOError",
    "Session",
    "SessionFactory",
    "TransactionCoordinator",
    "TransactionError",
    "TransactionStatus",
    "UpdateAction",
    "create_session_factory",
]
