"""
Error hierarchy raised by the persistence layer.
"""

from __future__ import annotations


class PersistenceError(RuntimeError):
    """Base error for unit-of-work failures."""


class NotManagedError(PersistenceError):
    """Raised when an operation targets an entity the context does not track."""


class InvalidStateError(PersistenceError):
    """Raised when an entity's lifecycle state does not permit the operation."""


class IllegalStateError(InvalidStateError):
    """Raised when a transaction or session is used outside its legal states."""


class DuplicateIdentityError(PersistenceError):
    """Raised when a second instance claims an identity already in use."""


class TransactionError(PersistenceError):
    """Raised when acquiring, committing or rolling back a transaction fails."""


class PersistenceIOError(PersistenceError):
    """
    Wraps a driver exception raised while executing a statement.
    """

    def __init__(self, message: str, *, sql: str | None = None) -> None:
        super().__init__(message)
        self.sql = sql


class EntityKeyError(ValueError):
    """Raised when an entity key is built from a missing type or identifier."""
