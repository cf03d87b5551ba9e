"""
Transaction coordination for a session.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Optional

from ..utils import get_logger
from .errors import IllegalStateError, TransactionError

if TYPE_CHECKING:
    from ..adapters.base import DatabaseAdapter
    from ..hooks import HookDispatcher

Callback = Callable[[], None]


class TransactionStatus(Enum):
    NOT_ACTIVE = "not_active"
    ACTIVE = "active"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"

    @property
    def is_terminal(self) -> bool:
        return self in (TransactionStatus.COMMITTED, TransactionStatus.ROLLED_BACK)


class TransactionCoordinator:
    """
    Owns one connection for the lifetime of one transaction.

    ``NOT_ACTIVE -> ACTIVE -> COMMITTED | ROLLED_BACK``; a finished
    coordinator cannot be restarted. The connection is acquired in
    :meth:`begin` and handed back to the adapter, with autocommit restored,
    on every path that leaves ``ACTIVE``.
    """

    def __init__(self, adapter: "DatabaseAdapter") -> None:
        self.adapter = adapter
        self.status = TransactionStatus.NOT_ACTIVE
        self._connection: Any = None
        self._flush_callback: Optional[Callback] = None
        self._clear_callback: Optional[Callback] = None
        self.logger = get_logger("persistence.transaction")

    def __repr__(self) -> str:
        return f"<TransactionCoordinator {self.status.value}>"

    # Callbacks ----------------------------------------------------------
    def set_flush_callback(self, callback: Optional[Callback]) -> None:
        self._flush_callback = callback

    def set_clear_callback(self, callback: Optional[Callback]) -> None:
        self._clear_callback = callback

    @property
    def flush_callback(self) -> Optional[Callback]:
        return self._flush_callback

    @property
    def clear_callback(self) -> Optional[Callback]:
        return self._clear_callback

    # State machine ------------------------------------------------------
    def begin(self) -> None:
        if self.status is not TransactionStatus.NOT_ACTIVE:
            raise IllegalStateError(f"Cannot begin a transaction that is {self.status.value}")
        try:
            connection = self.adapter.acquire()
        except Exception as exc:
            raise TransactionError(f"Failed to begin transaction: {exc}") from exc
        try:
            self.adapter.set_autocommit(connection, False)
        except Exception as exc:
            self.adapter.release(connection)
            raise TransactionError(f"Failed to begin transaction: {exc}") from exc
        self._connection = connection
        self.status = TransactionStatus.ACTIVE
        self.logger.debug("Transaction started")

    def commit(self) -> None:
        if self.status is not TransactionStatus.ACTIVE:
            raise IllegalStateError(f"Cannot commit a transaction that is {self.status.value}")
        connection = self._connection
        try:
            connection.commit()
            self.status = TransactionStatus.COMMITTED
            self.logger.debug("Transaction committed")
        except Exception as exc:
            self.logger.error("Commit failed, rolling back: %s", exc)
            try:
                connection.rollback()
            except Exception as rollback_exc:
                self.logger.error("Rollback after failed commit also failed: %s", rollback_exc)
            self.status = TransactionStatus.ROLLED_BACK
            raise TransactionError(f"Failed to commit transaction: {exc}") from exc
        finally:
            self._release()

    def rollback(self) -> None:
        if self.status is not TransactionStatus.ACTIVE:
            self.logger.warning(
                "Rollback requested but transaction is %s; ignoring", self.status.value
            )
            return
        connection = self._connection
        try:
            connection.rollback()
            self.logger.debug("Transaction rolled back")
        except Exception as exc:
            self.logger.error("Rollback failed: %s", exc)
            raise TransactionError(f"Failed to roll back transaction: {exc}") from exc
        finally:
            self.status = TransactionStatus.ROLLED_BACK
            self._release()

    def is_active(self) -> bool:
        return self.status is TransactionStatus.ACTIVE

    def get_connection(self) -> Any:
        if self.status is not TransactionStatus.ACTIVE:
            raise IllegalStateError("No active transaction")
        return self._connection

    def _release(self) -> None:
        connection, self._connection = self._connection, None
        if connection is None:
            return
        try:
            self.adapter.set_autocommit(connection, True)
        except Exception as exc:
            self.logger.warning("Failed to restore autocommit: %s", exc)
        finally:
            self.adapter.release(connection)


class EntityTransaction:
    """
    Transaction handle exposed to application code.

    Commit runs the coordinator's flush callback first; once the transaction
    is finished, successfully or not, the clear callback empties the
    persistence context.
    """

    def __init__(
        self,
        coordinator: TransactionCoordinator,
        *,
        hooks: Optional["HookDispatcher"] = None,
        owner: Any = None,
    ) -> None:
        self.coordinator = coordinator
        self.hooks = hooks
        self.owner = owner

    def __repr__(self) -> str:
        return f"<EntityTransaction {self.status.value}>"

    @property
    def status(self) -> TransactionStatus:
        return self.coordinator.status

    def begin(self) -> None:
        self.coordinator.begin()

    def commit(self) -> None:
        coordinator = self.coordinator
        if not coordinator.is_active():
            raise IllegalStateError(f"Cannot commit a transaction that is {coordinator.status.value}")
        try:
            flush = coordinator.flush_callback
            if flush is not None:
                try:
                    flush()
                except Exception:
                    try:
                        coordinator.rollback()
                    except TransactionError as rollback_exc:
                        coordinator.logger.error(
                            "Rollback after failed flush also failed: %s", rollback_exc
                        )
                    raise
            coordinator.commit()
        finally:
            self._clear()
        self._fire("after_commit")

    def rollback(self) -> None:
        was_active = self.coordinator.is_active()
        try:
            self.coordinator.rollback()
        finally:
            if was_active:
                self._clear()
        if was_active:
            self._fire("after_rollback")

    def is_active(self) -> bool:
        return self.coordinator.is_active()

    def _clear(self) -> None:
        clear = self.coordinator.clear_callback
        if clear is not None:
            clear()

    def _fire(self, event: str) -> None:
        if self.hooks is not None:
            self.hooks.fire(event, None, session=self.owner)
