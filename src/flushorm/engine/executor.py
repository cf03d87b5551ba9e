"""
Runs generated statements on a DB-API connection.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from ..adapters.base import DatabaseAdapter
from ..persistence.errors import PersistenceIOError
from ..security.redaction import redact_params
from ..sql.generators import Statement
from ..utils import StatementTracker, get_logger, time_call


class StatementExecutor:
    """
    Executes :class:`Statement` objects, timing each one and wrapping driver
    failures in :class:`PersistenceIOError`.
    """

    def __init__(
        self,
        adapter: DatabaseAdapter,
        *,
        tracker: Optional[StatementTracker] = None,
        slow_query_ms: Optional[int] = None,
    ) -> None:
        self.adapter = adapter
        self.tracker = tracker
        self.slow_query_ms = slow_query_ms if slow_query_ms is not None else adapter.slow_query_ms
        self.logger = get_logger("engine.executor")

    def execute_update(self, connection: Any, statement: Statement) -> int:
        cursor = self._run(connection, statement)
        try:
            return cursor.rowcount
        finally:
            self._close(cursor)

    def execute_insert(self, connection: Any, statement: Statement) -> Any | None:
        """
        Run an INSERT and return the generated key, or ``None`` when the
        identifier was supplied by the caller.
        """
        cursor = self._run(connection, statement)
        try:
            if statement.key_column is None:
                return None
            try:
                if statement.returning:
                    row = cursor.fetchone()
                    if not row:
                        raise PersistenceIOError(
                            "INSERT returned no generated key", sql=statement.sql
                        )
                    return row[0]
                return self.adapter.last_insert_id(
                    cursor, statement.table or "", statement.key_column
                )
            except PersistenceIOError:
                raise
            except Exception as exc:
                raise PersistenceIOError(
                    f"Failed to read generated key: {exc}", sql=statement.sql
                ) from exc
        finally:
            self._close(cursor)

    def execute_query(self, connection: Any, statement: Statement) -> List[Dict[str, Any]]:
        cursor = self._run(connection, statement)
        try:
            try:
                rows = cursor.fetchall()
            except Exception as exc:
                raise PersistenceIOError(f"Failed to fetch rows: {exc}", sql=statement.sql) from exc
            columns = [description[0] for description in cursor.description or ()]
            return [dict(zip(columns, row)) for row in rows]
        finally:
            self._close(cursor)

    # ------------------------------------------------------------------ #
    def _run(self, connection: Any, statement: Statement) -> Any:
        params = redact_params(statement.params, statement.columns)
        failed = False

        def record(elapsed_ms: float) -> None:
            if self.tracker is not None:
                self.tracker.record(statement.sql, elapsed_ms, failed=failed)

        cursor = connection.cursor()
        try:
            with time_call(
                "statement.execute",
                self.logger,
                sql=statement.sql,
                params=params,
                threshold_ms=self.slow_query_ms,
                on_complete=record,
            ):
                try:
                    cursor.execute(statement.sql, statement.params)
                except Exception:
                    failed = True
                    raise
        except Exception as exc:
            self._close(cursor)
            self.logger.error("Statement failed: %s", statement.sql, extra={"params": params})
            raise PersistenceIOError(f"Statement execution failed: {exc}", sql=statement.sql) from exc
        return cursor

    @staticmethod
    def _close(cursor: Any) -> None:
        close = getattr(cursor, "close", None)
        if callable(close):
            close()
