"""
Statement statistics collected per session.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from threading import RLock
from typing import List

SLOW_QUERY_ENV = "FLUSHORM_SLOW_QUERY_MS"


def resolve_slow_query_ms(*, default: int, override: int | None = None) -> int:
    """
    Pick the slow-statement threshold: explicit override, then the
    ``FLUSHORM_SLOW_QUERY_MS`` environment variable, then ``default``.
    """
    if override is not None:
        return int(override)
    raw = os.getenv(SLOW_QUERY_ENV)
    if raw:
        try:
            return int(raw)
        except ValueError as exc:
            raise ValueError(f"Invalid {SLOW_QUERY_ENV} value {raw!r}") from exc
    return default


@dataclass
class StatementStat:
    sql: str
    count: int = 0
    total_ms: float = 0.0
    failures: int = 0

    def record(self, elapsed_ms: float, *, failed: bool = False) -> None:
        self.count += 1
        self.total_ms += elapsed_ms
        if failed:
            self.failures += 1

    @property
    def average_ms(self) -> float:
        if self.count == 0:
            return 0.0
        return self.total_ms / self.count


class StatementTracker:
    """
    Aggregates executed statements by normalized SQL text.
    """

    def __init__(self) -> None:
        self.stats: dict[str, StatementStat] = {}
        self._lock = RLock()

    def record(self, sql: str, elapsed_ms: float, *, failed: bool = False) -> None:
        normalized_sql = self._normalize_sql(sql)
        with self._lock:
            stat = self.stats.setdefault(normalized_sql, StatementStat(sql=normalized_sql))
            stat.record(elapsed_ms, failed=failed)

    def summary(self) -> List[dict[str, object]]:
        with self._lock:
            return [
                {
                    "sql": stat.sql,
                    "count": stat.count,
                    "failures": stat.failures,
                    "total_ms": stat.total_ms,
                    "average_ms": stat.average_ms,
                }
                for stat in self.stats.values()
            ]

    def total_statements(self) -> int:
        with self._lock:
            return sum(stat.count for stat in self.stats.values())

    def reset(self) -> None:
        with self._lock:
            self.stats.clear()

    @staticmethod
    def _normalize_sql(sql: str) -> str:
        return " ".join(sql.strip().split())
