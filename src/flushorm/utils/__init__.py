"""
Utility helpers shared across FlushORM packages.
"""

from .logging import configure_logging, get_logger, time_call
from .naming import camel_to_snake
from .performance import StatementTracker, resolve_slow_query_ms

__all__ = [
    "StatementTracker",
    "camel_to_snake",
    "configure_logging",
    "get_logger",
    "resolve_slow_query_ms",
    "time_call",
]
