"""
Statement execution over DB-API connections.
"""

from .executor import StatementExecutor

__all__ = ["StatementExecutor"]
