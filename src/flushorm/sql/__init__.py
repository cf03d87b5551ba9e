"""
SQL text generation for entity reads and writes.
"""

from .generators import (
    DeleteSqlGenerator,
    InsertSqlGenerator,
    SelectSqlGenerator,
    Statement,
    UpdateSqlGenerator,
)

__all__ = [
    "DeleteSqlGenerator",
    "InsertSqlGenerator",
    "SelectSqlGenerator",
    "Statement",
    "UpdateSqlGenerator",
]
