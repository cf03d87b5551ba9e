"""
Errors raised while parsing or running queries.
"""

from ..persistence.errors import PersistenceError


class QueryError(PersistenceError):
    """Base error for query failures."""


class QuerySyntaxError(QueryError):
    """Raised when query text cannot be parsed."""


class NoResultError(QueryError):
    """Raised by ``get_single_result`` when nothing matched."""


class NonUniqueResultError(QueryError):
    """Raised by ``get_single_result`` when more than one row matched."""
