"""
Entity query language: parsing, SQL translation and execution.
"""

from .errors import NonUniqueResultError, NoResultError, QueryError, QuerySyntaxError
from .parser import Condition, QueryParser, SelectStatement, parse_query
from .query import Query
from .translator import QueryTranslator, TranslatedQuery

__all__ = [
    "Condition",
    "NoResultError",
    "NonUniqueResultError",
    "Query",
    "QueryError",
    "QueryParser",
    "QuerySyntaxError",
    "QueryTranslator",
    "SelectStatement",
    "TranslatedQuery",
    "parse_query",
]
