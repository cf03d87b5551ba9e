"""
Naming utilities for table and column defaults.
"""

import re


_FIRST_CAP_RE = re.compile("(.)([A-Z][a-z]+)")
_ALL_CAP_RE = re.compile("([a-z0-9])([A-Z])")
_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)?$")


def camel_to_snake(name: str) -> str:
    """
    Convert ``CamelCase`` entity names to ``snake_case`` table names.
    """
    step1 = _FIRST_CAP_RE.sub(r"\1_\2", name)
    return _ALL_CAP_RE.sub(r"\1_\2", step1).lower()


def is_valid_identifier(name: str) -> bool:
    """
    True for plain SQL identifiers, optionally schema-qualified (``schema.table``).
    """
    return bool(_IDENTIFIER_RE.match(name))
