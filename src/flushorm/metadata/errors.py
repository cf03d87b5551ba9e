"""
Errors raised while describing or looking up entity structure.
"""


class MappingError(LookupError):
    """Raised for unregistered entity types or unmappable declarations."""
