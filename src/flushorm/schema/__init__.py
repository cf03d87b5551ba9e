"""
DDL generation for mapped entities.
"""

from .builder import SchemaBuilder

__all__ = ["SchemaBuilder"]
