"""
Domain package for dbrecord.

Exports the column type tags used by record schemas.
"""

from dbrecord.domain.types import ColumnType, ColumnValue, is_empty

__all__ = [
    "ColumnType",
    "ColumnValue",
    "is_empty",
]
