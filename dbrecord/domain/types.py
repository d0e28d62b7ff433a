"""
Column type tags for record schemas.

Each `ColumnType` member is a closed tag over the scalar values a record can
hold. Values are converted at the database boundary only: `to_db` when a value
is bound into a statement and `from_db` when a driver hands a value back (SQLite
returns booleans as 0/1, a last-insert id may arrive as a string, ...).
Conversion goes through pydantic in lax mode so that "12" binds as 12 and
1 reads back as True.
"""
from __future__ import annotations

import enum
from typing import Any, Optional, Union

from pydantic import TypeAdapter, ValidationError

from dbrecord.exceptions import ColumnValueError

ColumnValue = Union[str, int, bool, None]


class ColumnType(str, enum.Enum):
    """Scalar type of a schema column."""

    INT = "int"
    STRING = "string"
    BOOL = "bool"

    def to_db(self, value: Any) -> ColumnValue:
        """Convert a Python value to the value bound for this column type."""
        if value is None:
            return None
        if self is ColumnType.STRING and isinstance(value, (int, float)) and not isinstance(value, bool):
            # pydantic refuses numbers for str; bind their textual form like a driver would.
            return str(value)
        try:
            return _ADAPTERS[self].validate_python(value)
        except ValidationError as exc:
            raise ColumnValueError(
                f"Cannot convert {value!r} to column type {self.value}"
            ) from exc

    def from_db(self, value: Any) -> ColumnValue:
        """Convert a raw driver value to this column's Python type."""
        return self.to_db(value)


_ADAPTERS = {
    ColumnType.INT: TypeAdapter(int),
    ColumnType.STRING: TypeAdapter(str),
    ColumnType.BOOL: TypeAdapter(bool),
}


def is_empty(value: Optional[Any]) -> bool:
    """
    Emptiness test used for primary keys.

    None, "", "0", 0 and False are empty, matching how a freshly built record
    (or one whose key was reset to 0) is detected as not yet inserted.
    """
    return value is None or value == "" or value == "0" or value == 0 or value is False


__all__ = ["ColumnType", "ColumnValue", "is_empty"]
