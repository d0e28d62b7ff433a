"""
Exception hierarchy for dbrecord.

Every error raised by a record or by the connection adapter derives from
`DbRecordError`, so callers can catch the whole family at once. Driver
exceptions are always chained onto the `StatementError` that wraps them.
"""

from __future__ import annotations

from typing import Any, Optional


class DbRecordError(RuntimeError):
    """Base class for dbrecord errors."""


class UnknownColumnError(DbRecordError):
    """Raised when a column is not part of the record's schema."""

    def __init__(self, column: str, table: str = "") -> None:
        self.column = column
        self.table = table
        super().__init__(f"{column} is not in the table schema.")


class NotFoundError(DbRecordError):
    """Raised when `load()` matches no row."""

    def __init__(self, table: str, id: Any) -> None:
        self.table = table
        self.id = id
        super().__init__(f"Error while trying to load item {id} from {table}")


class NotLoadedError(DbRecordError):
    """Raised when deleting a record whose primary key is not set."""


class ColumnValueError(DbRecordError, ValueError):
    """Raised when a value cannot be converted to its column type."""


class StatementError(DbRecordError):
    """
    A statement could not be prepared or executed.

    Attributes
    ----------
    sql : str
        The statement text as built by the record.
    code : str | int | None
        Driver error code (SQLSTATE for PostgreSQL, error name for SQLite).
    driver_message : str
        Message reported by the driver.
    """

    def __init__(
        self,
        sql: str,
        code: Optional[Any] = None,
        driver_message: str = "",
        message: Optional[str] = None,
    ) -> None:
        self.sql = sql
        self.code = code
        self.driver_message = driver_message
        super().__init__(message or f"Query '{sql}' failed with error {code} : {driver_message}")


class StatementPrepareError(StatementError):
    """The driver refused to prepare the statement."""


class StatementExecuteError(StatementError):
    """The driver failed while executing the statement."""


class DeleteFailedError(StatementExecuteError):
    """The DELETE statement of `Record.delete()` failed."""


__all__ = [
    "DbRecordError",
    "UnknownColumnError",
    "NotFoundError",
    "NotLoadedError",
    "ColumnValueError",
    "StatementError",
    "StatementPrepareError",
    "StatementExecuteError",
    "DeleteFailedError",
]
