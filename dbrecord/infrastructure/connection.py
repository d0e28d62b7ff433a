"""
SQL connection boundary used by records.

Records speak a small prepare/bind/execute/fetch protocol and write their SQL
with portable placeholders: `?` for positional parameters and `:name` for named
ones. `SqlConnection` wraps a DB-API 2.0 connection and translates both the
placeholders (to the driver's paramstyle) and the driver's exceptions (to
`StatementPrepareError` / `StatementExecuteError`).

Supported out of the box:
- sqlite3 connections (driver name "sqlite")
- psycopg 3 connections (driver name "pgsql")
- any other DB-API connection when a driver name and paramstyle are given
"""

from __future__ import annotations

import re
import sqlite3
import sys
from typing import Any, Dict, List, Optional, Union

import psycopg

from dbrecord.domain.types import ColumnType
from dbrecord.exceptions import StatementExecuteError, StatementPrepareError
from dbrecord.utils.logging import get_logger

log = get_logger(__name__)

# `:name` not preceded by another colon (leaves `::type` casts alone).
_NAMED_RE = re.compile(r"(?<!:):([A-Za-z_][A-Za-z0-9_]*)")

BindKey = Union[int, str]


def _driver_error(exc: BaseException) -> tuple[Any, str]:
    """Extract (code, message) from a driver exception."""
    code = (
        getattr(exc, "sqlstate", None)
        or getattr(exc, "sqlite_errorname", None)
        or getattr(exc, "sqlite_errorcode", None)
        or type(exc).__name__
    )
    return code, str(exc).strip()


def translate_placeholders(sql: str, paramstyle: str) -> str:
    """
    Rewrite `?` / `:name` placeholders for the given DB-API paramstyle.

    sqlite3 understands both forms natively ("qmark"/"named"); psycopg uses
    "format"/"pyformat" (`%s`, `%(name)s`), which also requires literal `%`
    characters to be doubled.
    """
    if paramstyle in ("qmark", "named"):
        return sql
    if paramstyle in ("format", "pyformat"):
        sql = sql.replace("%", "%%")
        sql = _NAMED_RE.sub(r"%(\1)s", sql)
        return sql.replace("?", "%s")
    if paramstyle == "numeric":
        counter = iter(range(1, sql.count("?") + 1))
        return re.sub(r"\?", lambda _: f":{next(counter)}", sql)
    raise ValueError(f"Unsupported paramstyle: {paramstyle}")


class Statement:
    """
    A single-use prepared statement.

    Binding either positionally (1-based int keys) or by name; the two styles
    cannot be mixed within one statement.
    """

    def __init__(self, connection: "SqlConnection", sql: str, cursor: Any) -> None:
        self.connection = connection
        self.sql = sql
        self._cursor = cursor
        self._positional: Dict[int, Any] = {}
        self._named: Dict[str, Any] = {}
        self._columns: Optional[List[str]] = None

    def bind(self, key: BindKey, value: Any, column_type: ColumnType) -> None:
        """Bind `value`, converted to `column_type`, to a placeholder."""
        encoded = column_type.to_db(value)
        if isinstance(key, int):
            if key < 1:
                raise ValueError("Positional parameters are 1-based")
            self._positional[key] = encoded
        else:
            self._named[key.lstrip(":")] = encoded

    def _params(self) -> Union[Dict[str, Any], tuple]:
        if self._named and self._positional:
            raise ValueError("Cannot mix positional and named parameters")
        if self._named:
            return dict(self._named)
        return tuple(self._positional[i] for i in sorted(self._positional))

    def execute(self) -> None:
        """Execute the statement; raises StatementExecuteError on driver failure."""
        native_sql = translate_placeholders(self.sql, self.connection.paramstyle)
        try:
            self._cursor.execute(native_sql, self._params())
        except self.connection.driver_errors as exc:
            code, message = _driver_error(exc)
            log.error(
                "Statement execution failed",
                extra={"sql": self.sql, "code": code, "driver_message": message},
            )
            raise StatementExecuteError(self.sql, code, message) from exc
        if self._cursor.description:
            self._columns = [column[0] for column in self._cursor.description]
        self.connection._last_insert_id = getattr(self._cursor, "lastrowid", None)

    def fetch(self) -> Optional[Dict[str, Any]]:
        """Return the next row as a column -> value mapping, or None."""
        if self._columns is None:
            return None
        row = self._cursor.fetchone()
        if row is None:
            return None
        return dict(zip(self._columns, row))

    def close(self) -> None:
        self._cursor.close()


class SqlConnection:
    """
    Adapter over an open DB-API connection.

    Parameters
    ----------
    raw : Any
        The DB-API connection. It is neither opened nor closed by the adapter.
    driver_name : str
        Dialect name used for identifier quoting ("sqlite", "pgsql", "mysql",
        "sqlsrv", ...).
    paramstyle : str
        DB-API paramstyle of the driver.
    driver_errors : tuple of exception types
        Exceptions translated into statement errors.
    """

    def __init__(
        self,
        raw: Any,
        driver_name: str,
        paramstyle: str = "qmark",
        driver_errors: tuple = (Exception,),
    ) -> None:
        self.raw = raw
        self._driver_name = driver_name
        self.paramstyle = paramstyle
        self.driver_errors = driver_errors
        self._last_insert_id: Any = None

    @property
    def driver_name(self) -> str:
        return self._driver_name

    def prepare(self, sql: str) -> Statement:
        """Open a cursor for `sql`; raises StatementPrepareError on failure."""
        try:
            cursor = self.raw.cursor()
        except self.driver_errors as exc:
            code, message = _driver_error(exc)
            log.error(
                "Statement preparation failed",
                extra={"sql": sql, "code": code, "driver_message": message},
            )
            raise StatementPrepareError(sql, code, message) from exc
        return Statement(self, sql, cursor)

    def last_insert_id(self) -> Any:
        """Identifier generated by the most recent INSERT on this connection."""
        return self._last_insert_id


class SqliteConnection(SqlConnection):
    def __init__(self, raw: sqlite3.Connection) -> None:
        super().__init__(raw, "sqlite", sqlite3.paramstyle, (sqlite3.Error,))


class PostgresConnection(SqlConnection):
    """psycopg 3 connection; ids come from `lastval()` since PostgreSQL has no rowid."""

    def __init__(self, raw: psycopg.Connection) -> None:
        super().__init__(raw, "pgsql", psycopg.paramstyle, (psycopg.Error,))

    def last_insert_id(self) -> Any:
        statement = self.prepare("SELECT lastval()")
        try:
            statement.execute()
            row = statement.fetch()
        finally:
            statement.close()
        return None if row is None else next(iter(row.values()))


def as_sql_connection(conn: Any, driver_name: Optional[str] = None) -> SqlConnection:
    """
    Wrap `conn` in the matching SqlConnection adapter.

    Existing adapters are returned unchanged. Connections from other DB-API
    drivers need an explicit `driver_name`; their paramstyle is read from the
    driver module when available.
    """
    if isinstance(conn, SqlConnection):
        return conn
    if isinstance(conn, sqlite3.Connection):
        return SqliteConnection(conn)
    if isinstance(conn, psycopg.Connection):
        return PostgresConnection(conn)
    if driver_name is None:
        raise TypeError(
            f"Cannot detect the driver of {type(conn).__name__}; pass driver_name explicitly"
        )
    module = sys.modules.get(type(conn).__module__.split(".")[0])
    return SqlConnection(
        conn,
        driver_name,
        getattr(module, "paramstyle", "qmark"),
        (getattr(module, "Error", Exception),),
    )


__all__ = [
    "BindKey",
    "PostgresConnection",
    "SqlConnection",
    "SqliteConnection",
    "Statement",
    "as_sql_connection",
    "translate_placeholders",
]
