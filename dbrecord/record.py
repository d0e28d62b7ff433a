"""
Active Record base class.

A `Record` subclass maps to one table; each instance wraps one row. Subclasses
declare the table and its static schema as class attributes:

    class User(Record):
        table_name = "user"
        schema = {
            "id": ColumnType.INT,
            "name": ColumnType.STRING,
            "active": ColumnType.BOOL,
        }

    user = User(conn)
    user.set("name", "ada")
    user.save()                      # INSERT, user.get("id") is now set
    User(conn).load(user.get("id"))  # SELECT by primary key

Every write is exactly one statement on the connection the record was built
with. Records never commit or open connections.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, ClassVar, Dict, Mapping, Optional

from dbrecord.domain.types import ColumnType, ColumnValue, is_empty
from dbrecord.events import (
    AfterDeleteEvent,
    AfterSaveEvent,
    BeforeDeleteEvent,
    BeforeSaveEvent,
    Event,
    EventNotifier,
    Listener,
)
from dbrecord.exceptions import (
    DeleteFailedError,
    NotFoundError,
    NotLoadedError,
    StatementExecuteError,
    UnknownColumnError,
)
from dbrecord.infrastructure.connection import SqlConnection, Statement, as_sql_connection
from dbrecord.utils.logging import get_logger

log = get_logger(__name__)


class Record:
    """
    One database row with typed column access and lifecycle events.

    Attributes
    ----------
    table_name : str
        Name of the mapped table.
    schema : Mapping[str, ColumnType]
        Column name -> type. Frozen when the subclass is defined.
    primary_key : str
        Primary key column, "id" by default. Must be part of the schema.
    """

    table_name: ClassVar[str] = ""
    schema: ClassVar[Mapping[str, ColumnType]] = MappingProxyType({})
    primary_key: ClassVar[str] = "id"

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        cls.schema = MappingProxyType({name: ColumnType(kind) for name, kind in cls.schema.items()})
        if cls.schema and cls.primary_key not in cls.schema:
            raise TypeError(
                f"{cls.__name__}: primary key {cls.primary_key!r} is not in the table schema"
            )

    def __init__(
        self,
        connection: Any,
        notifier: Optional[EventNotifier] = None,
        driver_name: Optional[str] = None,
    ) -> None:
        self.connection: SqlConnection = as_sql_connection(connection, driver_name)
        self.notifier = notifier or EventNotifier()
        self._data: Dict[str, ColumnValue] = {}

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._data!r})"

    # -- column access -----------------------------------------------------

    def _check_column(self, name: str) -> None:
        if name not in self.schema:
            raise UnknownColumnError(name, self.table_name)

    def get(self, column: str) -> ColumnValue:
        """Current value of `column`, None when unset."""
        self._check_column(column)
        return self._data.get(column)

    def set(self, column: str, value: ColumnValue) -> None:
        self._check_column(column)
        self._data[column] = value

    def has(self, column: str) -> bool:
        """True when `column` holds a value (being in the schema is not enough)."""
        return self._data.get(column) is not None

    def unset(self, column: str) -> None:
        self._check_column(column)
        self._data.pop(column, None)

    def bind(self, data: Mapping[str, ColumnValue]) -> None:
        """Merge `data` into the row; nothing is written if any key is unknown."""
        for column in data:
            self._check_column(column)
        self._data.update(data)

    def to_dict(self) -> Dict[str, ColumnValue]:
        return dict(self._data)

    # -- events ------------------------------------------------------------

    def on(self, event_type: type[Event], listener: Listener, priority: int = 0) -> None:
        self.notifier.on(event_type, listener, priority)

    def off(self, event_type: type[Event], listener: Listener) -> None:
        self.notifier.off(event_type, listener)

    def before_save(self, insert: bool) -> bool:
        """Fire BeforeSaveEvent; False means a listener vetoed the save."""
        event = BeforeSaveEvent(self, insert=insert)
        self.notifier.trigger(event)
        return event.is_valid

    def after_save(self) -> None:
        self.notifier.trigger(AfterSaveEvent(self))

    def before_delete(self) -> bool:
        """Fire BeforeDeleteEvent; False means a listener vetoed the delete."""
        event = BeforeDeleteEvent(self)
        self.notifier.trigger(event)
        return event.is_valid

    def after_delete(self) -> None:
        self.notifier.trigger(AfterDeleteEvent(self))

    # -- SQL ---------------------------------------------------------------

    def quote_identifier(self, identifier: str) -> str:
        """Quote a table or column name for the connection's dialect."""
        driver = self.connection.driver_name
        if driver in ("mysql", "sqlite"):
            return f"`{identifier}`"
        if driver == "pgsql":
            return f'"{identifier}"'
        if driver == "sqlsrv":
            return f"[{identifier}]"
        return identifier

    def _execute(self, statement: Statement) -> None:
        log.debug(
            "Executing statement",
            extra={"table": self.table_name, "sql": statement.sql},
        )
        statement.execute()

    def load(self, id: Any) -> "Record":
        """
        Populate this record from the row whose primary key equals `id`.

        Returns the record itself so calls can be chained. Raises NotFoundError
        when no row matches, leaving the current data untouched.
        """
        query = (
            f"SELECT * FROM {self.quote_identifier(self.table_name)}"
            f" WHERE {self.primary_key} = ?"
        )
        statement = self.connection.prepare(query)
        try:
            statement.bind(1, id, self.schema[self.primary_key])
            self._execute(statement)
            row = statement.fetch()
        finally:
            statement.close()

        if row is None:
            raise NotFoundError(self.table_name, id)

        loaded: Dict[str, ColumnValue] = {}
        for column, value in row.items():
            self._check_column(column)
            loaded[column] = self.schema[column].from_db(value)
        self._data.update(loaded)
        return self

    def save(self) -> bool:
        """
        Insert or update this row.

        The row is inserted when the primary key is empty, updated otherwise.
        Returns False, without touching the database, when a BeforeSaveEvent
        listener vetoes the save.
        """
        for column in self._data:
            self._check_column(column)

        insert = is_empty(self._data.get(self.primary_key))

        if not self.before_save(insert):
            log.info(
                "Save vetoed by listener",
                extra={"table": self.table_name, "insert": insert},
            )
            return False

        values = dict(self._data)
        table = self.quote_identifier(self.table_name)

        if insert:
            # An empty key ("" or 0) is left out so the database generates one.
            values.pop(self.primary_key, None)
            columns = list(values)
            if columns:
                query = (
                    f"INSERT INTO {table} ({', '.join(self.quote_identifier(c) for c in columns)})"
                    f" VALUES ({', '.join(':' + c for c in columns)})"
                )
            else:
                query = f"INSERT INTO {table} DEFAULT VALUES"
        else:
            # The key is inlined as an integer literal rather than bound.
            assignments = ", ".join(f"{self.quote_identifier(c)}= :{c}" for c in values)
            literal_id = ColumnType.INT.to_db(self._data[self.primary_key])
            query = (
                f"UPDATE {table} SET {assignments}"
                f" WHERE {self.primary_key} = {literal_id}"
            )

        statement = self.connection.prepare(query)
        try:
            for column, value in values.items():
                statement.bind(column, value, self.schema[column])
            self._execute(statement)
        finally:
            statement.close()

        if insert:
            pk_type = self.schema[self.primary_key]
            self._data[self.primary_key] = pk_type.from_db(self.connection.last_insert_id())

        self.after_save()
        return True

    def delete(self) -> bool:
        """
        Delete this row.

        Raises NotLoadedError when the primary key is unset. Returns False when
        a BeforeDeleteEvent listener vetoes the delete.
        """
        if self._data.get(self.primary_key) is None:
            raise NotLoadedError("Item cannot be deleted because it is not loaded.")

        if not self.before_delete():
            log.info("Delete vetoed by listener", extra={"table": self.table_name})
            return False

        id = self._data[self.primary_key]
        statement = self.connection.prepare(
            f"DELETE FROM {self.quote_identifier(self.table_name)} WHERE {self.primary_key} = ?"
        )
        try:
            statement.bind(1, id, ColumnType.INT)
            self._execute(statement)
        except StatementExecuteError as exc:
            raise DeleteFailedError(
                exc.sql,
                exc.code,
                exc.driver_message,
                message=f"Error while trying to delete item {id}",
            ) from exc
        finally:
            statement.close()

        self.after_delete()
        return True


__all__ = ["Record"]
