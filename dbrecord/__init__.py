"""
dbrecord - a minimal Active Record helper over DB-API connections.

Each `Record` subclass maps to one table and each instance to one row, with:

- typed column access validated against a static schema
- load by primary key, save (insert or update) and delete
- cancelable before/after lifecycle events for observers

There is deliberately no query builder, relation mapping, migrations, pooling or
transaction management: every operation is a single parameterized statement on
a connection supplied by the caller.
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "LGPL-3.0"

# Public API exports
from dbrecord.config import Settings, get_settings
from dbrecord.domain.types import ColumnType
from dbrecord.events import (
    AfterDeleteEvent,
    AfterSaveEvent,
    BeforeDeleteEvent,
    BeforeSaveEvent,
    Event,
    EventNotifier,
)
from dbrecord.exceptions import (
    ColumnValueError,
    DbRecordError,
    DeleteFailedError,
    NotFoundError,
    NotLoadedError,
    StatementError,
    StatementExecuteError,
    StatementPrepareError,
    UnknownColumnError,
)
from dbrecord.infrastructure.connection import SqlConnection, as_sql_connection
from dbrecord.record import Record
from dbrecord.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Core
    "Record",
    "ColumnType",
    # Events
    "Event",
    "EventNotifier",
    "BeforeSaveEvent",
    "AfterSaveEvent",
    "BeforeDeleteEvent",
    "AfterDeleteEvent",
    # Errors
    "DbRecordError",
    "UnknownColumnError",
    "NotFoundError",
    "NotLoadedError",
    "ColumnValueError",
    "StatementError",
    "StatementPrepareError",
    "StatementExecuteError",
    "DeleteFailedError",
    # Connections
    "SqlConnection",
    "as_sql_connection",
    # Configuration
    "Settings",
    "get_settings",
    # Logging
    "configure_logging",
    "get_logger",
]
