"""
Infrastructure package for dbrecord.

Centralizes database connectivity concerns: the DB-API adapter records talk to
and the optional settings-driven connection factory. Keep this layer focused on
I/O, decoupled from record semantics.
"""

from dbrecord.infrastructure.connection import (
    PostgresConnection,
    SqlConnection,
    SqliteConnection,
    Statement,
    as_sql_connection,
)
from dbrecord.infrastructure.db_factory import build_dsn, get_sync_connection

__all__ = [
    "PostgresConnection",
    "SqlConnection",
    "SqliteConnection",
    "Statement",
    "as_sql_connection",
    "build_dsn",
    "get_sync_connection",
]
