"""
Database connection factory utilities for dbrecord.

Records never open connections themselves; this module is the optional,
settings-driven way to obtain one already wrapped in the `SqlConnection`
adapter. Connections are opened in autocommit mode so every record write is a
single durable statement; callers wanting atomicity across records open their
own connection and manage the transaction.

Includes retry logic for transient connection failures using tenacity.
"""

from __future__ import annotations

import sqlite3
from typing import Optional

import psycopg
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from dbrecord.config import Settings, get_settings
from dbrecord.infrastructure.connection import PostgresConnection, SqlConnection, SqliteConnection
from dbrecord.utils.logging import get_logger

log = get_logger(__name__)

_TRANSIENT_ERRORS = (psycopg.OperationalError, psycopg.InterfaceError, sqlite3.OperationalError)


def build_dsn(settings: Optional[Settings] = None) -> str:
    """Compose a PostgreSQL DSN string from settings."""
    settings = settings or get_settings()
    return (
        f"postgresql://{settings.db_user}:{settings.db_password}"
        f"@{settings.db_host}:{settings.db_port}/{settings.db_name}"
    )


def _connect(settings: Settings) -> SqlConnection:
    if settings.db_driver == "pgsql":
        return PostgresConnection(psycopg.connect(build_dsn(settings), autocommit=True))
    # isolation_level=None puts sqlite3 in autocommit mode.
    return SqliteConnection(sqlite3.connect(settings.sqlite_path, isolation_level=None))


def get_sync_connection(settings: Optional[Settings] = None) -> SqlConnection:
    """
    Open a connection for the configured driver with automatic retry.

    Retries `DB_CONNECT_RETRIES` times with exponential backoff for transient
    connection errors, then re-raises the last one.

    Parameters
    ----------
    settings : Settings, optional
        Overrides the cached settings (handy in tests).

    Returns
    -------
    SqlConnection
        Adapter over a new autocommit connection. Close it via `.raw.close()`.

    Raises
    ------
    psycopg.OperationalError | sqlite3.OperationalError
        If connection fails after all retry attempts.
    """
    settings = settings or get_settings()
    retrying = Retrying(
        stop=stop_after_attempt(settings.db_connect_retries),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type(_TRANSIENT_ERRORS),
        reraise=True,
    )
    connection = retrying(_connect, settings)
    log.info(
        "Opened database connection",
        extra={"driver": connection.driver_name, "app_env": settings.app_env},
    )
    return connection


__all__ = ["build_dsn", "get_sync_connection"]
