"""
Pytest configuration for dbrecord.

Provides fixtures for:
- In-memory SQLite connections (unit tests)
- A statement-recording connection to assert which SQL reached the driver
- PostgreSQL connection management for integration tests
"""

from __future__ import annotations

import os
import sqlite3
from typing import Generator, List

import psycopg
import pytest

from dbrecord import ColumnType, Record
from dbrecord.config import Settings
from dbrecord.infrastructure.connection import SqliteConnection, Statement

USER_TABLE_DDL = """
    CREATE TABLE user (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT,
        active BOOLEAN,
        age INTEGER
    )
"""


class User(Record):
    table_name = "user"
    schema = {
        "id": ColumnType.INT,
        "name": ColumnType.STRING,
        "active": ColumnType.BOOL,
        "age": ColumnType.INT,
    }


class RecordingConnection(SqliteConnection):
    """SQLite adapter that remembers every statement it was asked to prepare."""

    def __init__(self, raw: sqlite3.Connection) -> None:
        super().__init__(raw)
        self.prepared: List[str] = []

    def prepare(self, sql: str) -> Statement:
        self.prepared.append(sql)
        return super().prepare(sql)


@pytest.fixture
def sqlite_raw() -> Generator[sqlite3.Connection, None, None]:
    """In-memory SQLite database with the `user` table created."""
    conn = sqlite3.connect(":memory:", isolation_level=None)
    conn.execute(USER_TABLE_DDL)
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture
def recording_conn(sqlite_raw: sqlite3.Connection) -> RecordingConnection:
    return RecordingConnection(sqlite_raw)


@pytest.fixture
def user_model() -> type:
    return User


@pytest.fixture
def user(recording_conn: RecordingConnection) -> User:
    return User(recording_conn)


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """
    Settings fixture with test-specific overrides.

    Can be overridden via environment variables in CI or local testing.
    """
    return Settings(
        db_driver="pgsql",
        db_host=os.getenv("DB_HOST", "localhost"),
        db_port=int(os.getenv("DB_PORT", "5432")),
        db_user=os.getenv("DB_USER", "postgres"),
        db_password=os.getenv("DB_PASSWORD", "postgres"),
        db_name=os.getenv("DB_NAME", "dbrecord"),
        db_connect_retries=1,
        log_level="DEBUG",
    )


@pytest.fixture(scope="session")
def test_dsn(test_settings: Settings) -> str:
    """
    Database connection string for tests.
    """
    return (
        f"postgresql://{test_settings.db_user}:{test_settings.db_password}"
        f"@{test_settings.db_host}:{test_settings.db_port}/{test_settings.db_name}"
    )


@pytest.fixture(scope="session")
def db_connection_available(test_dsn: str) -> bool:
    """
    Check if database is reachable.

    Used to conditionally skip integration tests when DB is not available.
    """
    try:
        with psycopg.connect(test_dsn, connect_timeout=5) as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1;")
                cur.fetchone()
        return True
    except psycopg.Error:
        return False


@pytest.fixture(scope="session")
def db_connection(
    test_dsn: str, db_connection_available: bool
) -> Generator[psycopg.Connection, None, None]:
    """
    Provide a session-scoped autocommit connection for integration tests.

    Skips tests if database is not available.
    """
    if not db_connection_available:
        pytest.skip("Database not available for integration tests")

    conn = psycopg.connect(test_dsn, autocommit=True)
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture(scope="function")
def clean_accounts_table(db_connection: psycopg.Connection):
    """
    Recreate the `account` table around each test function for isolation.
    """
    with db_connection.cursor() as cur:
        cur.execute("DROP TABLE IF EXISTS public.account;")
        cur.execute(
            "CREATE TABLE public.account ("
            " id SERIAL PRIMARY KEY,"
            " name TEXT,"
            " active BOOLEAN"
            ");"
        )
    yield
    with db_connection.cursor() as cur:
        cur.execute("DROP TABLE IF EXISTS public.account;")
