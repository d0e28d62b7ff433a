from __future__ import annotations

import json
import logging
import sqlite3

import pytest

from dbrecord import StatementExecuteError, get_settings
from dbrecord.utils.logging import JsonFormatter, _json_formatter, configure_logging

EXPECTED_ID = 10


def _record(**attrs) -> logging.LogRecord:
    record = logging.LogRecord(
        name="test.logger",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="hello",
        args=(),
        exc_info=None,
    )
    for key, value in attrs.items():
        setattr(record, key, value)
    return record


def test_json_formatter_promotes_standard_extra_fields() -> None:
    payload = json.loads(_json_formatter(_record(id=EXPECTED_ID, table="user")))

    assert payload["level"] == "INFO"
    assert payload["logger"] == "test.logger"
    assert payload["message"] == "hello"
    assert payload["id"] == EXPECTED_ID
    assert payload["table"] == "user"
    assert "pathname" not in payload


def test_json_formatter_supports_legacy_nested_extra_field() -> None:
    payload = json.loads(_json_formatter(_record(extra={"sql": "SELECT 1"})))

    assert payload["sql"] == "SELECT 1"
    assert "extra" not in payload


def test_json_formatter_stringifies_unserializable_values() -> None:
    payload = json.loads(JsonFormatter().format(_record(conn=object())))

    assert payload["conn"].startswith("<object object")


def test_configure_logging_sets_root_level() -> None:
    configure_logging(level="WARNING", json_logs=True)
    try:
        root = logging.getLogger()
        assert root.level == logging.WARNING
        assert isinstance(root.handlers[0].formatter, JsonFormatter)
    finally:
        configure_logging(level="INFO")


def test_configure_logging_defaults_come_from_settings(monkeypatch) -> None:
    monkeypatch.setenv("LOG_LEVEL", "error")
    monkeypatch.setenv("LOG_JSON", "true")
    get_settings.cache_clear()
    try:
        configure_logging()
        root = logging.getLogger()
        assert root.level == logging.ERROR
        assert isinstance(root.handlers[0].formatter, JsonFormatter)

        configure_logging(json_logs=False)
        assert root.level == logging.ERROR
        assert not isinstance(root.handlers[0].formatter, JsonFormatter)
    finally:
        get_settings.cache_clear()
        configure_logging(level="INFO", json_logs=False)


def test_record_statements_are_logged_at_debug(caplog, user) -> None:
    user.set("name", "ada")

    with caplog.at_level(logging.DEBUG, logger="dbrecord.record"):
        user.save()

    (entry,) = [r for r in caplog.records if r.getMessage() == "Executing statement"]
    assert entry.table == "user"
    assert entry.sql.startswith("INSERT INTO `user`")


def test_statement_failures_are_logged_at_error(caplog, user, sqlite_raw: sqlite3.Connection) -> None:
    sqlite_raw.execute("DROP TABLE user")
    user.set("name", "ada")

    with caplog.at_level(logging.ERROR, logger="dbrecord.infrastructure.connection"):
        with pytest.raises(StatementExecuteError):
            user.save()

    assert any(r.getMessage() == "Statement execution failed" for r in caplog.records)
