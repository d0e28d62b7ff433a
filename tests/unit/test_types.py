from __future__ import annotations

import pytest

from dbrecord import ColumnType, ColumnValueError
from dbrecord.domain.types import is_empty


@pytest.mark.parametrize(
    "column_type,raw,expected",
    [
        (ColumnType.INT, "12", 12),
        (ColumnType.INT, 7, 7),
        (ColumnType.BOOL, 1, True),
        (ColumnType.BOOL, 0, False),
        (ColumnType.BOOL, "yes", True),
        (ColumnType.STRING, "ada", "ada"),
        (ColumnType.STRING, 5, "5"),
    ],
)
def test_values_are_converted_to_the_column_type(column_type, raw, expected) -> None:
    converted = column_type.to_db(raw)
    assert converted == expected
    assert type(converted) is type(expected)


@pytest.mark.parametrize("column_type", list(ColumnType))
def test_none_passes_through(column_type) -> None:
    assert column_type.to_db(None) is None
    assert column_type.from_db(None) is None


@pytest.mark.parametrize(
    "column_type,raw",
    [(ColumnType.INT, "abc"), (ColumnType.INT, 1.5), (ColumnType.BOOL, "maybe")],
)
def test_unconvertible_values_raise(column_type, raw) -> None:
    with pytest.raises(ColumnValueError):
        column_type.to_db(raw)


def test_column_type_accepts_string_tags() -> None:
    assert ColumnType("int") is ColumnType.INT
    assert ColumnType("string") is ColumnType.STRING
    assert ColumnType("bool") is ColumnType.BOOL


def test_column_type_keeps_str_methods() -> None:
    assert ColumnType.STRING.encode("utf-8") == b"utf-8"
    assert ColumnType.INT.upper() == "INT"


@pytest.mark.parametrize("value", [None, "", "0", 0, False])
def test_empty_primary_key_values(value) -> None:
    assert is_empty(value) is True


@pytest.mark.parametrize("value", [1, "1", "abc", True])
def test_non_empty_primary_key_values(value) -> None:
    assert is_empty(value) is False
