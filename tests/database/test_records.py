"""Tests for record and column types."""

import pytest

from spanner_pitr.database.models import Column, ColumnType, Record


@pytest.mark.parametrize(
    ("name", "expected"),
    [("BOOL", ColumnType.BOOL), ("int64", ColumnType.INT64), ("PROTO", ColumnType.UNKNOWN), (None, ColumnType.UNKNOWN)],
)
def test_column_type_from_name(name, expected) -> None:
    assert ColumnType.from_name(name) is expected


def test_record_lookup() -> None:
    record = Record((Column("id", ColumnType.STRING), Column("ok", ColumnType.BOOL)), ("a", True))

    assert record.names == ("id", "ok")
    assert record.first() == "a"
    assert record.get("ok") is True
    assert record.get("missing", "default") == "default"
    assert len(record) == 2


def test_record_rejects_mismatched_lengths() -> None:
    with pytest.raises(ValueError):
        Record((Column("id"),), ())


def test_zero_column_record_has_no_first_value() -> None:
    assert Record((), ()).first() is None
