"""Textual rendering of result-set values for CSV export."""

from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, List, Optional, Sequence, Tuple

from spanner_pitr.database.models import Column, ColumnType, Record


def format_timestamp(value: datetime) -> str:
    """Render a timestamp as RFC 3339 in UTC with a ``Z`` suffix."""
    # DatetimeWithNanoseconds keeps sub-microsecond precision
    rfc3339 = getattr(value, "rfc3339", None)
    if callable(rfc3339):
        return rfc3339()
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def render_value(column_type: ColumnType, value: Any) -> Optional[str]:
    """Render one value according to its declared column type.

    Returns None (the absent marker) for SQL NULL and for types without a
    textual rendering (ARRAY, STRUCT, JSON, UNKNOWN).
    """
    if value is None:
        return None

    if column_type is ColumnType.BOOL:
        return "true" if value else "false"
    if column_type is ColumnType.BYTES:
        if isinstance(value, (bytes, bytearray)):
            return bytes(value).decode("utf-8", errors="replace")
        return str(value)
    if column_type is ColumnType.DATE:
        return value.isoformat() if isinstance(value, date) else str(value)
    if column_type is ColumnType.TIMESTAMP:
        return format_timestamp(value) if isinstance(value, datetime) else str(value)
    if column_type is ColumnType.INT64:
        return str(int(value))
    if column_type in (ColumnType.FLOAT32, ColumnType.FLOAT64):
        return str(float(value))
    if column_type is ColumnType.NUMERIC:
        return format(value, "f") if isinstance(value, Decimal) else str(value)
    if column_type is ColumnType.STRING:
        return str(value)
    return None


def to_export_record(
    record: Record, columns: Optional[Sequence[Column]] = None
) -> List[Tuple[str, Optional[str]]]:
    """Render a record as ordered ``(column name, text)`` pairs.

    ``columns`` fixes the column set and order, normally taken from the first
    record of an export; defaults to the record's own columns. Values are
    matched by position when the record has exactly those columns, so
    repeated and unnamed columns keep their own values. Otherwise they are
    looked up by name.
    """
    if columns is None or tuple(columns) == record.columns:
        return [(column.name, render_value(column.type, value)) for column, value in record.items()]
    return [
        (column.name, render_value(column.type, record.get(column.name)))
        for column in columns
    ]
