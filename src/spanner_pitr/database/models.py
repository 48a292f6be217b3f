"""Row and column types returned by time-travel reads."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterator, Optional, Tuple


class ColumnType(str, Enum):
    """Declared type of a result-set column.

    Names follow Spanner's ``TypeCode`` so adapters can map by name.
    """

    BOOL = "BOOL"
    INT64 = "INT64"
    FLOAT32 = "FLOAT32"
    FLOAT64 = "FLOAT64"
    NUMERIC = "NUMERIC"
    STRING = "STRING"
    BYTES = "BYTES"
    DATE = "DATE"
    TIMESTAMP = "TIMESTAMP"
    JSON = "JSON"
    ARRAY = "ARRAY"
    STRUCT = "STRUCT"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def from_name(cls, name: Optional[str]) -> "ColumnType":
        """Resolve a type name, falling back to UNKNOWN for unmapped types."""
        if not name:
            return cls.UNKNOWN
        try:
            return cls(name.upper())
        except ValueError:
            return cls.UNKNOWN


@dataclass(frozen=True)
class Column:
    """Name and declared type of one result-set column."""

    name: str
    type: ColumnType = ColumnType.UNKNOWN


@dataclass(frozen=True)
class Record:
    """One result-set row together with its column metadata.

    Values are the Python objects produced by the database driver
    (``bool``, ``int``, ``bytes``, ``datetime.date``, ...) in column order.
    """

    columns: Tuple[Column, ...]
    values: Tuple[Any, ...]

    def __post_init__(self) -> None:
        if len(self.columns) != len(self.values):
            raise ValueError(
                f"Record has {len(self.values)} values for {len(self.columns)} columns"
            )

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(column.name for column in self.columns)

    def first(self) -> Any:
        """Return the value of the first column, or None for a zero-column row."""
        return self.values[0] if self.values else None

    def get(self, name: str, default: Any = None) -> Any:
        for column, value in zip(self.columns, self.values):
            if column.name == name:
                return value
        return default

    def items(self) -> Iterator[Tuple[Column, Any]]:
        return iter(zip(self.columns, self.values))

    def __len__(self) -> int:
        return len(self.values)
