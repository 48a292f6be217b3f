"""Time-travel database access.

Components:
    - TimeTravelClient: protocol consumed by the search engine and exporter
    - Record / Column / ColumnType: rows with typed column metadata
    - SpannerTimeTravelClient: Cloud Spanner implementation
    - SpannerClientConfig: per-read tuning
"""

from spanner_pitr.database.client import TimeTravelClient
from spanner_pitr.database.config import SpannerClientConfig
from spanner_pitr.database.models import Column, ColumnType, Record

__all__ = [
    "TimeTravelClient",
    "SpannerClientConfig",
    "Column",
    "ColumnType",
    "Record",
]
