"""Point-in-time query export.

Components:
    - stream_records / RecordStream: lazy single-pass read as of a timestamp
    - export_records / QueryExporter: quoted CSV output, gzip for ``.gz`` paths
    - render_value / to_export_record: type-aware textual rendering
"""

from spanner_pitr.export.exporter import (
    ExportSummary,
    QueryExporter,
    export_records,
    is_compressed,
    open_destination,
    write_records,
)
from spanner_pitr.export.stream import RecordStream, stream_records
from spanner_pitr.export.values import format_timestamp, render_value, to_export_record

__all__ = [
    "ExportSummary",
    "QueryExporter",
    "RecordStream",
    "export_records",
    "stream_records",
    "is_compressed",
    "open_destination",
    "write_records",
    "format_timestamp",
    "render_value",
    "to_export_record",
]
