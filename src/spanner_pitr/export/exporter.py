"""Point-in-time export of query results to (optionally gzipped) CSV.

Suitable for queries returning a modest number of rows; for large tables a
Dataflow export is the better tool.
"""

from __future__ import annotations

import csv
import gzip
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Iterable, Iterator, Optional, TextIO, Tuple, Union

from spanner_pitr.database.client import TimeTravelClient
from spanner_pitr.database.models import Column, Record
from spanner_pitr.errors import ExportError, PitrError, QueryError
from spanner_pitr.export.stream import RecordStream, stream_records
from spanner_pitr.export.values import to_export_record
from spanner_pitr.result import Err, Ok, Result

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


@dataclass(frozen=True)
class ExportSummary:
    """Outcome of a successful export."""

    destination: Path
    rows: int
    columns: Tuple[str, ...]
    compressed: bool


def is_compressed(destination: PathLike) -> bool:
    """Whether ``destination`` should be gzip framed (``.gz`` suffix)."""
    return Path(destination).suffix == ".gz"


@contextmanager
def open_destination(destination: PathLike) -> Iterator[TextIO]:
    """Open ``destination`` for UTF-8 text output, gzipped for ``.gz`` paths."""
    if is_compressed(destination):
        handle = gzip.open(destination, "wt", encoding="utf-8", newline="")
    else:
        handle = open(destination, "w", encoding="utf-8", newline="")
    with handle:
        yield handle


def csv_writer(handle: TextIO):
    """Quoted CSV: ``"`` quotes around every non-null field, ``,`` and ``\\n``."""
    return csv.writer(
        handle,
        delimiter=",",
        quotechar='"',
        quoting=csv.QUOTE_NOTNULL,
        lineterminator="\n",
    )


def write_records(records: Iterable[Record], handle: TextIO) -> Tuple[int, Tuple[str, ...]]:
    """Serialize ``records`` to ``handle``.

    The header comes from the first record and is written once; nothing at
    all is written for an empty sequence.

    Returns:
        Number of data rows written and the header column names.
    """
    writer = csv_writer(handle)
    header: Optional[Tuple[Column, ...]] = None
    names: Tuple[str, ...] = ()
    rows = 0
    for record in records:
        if header is None:
            header, names = record.columns, record.names
            writer.writerow(names)
        writer.writerow([text for _, text in to_export_record(record, header)])
        rows += 1
    return rows, names


def export_records(
    query: str,
    at: datetime,
    destination: PathLike,
    client: TimeTravelClient,
) -> Result[ExportSummary]:
    """Export the result set of ``query`` as of ``at`` to ``destination``."""
    destination = Path(destination)
    opened = stream_records(query, at, client)
    if isinstance(opened, Err):
        return opened

    records: RecordStream = opened.value
    with records:
        try:
            with open_destination(destination) as handle:
                rows, columns = write_records(records, handle)
        except PitrError as e:
            return Err.from_exception(e)
        except (OSError, csv.Error, UnicodeError) as e:
            return Err.from_exception(ExportError(f"Failed writing {destination}: {e}"))
        except Exception as e:
            return Err.from_exception(QueryError(str(e)))

    logger.info(f"Exported {rows} rows to {destination}")
    return Ok(
        ExportSummary(
            destination=destination,
            rows=rows,
            columns=columns,
            compressed=is_compressed(destination),
        )
    )


class QueryExporter:
    """Exports one query as of a fixed timestamp.

    Example:
        >>> exporter = QueryExporter(query, at, Path("orders.csv.gz"), client)
        >>> outcome = exporter.export_records()
    """

    def __init__(
        self,
        query: str,
        at: datetime,
        output_file: PathLike,
        client: TimeTravelClient,
    ) -> None:
        self.query = query
        self.at = at
        self.output_file = Path(output_file)
        self.client = client

    def stream_records(self) -> Result[RecordStream]:
        return stream_records(self.query, self.at, self.client)

    def export_records(self) -> Result[ExportSummary]:
        return export_records(self.query, self.at, self.output_file, self.client)
