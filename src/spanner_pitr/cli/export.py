"""Point-in-time export command.

Exports the results of a query, as they were at a given timestamp, to an
optionally compressed CSV file. Files whose name ends in ``.gz`` are gzip
compressed.

Suitable for queries returning a relatively small number of rows. For large
queries, use a Dataflow pipeline instead.
"""

import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import typer

from spanner_pitr.cli.app import console, get_settings, report_failure
from spanner_pitr.cli.options import parse_instant
from spanner_pitr.configuration.settings import ExportSettings
from spanner_pitr.database.spanner import connect
from spanner_pitr.errors import PitrError
from spanner_pitr.export.exporter import QueryExporter
from spanner_pitr.result import Err

logger = logging.getLogger(__name__)


def _default_output_file(export: ExportSettings) -> Path:
    handle, name = tempfile.mkstemp(prefix=export.temp_prefix, suffix=export.temp_suffix)
    os.close(handle)
    return Path(name)


def export_command(
    ctx: typer.Context,
    query: str = typer.Argument(..., help="Query whose results to export"),
    at: Optional[str] = typer.Option(
        None, "--at", "-a", help="Read timestamp (ISO-8601 instant); default now"
    ),
    output_file: Optional[Path] = typer.Option(
        None,
        "--output-file",
        "-o",
        dir_okay=False,
        help="Destination CSV file; a temporary .csv.gz file by default",
    ),
) -> None:
    """Export the results of a query as of a timestamp to CSV."""
    settings = get_settings(ctx)
    read_at = parse_instant(at, "--at") if at else datetime.now(timezone.utc)

    try:
        connection = settings.require_connection()
    except PitrError as e:
        report_failure(Err.from_exception(e), "Could not connect to Spanner")

    destination = output_file or _default_output_file(settings.export)
    connected = connect(connection, settings.client)
    if isinstance(connected, Err):
        report_failure(connected, "Could not connect to Spanner")

    logger.info(f"Exporting query to {destination} at timestamp {read_at.isoformat()}...")
    outcome = QueryExporter(query, read_at, destination, connected.value).export_records()
    if isinstance(outcome, Err):
        report_failure(outcome, "Error exporting query")

    summary = outcome.value
    logger.info("Completed query export.")
    console.print(
        f"Exported {summary.rows} rows to {summary.destination}",
        highlight=False,
        soft_wrap=True,
    )
