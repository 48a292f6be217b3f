"""Timeline search command.

Commands:
    spanner-pitr query "SELECT true FROM Orders LIMIT 1" --start 2020-06-01T10:00:00Z
    spanner-pitr query "SELECT COUNT(*) > 30 FROM Orders" --accuracy PT1S --json
"""

import json
import logging
from typing import Optional

import typer

from spanner_pitr.cli.app import console, get_settings, report_failure
from spanner_pitr.cli.options import parse_duration, resolve_window
from spanner_pitr.database.spanner import connect
from spanner_pitr.errors import PitrError
from spanner_pitr.result import Err
from spanner_pitr.search.engine import TimelineSearcher

logger = logging.getLogger(__name__)


def query_command(
    ctx: typer.Context,
    query: str = typer.Argument(..., help="Check query returning a single boolean"),
    start: Optional[str] = typer.Option(
        None, "--start", help="Window start (ISO-8601 instant); default one hour ago"
    ),
    end: Optional[str] = typer.Option(None, "--end", help="Window end (ISO-8601 instant); default now"),
    accuracy: Optional[str] = typer.Option(
        None, "--accuracy", help="Target accuracy (ISO-8601 duration); default PT0.5S"
    ),
    output_json: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
) -> None:
    """Find the latest timestamp at which the check query returned true.

    Runs the query at bisected timestamps between --start and --end. The
    timestamp found is the latest point from which data can be restored.
    """
    settings = get_settings(ctx)
    window_start, window_end = resolve_window(start, end, settings.search.window)
    target_accuracy = parse_duration(accuracy, "--accuracy") if accuracy else settings.search.accuracy

    try:
        connection = settings.require_connection()
    except PitrError as e:
        report_failure(Err.from_exception(e), "Could not connect to Spanner")

    connected = connect(connection, settings.client)
    if isinstance(connected, Err):
        report_failure(connected, "Could not connect to Spanner")
    logger.info("Connected to Spanner.")

    searcher = TimelineSearcher(query, window_start, window_end, target_accuracy, connected.value)
    outcome = searcher.find_closest_time()
    if isinstance(outcome, Err):
        report_failure(outcome, "Error finding timestamp")

    found = outcome.value
    logger.info(f"Found closest timestamp: {found.isoformat()}")
    if output_json:
        typer.echo(
            json.dumps(
                {
                    "timestamp": found.isoformat(),
                    "start": window_start.isoformat(),
                    "end": window_end.isoformat(),
                    "accuracy_seconds": target_accuracy.total_seconds(),
                    "steps": len(searcher.steps),
                }
            )
        )
    else:
        console.print(found.isoformat(), highlight=False)
