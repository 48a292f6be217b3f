"""Commit audit log search command.

Searches the Cloud Logging history for commits to the configured Spanner
database between --start and --end by principals matching a regex.
"""

import logging
from typing import Optional

import typer
from rich.table import Table

from spanner_pitr.audit.commit_log import search_commit_logs
from spanner_pitr.cli.app import console, get_settings, report_failure
from spanner_pitr.cli.options import resolve_window
from spanner_pitr.errors import PitrError
from spanner_pitr.result import Err

logger = logging.getLogger(__name__)


def search_logs_command(
    ctx: typer.Context,
    start: Optional[str] = typer.Option(
        None, "--start", help="Window start (ISO-8601 instant); default one hour ago"
    ),
    end: Optional[str] = typer.Option(None, "--end", help="Window end (ISO-8601 instant); default now"),
    account_expression: str = typer.Option(
        ".*",
        "--account-expression",
        "--accountExpression",
        help="Regex matched against the committing user account",
    ),
) -> None:
    """List commits to the database between --start and --end."""
    settings = get_settings(ctx)
    window_start, window_end = resolve_window(start, end, settings.search.window)

    try:
        connection = settings.require_connection()
    except PitrError as e:
        report_failure(Err.from_exception(e), "Could not search commit logs")

    outcome = search_commit_logs(connection, window_start, window_end, account_expression)
    if isinstance(outcome, Err):
        report_failure(outcome, "Could not search commit logs")

    entries = outcome.value
    if not entries:
        console.print("No commit log entries found.")
        return

    table = Table(title=f"Commits to {connection.database}")
    table.add_column("Timestamp")
    table.add_column("Principal")
    table.add_column("Method")
    table.add_column("Insert ID")
    for entry in entries:
        table.add_row(
            entry.timestamp.isoformat() if entry.timestamp else "-",
            entry.principal or "-",
            entry.method or "-",
            entry.insert_id or "-",
        )
    console.print(table)
