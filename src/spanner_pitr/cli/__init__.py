"""Command line entry points for spanner-pitr."""

from .app import cli
from .export import export_command
from .logs import search_logs_command
from .query import query_command


cli.command("query")(query_command)
cli.command("export-query")(export_command)
cli.command("search-logs")(search_logs_command)

__all__ = ["cli", "query_command", "export_command", "search_logs_command"]
