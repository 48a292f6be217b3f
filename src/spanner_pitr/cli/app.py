"""Root Typer application, global options and shared CLI helpers."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import NoReturn, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from spanner_pitr.configuration.settings import DEFAULT_CONFIG_PATH, Settings, bootstrap_settings
from spanner_pitr.errors import ConfigurationError, PitrError, format_error_for_cli
from spanner_pitr.result import Err

logger = logging.getLogger(__name__)

console = Console()
err_console = Console(stderr=True)

cli = typer.Typer(
    help="Point-in-time recovery tools for Cloud Spanner",
    no_args_is_help=True,
)


def configure_logging(verbose: bool) -> None:
    """Route log records through rich on stderr; DEBUG when verbose."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=verbose)],
        force=True,
    )
    if not verbose:
        logging.getLogger("google").setLevel(logging.WARNING)


def report_failure(outcome: Err, context: str) -> NoReturn:
    """Log a failed outcome, show the user-facing explanation and exit 1."""
    logger.error(f"{context}: {outcome.error}")
    if isinstance(outcome.exception, PitrError):
        err_console.print(format_error_for_cli(outcome.exception), markup=False)
    raise typer.Exit(code=1)


def get_settings(ctx: typer.Context) -> Settings:
    settings = ctx.find_root().obj
    if not isinstance(settings, Settings):
        settings = bootstrap_settings()
    return settings


@cli.callback()
def main(
    ctx: typer.Context,
    project: Optional[str] = typer.Option(None, "--project", help="Google Cloud project ID"),
    instance: Optional[str] = typer.Option(None, "--instance", help="Spanner instance ID"),
    database: Optional[str] = typer.Option(None, "--database", help="Spanner database ID"),
    credentials: Optional[Path] = typer.Option(
        None,
        "--credentials",
        envvar="GOOGLE_APPLICATION_CREDENTIALS",
        help="Service account key file",
    ),
    config_path: Path = typer.Option(DEFAULT_CONFIG_PATH, "--config", help="Path to config file"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Enable debug logging"),
) -> None:
    """Find when data was lost in a Spanner database, and export it as it was."""
    configure_logging(verbose)
    overrides = {
        "connection": {
            "project": project,
            "instance": instance,
            "database": database,
            "credentials_file": str(credentials) if credentials else None,
        }
    }
    try:
        ctx.obj = bootstrap_settings(path=config_path, overrides=overrides)
    except ConfigurationError as e:
        err_console.print(format_error_for_cli(e), markup=False)
        raise typer.Exit(code=1)
