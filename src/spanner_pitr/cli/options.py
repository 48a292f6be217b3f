"""Parsing of ISO-8601 instants and durations given on the command line."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

import typer
from pydantic import TypeAdapter, ValidationError

_INSTANT = TypeAdapter(datetime)
_DURATION = TypeAdapter(timedelta)


def parse_instant(value: str, option: str = "timestamp") -> datetime:
    """Parse an ISO-8601 instant such as ``2020-06-01T12:00:00Z``.

    Values without an offset are taken as UTC.
    """
    try:
        parsed = _INSTANT.validate_python(value.strip())
    except ValidationError:
        raise typer.BadParameter(
            f"'{value}' is not an ISO-8601 instant (e.g. 2020-06-01T12:00:00Z)",
            param_hint=option,
        )
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def parse_duration(value: str, option: str = "duration") -> timedelta:
    """Parse an ISO-8601 duration such as ``PT0.5S`` or ``PT10M``."""
    try:
        parsed = _DURATION.validate_python(value.strip())
    except ValidationError:
        raise typer.BadParameter(
            f"'{value}' is not an ISO-8601 duration (e.g. PT0.5S)",
            param_hint=option,
        )
    if parsed <= timedelta(0):
        raise typer.BadParameter("duration must be positive", param_hint=option)
    return parsed


def resolve_window(
    start: Optional[str],
    end: Optional[str],
    default_window: timedelta,
    now: Optional[datetime] = None,
) -> tuple[datetime, datetime]:
    """Resolve --start/--end, defaulting to the ``default_window`` ending now."""
    now = now or datetime.now(timezone.utc)
    window_start = parse_instant(start, "--start") if start else now - default_window
    window_end = parse_instant(end, "--end") if end else now
    return window_start, window_end
