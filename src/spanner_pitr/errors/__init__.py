"""Centralized error definitions for spanner-pitr.

Expected failures (unreachable target, query errors, convergence failures)
travel to callers as ``Err`` results. The exception classes below are what
the database layer raises and what the search engine and exporter catch and
convert; they also carry the codes used to look up user-facing messages.

Usage:
    from spanner_pitr.errors import (
        PitrError,
        TargetNotFoundError,
        format_error_for_cli,
    )

    try:
        client.execute_as_of(query, at)
    except PitrError as e:
        console.print(format_error_for_cli(e))
"""

from __future__ import annotations

from spanner_pitr.errors.user_messages import (
    format_error_for_cli,
    format_error_for_user,
    get_recovery_suggestion,
    get_user_message,
)


# =============================================================================
# Base Error
# =============================================================================


class PitrError(Exception):
    """Base exception for all spanner-pitr errors.

    Attributes:
        code: Error code for categorization
        user_message: User-friendly message (optional override)
        recoverable: Whether the error is potentially recoverable
        details: Additional error details for debugging
    """

    code: str = "PITR_ERROR"
    default_message: str = "An unexpected error occurred"
    recoverable: bool = True

    def __init__(
        self,
        message: str | None = None,
        *,
        user_message: str | None = None,
        details: dict | None = None,
    ) -> None:
        self.message = message or self.default_message
        self._user_message = user_message
        self.details = details or {}
        super().__init__(self.message)

    @property
    def user_message(self) -> str:
        """Get user-friendly message."""
        if self._user_message:
            return self._user_message
        return get_user_message(self)

    @property
    def recovery_suggestion(self) -> str:
        """Get recovery suggestion."""
        return get_recovery_suggestion(self)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "code": self.code,
            "message": self.message,
            "user_message": self.user_message,
            "recoverable": self.recoverable,
            "details": self.details,
        }


# =============================================================================
# Database Errors
# =============================================================================


class DatabaseError(PitrError):
    """Base error for time-travel reads against the database."""

    code = "DATABASE_ERROR"
    default_message = "Database read failed"


class TargetNotFoundError(DatabaseError):
    """The instance or database being read does not exist or is unreachable."""

    code = "TARGET_NOT_FOUND"
    default_message = "Target instance or database not found"
    recoverable = False


class QueryError(DatabaseError):
    """The query failed to execute at the requested timestamp."""

    code = "QUERY_ERROR"
    default_message = "Query execution failed"


class RelationNotFoundError(QueryError):
    """A table referenced by the query did not exist at the read timestamp."""

    code = "RELATION_NOT_FOUND"
    default_message = "Table not found at the read timestamp"


# =============================================================================
# Search Errors
# =============================================================================


class SearchError(PitrError):
    """Base error for timeline searches."""

    code = "SEARCH_ERROR"
    default_message = "Timeline search failed"


class PreconditionError(SearchError):
    """The search window does not bracket a true-to-false transition."""

    code = "SEARCH_PRECONDITION"
    default_message = "Search window preconditions not met"


class ConvergenceError(SearchError):
    """The bracket collapsed before the requested accuracy was reached."""

    code = "SEARCH_CONVERGENCE"
    default_message = "Maximum accuracy reached without finding a result."


# =============================================================================
# Export Errors
# =============================================================================


class ExportError(PitrError):
    """Base error for point-in-time exports."""

    code = "EXPORT_ERROR"
    default_message = "Query export failed"


class StreamConsumedError(ExportError):
    """A single-pass record stream was iterated more than once."""

    code = "STREAM_CONSUMED"
    default_message = "Record stream has already been consumed"
    recoverable = False


# =============================================================================
# Audit Log Errors
# =============================================================================


class AuditLogError(PitrError):
    """Searching the commit audit log failed."""

    code = "AUDIT_LOG_ERROR"
    default_message = "Commit log search failed"


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(PitrError):
    """Base error for configuration issues."""

    code = "CONFIGURATION_ERROR"
    default_message = "Configuration error"


class InvalidConfigError(ConfigurationError):
    """Configuration is invalid."""

    code = "INVALID_CONFIG"
    default_message = "Invalid configuration"


class MissingConfigError(ConfigurationError):
    """Required configuration is missing."""

    code = "MISSING_CONFIG"
    default_message = "Missing required configuration"


# =============================================================================
# Error Handler
# =============================================================================


def is_recoverable(error: Exception) -> bool:
    """Check if an error is potentially recoverable.

    Args:
        error: The exception to check

    Returns:
        True if the error is recoverable
    """
    if isinstance(error, PitrError):
        return error.recoverable
    return False


__all__ = [
    # Base
    "PitrError",
    # Database
    "DatabaseError",
    "TargetNotFoundError",
    "QueryError",
    "RelationNotFoundError",
    # Search
    "SearchError",
    "PreconditionError",
    "ConvergenceError",
    # Export
    "ExportError",
    "StreamConsumedError",
    # Audit log
    "AuditLogError",
    # Configuration
    "ConfigurationError",
    "InvalidConfigError",
    "MissingConfigError",
    # Handlers
    "format_error_for_cli",
    "format_error_for_user",
    "is_recoverable",
]
