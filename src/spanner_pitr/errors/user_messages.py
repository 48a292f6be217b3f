"""User-friendly error messages for spanner-pitr.

Maps error codes to short explanations and recovery suggestions so the CLI
never prints a bare stack trace for an expected failure.

Privacy Note:
- Query text is never echoed back in formatted messages
- Credential paths are never included in details output
"""

from __future__ import annotations

from typing import Any


# =============================================================================
# Error Message Catalog
# =============================================================================

ERROR_MESSAGES: dict[str, str] = {
    # Database errors
    "DATABASE_ERROR": "The read against Spanner failed.",
    "TARGET_NOT_FOUND": "The Spanner instance or database could not be found.",
    "QUERY_ERROR": "The query could not be executed at the requested timestamp.",
    "RELATION_NOT_FOUND": "A table used by the query did not exist at that timestamp.",
    # Search errors
    "SEARCH_ERROR": "The timeline search could not complete.",
    "SEARCH_PRECONDITION": "The search window does not contain a change in the query result.",
    "SEARCH_CONVERGENCE": "The search window collapsed before reaching the requested accuracy.",
    # Export errors
    "EXPORT_ERROR": "The query export could not complete.",
    "STREAM_CONSUMED": "The result stream was already read once.",
    # Audit log errors
    "AUDIT_LOG_ERROR": "The commit log search failed.",
    # Configuration errors
    "CONFIGURATION_ERROR": "There's a configuration issue.",
    "INVALID_CONFIG": "The configuration is invalid.",
    "MISSING_CONFIG": "Required configuration is missing.",
    # Generic
    "PITR_ERROR": "An unexpected error occurred.",
    "UNKNOWN_ERROR": "Something went wrong.",
}


# =============================================================================
# Recovery Suggestions
# =============================================================================

RECOVERY_SUGGESTIONS: dict[str, str] = {
    "DATABASE_ERROR": "Check network access to Spanner and retry.",
    "TARGET_NOT_FOUND": "Verify --project, --instance and --database.",
    "QUERY_ERROR": "Run the query against the current database to check its syntax.",
    "RELATION_NOT_FOUND": "Pick a window in which the table existed, or query an older timestamp.",
    "SEARCH_ERROR": "Retry the search; if it keeps failing, narrow the window.",
    "SEARCH_PRECONDITION": "The query must return true at --start and false at --end. Widen the window.",
    "SEARCH_CONVERGENCE": "Use a coarser --accuracy or check that the query changes only once in the window.",
    "EXPORT_ERROR": "Check the query and that the output path is writable.",
    "STREAM_CONSUMED": "Open a new export for each pass over the results.",
    "AUDIT_LOG_ERROR": "Check that Data Access audit logs are enabled for Spanner.",
    "CONFIGURATION_ERROR": "Check the config file and SPANNER_PITR_* environment variables.",
    "INVALID_CONFIG": "Fix the reported field in the config file.",
    "MISSING_CONFIG": "Pass the missing option on the command line or set it in the config file.",
    "PITR_ERROR": "Retry with --verbose for details.",
    "UNKNOWN_ERROR": "Retry with --verbose for details.",
}


# =============================================================================
# Helper Functions
# =============================================================================


def _error_code(error: Any) -> str:
    if hasattr(error, "code"):
        return error.code
    if isinstance(error, str):
        return error
    return type(error).__name__.upper()


def get_user_message(error: Any) -> str:
    """Get user-friendly message for an error.

    Args:
        error: The error (can be Exception or error code string)

    Returns:
        User-friendly error message
    """
    return ERROR_MESSAGES.get(_error_code(error), ERROR_MESSAGES["UNKNOWN_ERROR"])


def get_recovery_suggestion(error: Any) -> str:
    """Get recovery suggestion for an error."""
    return RECOVERY_SUGGESTIONS.get(_error_code(error), RECOVERY_SUGGESTIONS["UNKNOWN_ERROR"])


def format_error_for_user(error: Any) -> str:
    """Format a complete user-friendly error message with recovery suggestion."""
    message = get_user_message(error)
    suggestion = get_recovery_suggestion(error)

    return f"{message}\n\nSuggestion: {suggestion}"


def format_error_for_cli(error: Any) -> str:
    """Format error for CLI output.

    Args:
        error: The error to format

    Returns:
        CLI-formatted error message
    """
    message = get_user_message(error)
    suggestion = get_recovery_suggestion(error)
    code = getattr(error, "code", "ERROR")

    lines = [
        f"Error [{code}]: {message}",
    ]
    detail = getattr(error, "message", None)
    if detail and detail != message:
        lines.append(f"  {detail}")
    lines.extend(["", f"Suggestion: {suggestion}"])

    if hasattr(error, "details") and error.details:
        lines.append("")
        lines.append("Details:")
        for key, value in error.details.items():
            # Don't expose sensitive details
            if key not in ("query", "credentials_file", "password", "token"):
                lines.append(f"  {key}: {value}")

    return "\n".join(lines)


__all__ = [
    "ERROR_MESSAGES",
    "RECOVERY_SUGGESTIONS",
    "get_user_message",
    "get_recovery_suggestion",
    "format_error_for_user",
    "format_error_for_cli",
]
