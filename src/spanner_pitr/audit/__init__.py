"""Commit audit log search for Spanner databases."""

from spanner_pitr.audit.commit_log import (
    COMMIT_METHOD,
    CommitLogEntry,
    build_commit_log_filter,
    search_commit_logs,
)

__all__ = [
    "COMMIT_METHOD",
    "CommitLogEntry",
    "build_commit_log_filter",
    "search_commit_logs",
]
