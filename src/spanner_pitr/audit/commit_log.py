"""Search Cloud Audit Logs for commits against a Spanner database.

Complements the timeline search: once the moment of loss is known, the
commit log shows which principals wrote to the database around it.
Requires Data Access audit logging to be enabled for Cloud Spanner.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, TYPE_CHECKING

from google.api_core import exceptions as google_exceptions
from google.auth import exceptions as auth_exceptions
from google.cloud import logging as cloud_logging
from google.oauth2 import service_account

from spanner_pitr.errors import AuditLogError
from spanner_pitr.result import Err, Ok, Result

if TYPE_CHECKING:
    from spanner_pitr.configuration.settings import ConnectionSettings

logger = logging.getLogger(__name__)

COMMIT_METHOD = "google.spanner.v1.Spanner.Commit"


@dataclass(frozen=True)
class CommitLogEntry:
    """One commit audit log entry."""

    timestamp: Optional[datetime]
    principal: Optional[str]
    method: Optional[str]
    insert_id: Optional[str]

    @classmethod
    def from_log_entry(cls, entry: Any) -> "CommitLogEntry":
        payload: Dict[str, Any] = entry.payload if isinstance(entry.payload, dict) else {}
        authentication = payload.get("authenticationInfo") or {}
        principal = authentication.get("principalSubject") or authentication.get(
            "principalEmail"
        )
        return cls(
            timestamp=entry.timestamp,
            principal=principal,
            method=payload.get("methodName"),
            insert_id=entry.insert_id,
        )


def _rfc3339(at: datetime) -> str:
    if at.tzinfo is None:
        at = at.replace(tzinfo=timezone.utc)
    return at.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def build_commit_log_filter(
    project: str,
    instance: str,
    database: str,
    start: datetime,
    end: datetime,
    account_expression: str = ".*",
) -> str:
    """Build the Cloud Logging filter selecting commits by matching principals."""
    database_name = f"projects/{project}/instances/{instance}/databases/{database}"
    clauses = [
        'resource.type="spanner_instance"',
        f'resource.labels.instance_id="{instance}"',
        f'resource.labels.project_id="{project}"',
        f'protoPayload.authenticationInfo.principalSubject=~"user:{account_expression}"',
        f'protoPayload.methodName="{COMMIT_METHOD}"',
        f'protoPayload.authorizationInfo.resourceAttributes.name="{database_name}"',
        f'timestamp >= "{_rfc3339(start)}"',
        f'timestamp <= "{_rfc3339(end)}"',
    ]
    return " AND\n".join(clauses)


def search_commit_logs(
    connection: "ConnectionSettings",
    start: datetime,
    end: datetime,
    account_expression: str = ".*",
    client: Any = None,
) -> Result[List[CommitLogEntry]]:
    """List commit audit entries for the configured database between ``start`` and ``end``."""
    log_filter = build_commit_log_filter(
        connection.project,
        connection.instance,
        connection.database,
        start,
        end,
        account_expression,
    )
    logger.info(
        f"Finding Spanner commit log entries between {_rfc3339(start)} and {_rfc3339(end)} "
        f"for users matching regex '{account_expression}'"
    )
    logger.debug(log_filter)

    try:
        if client is None:
            credentials = None
            if connection.credentials_file is not None:
                credentials = service_account.Credentials.from_service_account_file(
                    str(connection.credentials_file)
                )
            client = cloud_logging.Client(project=connection.project, credentials=credentials)
        entries = client.list_entries(
            resource_names=[f"projects/{connection.project}"],
            filter_=log_filter,
            order_by=cloud_logging.ASCENDING,
        )
        return Ok([CommitLogEntry.from_log_entry(entry) for entry in entries])
    except google_exceptions.GoogleAPIError as e:
        return Err.from_exception(AuditLogError(str(e)))
    except (auth_exceptions.GoogleAuthError, OSError, ValueError) as e:
        return Err.from_exception(AuditLogError(f"Could not create logging client: {e}"))
