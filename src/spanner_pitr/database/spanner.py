"""Cloud Spanner implementation of the time-travel client.

Historical reads use single-use read-only snapshots bound to an exact read
timestamp; "now" reads are strong or bounded-staleness snapshots. Each call
checks a session out of the pool for the duration of the ``with`` block and
returns it on exit.

Errors from ``google-api-core`` are translated into the spanner-pitr
hierarchy so callers never depend on Google exception types.
"""

from __future__ import annotations

import base64
import logging
from contextlib import ExitStack, contextmanager
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterator, Optional, TYPE_CHECKING

from google.api_core import exceptions as google_exceptions
from google.auth import exceptions as auth_exceptions
from google.cloud import spanner
from google.cloud.spanner_v1.pool import FixedSizePool
from google.oauth2 import service_account

from spanner_pitr.database.config import SpannerClientConfig
from spanner_pitr.database.models import Column, ColumnType, Record
from spanner_pitr.errors import (
    ConfigurationError,
    QueryError,
    RelationNotFoundError,
    TargetNotFoundError,
)
from spanner_pitr.result import Err, Ok, Result

if TYPE_CHECKING:
    from spanner_pitr.configuration.settings import ConnectionSettings

logger = logging.getLogger(__name__)

_TARGET_MARKERS = ("Instance not found", "Database not found")
_RELATION_MARKER = "Table not found"


def to_utc(at: datetime) -> datetime:
    """Return ``at`` as an aware UTC datetime; naive values are taken as UTC."""
    if at.tzinfo is None:
        return at.replace(tzinfo=timezone.utc)
    return at.astimezone(timezone.utc)


def translate_error(exc: google_exceptions.GoogleAPIError, query: str) -> Exception:
    """Map a Google API error onto the spanner-pitr error hierarchy."""
    text = str(exc)
    details = {"error_type": type(exc).__name__}
    if isinstance(exc, google_exceptions.NotFound) and any(
        marker in text for marker in _TARGET_MARKERS
    ):
        return TargetNotFoundError(text, details=details)
    if _RELATION_MARKER in text:
        return RelationNotFoundError(text, details=details)
    return QueryError(text, details={**details, "query": query})


@contextmanager
def _translated(query: str) -> Iterator[None]:
    try:
        yield
    except google_exceptions.GoogleAPIError as exc:
        raise translate_error(exc, query) from exc


def _decode_value(column: Column, value: Any) -> Any:
    # The streaming API delivers BYTES cells as base64 text
    if column.type is ColumnType.BYTES and isinstance(value, (bytes, str)):
        return base64.b64decode(value)
    return value


class SpannerTimeTravelClient:
    """Read-only Spanner client implementing ``TimeTravelClient``.

    Example:
        >>> client = SpannerTimeTravelClient("my-project", "prod", "orders")
        >>> with client.execute_as_of("SELECT COUNT(*) > 0 FROM Orders", at) as rows:
        ...     print(next(iter(rows)).first())
    """

    def __init__(
        self,
        project: str,
        instance: str,
        database: str,
        *,
        credentials: Any = None,
        config: Optional[SpannerClientConfig] = None,
        spanner_client: Any = None,
    ) -> None:
        self.project = project
        self.instance_id = instance
        self.database_id = database
        self._config = config or SpannerClientConfig()
        self._spanner_client = spanner_client or spanner.Client(
            project=project, credentials=credentials
        )
        self._database: Any = None

    @classmethod
    def from_settings(
        cls,
        connection: "ConnectionSettings",
        config: Optional[SpannerClientConfig] = None,
    ) -> "SpannerTimeTravelClient":
        """Build a client from connection settings, loading service account credentials."""
        credentials = None
        if connection.credentials_file is not None:
            credentials = service_account.Credentials.from_service_account_file(
                str(connection.credentials_file)
            )
        return cls(
            connection.project,
            connection.instance,
            connection.database,
            credentials=credentials,
            config=config,
        )

    @property
    def database_path(self) -> str:
        return (
            f"projects/{self.project}/instances/{self.instance_id}"
            f"/databases/{self.database_id}"
        )

    def _get_database(self) -> Any:
        if self._database is None:
            with _translated(""):
                instance = self._spanner_client.instance(self.instance_id)
                pool = FixedSizePool(
                    size=self._config.session_pool_size,
                    default_timeout=self._config.query_timeout_seconds,
                )
                self._database = instance.database(
                    self.database_id,
                    pool=pool,
                    database_role=self._config.database_role,
                )
            logger.debug(f"Bound to Spanner database {self.database_path}")
        return self._database

    def execute_as_of(self, query: str, at: datetime):
        return self._snapshot_rows(query, {"read_timestamp": to_utc(at)})

    def execute_now(self, query: str, max_staleness: Optional[timedelta] = None):
        bound: Dict[str, Any] = {}
        if max_staleness is not None:
            bound["max_staleness"] = max_staleness
        return self._snapshot_rows(query, bound)

    @contextmanager
    def _snapshot_rows(self, query: str, bound: Dict[str, Any]) -> Iterator[Iterator[Record]]:
        with ExitStack() as stack:
            with _translated(query):
                database = self._get_database()
                snapshot = stack.enter_context(database.snapshot(**bound))
                results = snapshot.execute_sql(
                    query, timeout=self._config.query_timeout_seconds
                )
            rows = self._records(results, query)
            stack.callback(rows.close)
            yield rows

    @staticmethod
    def _records(results: Any, query: str) -> Iterator[Record]:
        columns: Optional[tuple] = None
        with _translated(query):
            for values in results:
                if columns is None:
                    columns = tuple(
                        Column(field.name, ColumnType.from_name(field.type_.code.name))
                        for field in results.fields
                    )
                yield Record(
                    columns,
                    tuple(_decode_value(column, value) for column, value in zip(columns, values)),
                )


def connect(
    connection: "ConnectionSettings",
    config: Optional[SpannerClientConfig] = None,
) -> Result[SpannerTimeTravelClient]:
    """Create a Spanner time-travel client, reporting failures as ``Err``."""
    logger.info(
        f"Connecting to Spanner database: {connection.project}/{connection.instance}/"
        f"{connection.database} ..."
    )
    try:
        return Ok(SpannerTimeTravelClient.from_settings(connection, config))
    except (
        google_exceptions.GoogleAPIError,
        auth_exceptions.GoogleAuthError,
        OSError,
        ValueError,
    ) as exc:
        return Err.from_exception(ConfigurationError(f"Could not create Spanner client: {exc}"))
