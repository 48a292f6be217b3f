"""Time-travel read client abstraction.

The search engine and exporter only ever talk to a ``TimeTravelClient``.
Both read methods return a context manager so the underlying cursor (and
whatever session backs it) is released when the ``with`` block exits, on
every exit path::

    with client.execute_as_of("SELECT true FROM Orders LIMIT 1", at) as rows:
        first = next(iter(rows), None)

Implementations raise:
    TargetNotFoundError: the instance or database does not exist.
    RelationNotFoundError: a table did not exist at the read timestamp.
    QueryError: any other failure executing or streaming the query.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import ContextManager, Iterator, Optional, Protocol, runtime_checkable

from spanner_pitr.database.models import Record


@runtime_checkable
class TimeTravelClient(Protocol):
    """Read-only client able to execute a query as of a past instant."""

    def execute_as_of(self, query: str, at: datetime) -> ContextManager[Iterator[Record]]:
        """Execute ``query`` against the database as it was at ``at``."""
        ...

    def execute_now(
        self, query: str, max_staleness: Optional[timedelta] = None
    ) -> ContextManager[Iterator[Record]]:
        """Execute ``query`` against current data.

        A strong read when ``max_staleness`` is None, otherwise a bounded
        stale read no older than ``max_staleness``.
        """
        ...
