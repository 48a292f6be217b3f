"""Lazy single-pass record streams backed by a live cursor."""

from __future__ import annotations

import logging
from contextlib import ExitStack
from datetime import datetime
from typing import Iterator, Optional

from spanner_pitr.database.client import TimeTravelClient
from spanner_pitr.database.models import Record
from spanner_pitr.errors import PitrError, QueryError, StreamConsumedError
from spanner_pitr.result import Err, Ok, Result

logger = logging.getLogger(__name__)


class RecordStream:
    """Forward-only stream of records owning the cursor that produces them.

    The stream can be iterated once. The cursor is released when iteration
    finishes, fails, or the stream is closed; closing is idempotent, and the
    stream doubles as a context manager for callers that may abandon it::

        with stream:
            for record in stream:
                ...
    """

    def __init__(self, first: Optional[Record], rows: Iterator[Record], resources: ExitStack) -> None:
        self._first = first
        self._rows = rows
        self._resources = resources
        self._consumed = False
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def __iter__(self) -> Iterator[Record]:
        if self._consumed:
            raise StreamConsumedError()
        self._consumed = True
        return self._generate()

    def _generate(self) -> Iterator[Record]:
        try:
            if self._first is None:
                return
            first, self._first = self._first, None
            yield first
            yield from self._rows
        finally:
            self.close()

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._resources.close()

    def __enter__(self) -> "RecordStream":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def stream_records(query: str, at: datetime, client: TimeTravelClient) -> Result[RecordStream]:
    """Open ``query`` as of ``at`` and return a lazy stream of its records.

    The first row is fetched eagerly so that an unreachable target or a
    failing query is reported as Err before any record is handed out.
    """
    resources = ExitStack()
    try:
        rows = iter(resources.enter_context(client.execute_as_of(query, at)))
        first = next(rows, None)
    except PitrError as e:
        resources.close()
        return Err.from_exception(e)
    except Exception as e:
        resources.close()
        return Err.from_exception(QueryError(str(e)))
    except BaseException:
        resources.close()
        raise

    logger.debug(f"Opened point-in-time read at {at.isoformat()}")
    return Ok(RecordStream(first, rows, resources))
