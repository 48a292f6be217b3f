"""Shared test configuration and an in-memory time-travel client."""

from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Iterator, List, Sequence, Union

import pytest

from spanner_pitr.database.models import Column, ColumnType, Record


T0 = datetime(2020, 6, 1, 10, 0, 0, tzinfo=timezone.utc)

Response = Union[Sequence[Any], BaseException]


class FakeTimeTravelClient:
    """Answers reads from a ``responder(query, at)`` callable.

    The responder returns either a sequence of records (an exception inside
    the sequence is raised when iteration reaches it) or an exception to
    raise when the read is opened. Tracks cursor lifetimes so tests can
    assert every cursor is released.
    """

    def __init__(self, responder: Callable[[str, datetime], Response]) -> None:
        self._responder = responder
        self.calls: List[datetime] = []
        self.open_cursors = 0
        self.max_open_cursors = 0
        self.closed_cursors = 0

    @contextmanager
    def execute_as_of(self, query: str, at: datetime) -> Iterator[Iterator[Record]]:
        self.calls.append(at)
        response = self._responder(query, at)
        if isinstance(response, BaseException):
            raise response
        self.open_cursors += 1
        self.max_open_cursors = max(self.max_open_cursors, self.open_cursors)
        try:
            yield self._rows(response)
        finally:
            self.open_cursors -= 1
            self.closed_cursors += 1

    def execute_now(self, query: str, max_staleness: timedelta | None = None):
        return self.execute_as_of(query, datetime.now(timezone.utc))

    @staticmethod
    def _rows(response: Sequence[Any]) -> Iterator[Record]:
        for item in response:
            if isinstance(item, BaseException):
                raise item
            yield item


def bool_record(value: Any, column_type: ColumnType = ColumnType.BOOL) -> Record:
    return Record((Column("check", column_type),), (value,))


def string_record(**values: str) -> Record:
    columns = tuple(Column(name, ColumnType.STRING) for name in values)
    return Record(columns, tuple(values.values()))


def transition_responder(transition: datetime) -> Callable[[str, datetime], Response]:
    """Check query that is true strictly before ``transition`` and false from it on."""

    def respond(query: str, at: datetime) -> Response:
        return [bool_record(at < transition)]

    return respond


@pytest.fixture
def fake_client() -> Callable[[Callable[[str, datetime], Response]], FakeTimeTravelClient]:
    """Factory building a FakeTimeTravelClient from a responder."""
    return FakeTimeTravelClient


@pytest.fixture
def transition_client() -> Callable[[datetime], FakeTimeTravelClient]:
    """Factory building a client whose check query flips at a given instant."""

    def build(transition: datetime) -> FakeTimeTravelClient:
        return FakeTimeTravelClient(transition_responder(transition))

    return build


@pytest.fixture
def records() -> Any:
    """Record builders: ``records.boolean(True)``, ``records.strings(id="a")``."""

    class _Builders:
        boolean = staticmethod(bool_record)
        strings = staticmethod(string_record)

    return _Builders


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "GOOGLE_APPLICATION_CREDENTIALS",
        "SPANNER_PITR_PROJECT",
        "SPANNER_PITR_INSTANCE",
        "SPANNER_PITR_DATABASE",
        "SPANNER_PITR_ACCURACY",
        "SPANNER_PITR_WINDOW",
        "SPANNER_PITR_QUERY_TIMEOUT",
        "SPANNER_PITR_SESSION_POOL_SIZE",
        "SPANNER_PITR_DATABASE_ROLE",
    ):
        monkeypatch.delenv(name, raising=False)
