"""Tests for timeline search value types."""

from datetime import datetime, timedelta, timezone

import pytest

from spanner_pitr.search.types import SearchState, TimeWindow, expected_iterations

T0 = datetime(2020, 6, 1, 10, 0, 0, tzinfo=timezone.utc)


class TestTimeWindow:
    def test_rejects_inverted_bounds(self) -> None:
        with pytest.raises(ValueError):
            TimeWindow(T0, T0 - timedelta(seconds=1))

    def test_midpoint_floors_to_microseconds(self) -> None:
        window = TimeWindow(T0, T0 + timedelta(microseconds=3))
        assert window.midpoint() == T0 + timedelta(microseconds=1)

    def test_narrowing(self) -> None:
        window = TimeWindow(T0, T0 + timedelta(hours=1))
        pivot = window.midpoint()

        assert window.earlier(pivot) == TimeWindow(T0, pivot)
        assert window.later(pivot) == TimeWindow(pivot, T0 + timedelta(hours=1))

    def test_zero_width_allowed(self) -> None:
        assert TimeWindow(T0, T0).width == timedelta(0)


class TestSearchState:
    def test_consume_tracks_budget(self) -> None:
        state = SearchState(TimeWindow(T0, T0 + timedelta(seconds=1)), remaining_budget=1)

        state.consume()
        assert not state.over_budget
        state.consume()

        assert state.over_budget
        assert state.steps == 2
        assert state.remaining_budget == -1


@pytest.mark.parametrize(
    ("window", "accuracy", "expected"),
    [
        (timedelta(hours=1), timedelta(milliseconds=500), 13),
        (timedelta(seconds=4), timedelta(seconds=1), 2),
        (timedelta(seconds=5), timedelta(seconds=1), 3),
        (timedelta(seconds=1), timedelta(seconds=1), 0),
        (timedelta(seconds=1), timedelta(seconds=2), 0),
    ],
)
def test_expected_iterations(window, accuracy, expected) -> None:
    assert expected_iterations(T0, T0 + window, accuracy) == expected
