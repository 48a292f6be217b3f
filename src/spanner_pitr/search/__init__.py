"""Timeline bisection search.

Finds the most recent instant at which a read-only check query still
returned true, using time-travel reads at bisected timestamps.
"""

from spanner_pitr.search.engine import TimelineSearcher, find_closest_time
from spanner_pitr.search.types import (
    PredicateOutcome,
    SearchState,
    SearchStep,
    TimeWindow,
    expected_iterations,
)

__all__ = [
    "TimelineSearcher",
    "find_closest_time",
    "PredicateOutcome",
    "SearchState",
    "SearchStep",
    "TimeWindow",
    "expected_iterations",
]
