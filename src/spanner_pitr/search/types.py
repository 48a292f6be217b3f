"""Timeline search types.

Defines the values the bisection engine works with:
- TimeWindow: an immutable [start, end] bracket
- PredicateOutcome: tri-state result of evaluating the check query
- SearchState: mutable loop state (bracket plus remaining budget)
- SearchStep: one recorded evaluation, kept for diagnostics
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum


class PredicateOutcome(str, Enum):
    """Result of evaluating the check query at one instant."""

    TRUE = "true"
    """First column of the first row was boolean true."""

    FALSE = "false"
    """Boolean false, NULL, or an empty result set."""

    INDETERMINATE = "indeterminate"
    """The query failed transiently; searched as if false."""


@dataclass(frozen=True)
class TimeWindow:
    """Closed time bracket.

    Caller-supplied windows must satisfy ``start < end``; windows derived by
    narrowing may collapse to zero width, which the engine reports as a
    convergence failure.
    """

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise ValueError(f"Window end {self.end} is before start {self.start}")

    @property
    def width(self) -> timedelta:
        return self.end - self.start

    def midpoint(self) -> datetime:
        """Midpoint floored toward ``start`` at microsecond resolution."""
        return self.start + self.width // 2

    def earlier(self, pivot: datetime) -> "TimeWindow":
        return TimeWindow(self.start, pivot)

    def later(self, pivot: datetime) -> "TimeWindow":
        return TimeWindow(pivot, self.end)


@dataclass
class SearchState:
    """Mutable loop state of one bisection run."""

    window: TimeWindow
    remaining_budget: int
    steps: int = 0

    def consume(self) -> None:
        self.remaining_budget -= 1
        self.steps += 1

    @property
    def over_budget(self) -> bool:
        return self.remaining_budget < 0


@dataclass(frozen=True)
class SearchStep:
    """One evaluation of the check query during bisection."""

    at: datetime
    outcome: PredicateOutcome
    window: TimeWindow


def expected_iterations(start: datetime, end: datetime, accuracy: timedelta) -> int:
    """Return the number of queries needed to narrow [start, end] to ``accuracy``.

    ``ceil(log2(window / accuracy))``, never negative.
    """
    window = end - start
    if window <= accuracy:
        return 0
    return max(0, math.ceil(math.log2(window / accuracy)))
