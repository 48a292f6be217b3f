"""Bisection search over a time-travel database.

Given a check query that returns true while the data of interest still
exists and false after it has been lost, finds the latest instant inside a
window at which the query still returned true, to a requested accuracy.

The check query should be as cheap as possible, ideally with a LIMIT
clause. For example:
    SELECT true FROM Orders LIMIT 1
    SELECT true FROM Orders WHERE status = 'old_value' LIMIT 1
    SELECT COUNT(*) > 30 FROM Orders

The search assumes the query flips from true to false exactly once inside
the window. This is not verified; with a query that flips back and forth
the result is one of the true-to-false boundaries, not necessarily the
latest.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import List

from spanner_pitr.database.client import TimeTravelClient
from spanner_pitr.errors import (
    ConvergenceError,
    PreconditionError,
    QueryError,
    RelationNotFoundError,
    TargetNotFoundError,
)
from spanner_pitr.result import Err, Ok, Result
from spanner_pitr.search.types import (
    PredicateOutcome,
    SearchState,
    SearchStep,
    TimeWindow,
    expected_iterations,
)

logger = logging.getLogger(__name__)

_ZERO = timedelta(0)


class TimelineSearcher:
    """Finds the latest instant in [start, end] at which ``query`` returned true.

    Each evaluation reads the first column of the first row of the result set
    as the signal. An empty result set or NULL counts as false.

    Failure handling during bisection:
    - TargetNotFoundError aborts the whole search.
    - Any other query failure is logged and searched as false, i.e. the
      search moves earlier. Tables missing at a timestamp are expected when
      the window spans their deletion, and objects exist further in the past.

    Example:
        >>> searcher = TimelineSearcher(
        ...     "SELECT true FROM Orders LIMIT 1",
        ...     start=now - timedelta(hours=1),
        ...     end=now,
        ...     accuracy=timedelta(milliseconds=500),
        ...     client=client,
        ... )
        >>> outcome = searcher.find_closest_time()
    """

    def __init__(
        self,
        query: str,
        start: datetime,
        end: datetime,
        accuracy: timedelta,
        client: TimeTravelClient,
    ) -> None:
        self.query = query
        self.start = start
        self.end = end
        self.accuracy = accuracy
        self.client = client
        self.steps: List[SearchStep] = []

    def evaluate(self, at: datetime) -> PredicateOutcome:
        """Run the check query as of ``at``.

        The cursor is closed before this method returns.

        Raises:
            TargetNotFoundError: The instance or database is unreachable.
        """
        try:
            with self.client.execute_as_of(self.query, at) as rows:
                record = next(iter(rows), None)
        except TargetNotFoundError:
            raise
        except RelationNotFoundError:
            logger.error(f"Query failed at {at.isoformat()}: Table not found.")
            return PredicateOutcome.INDETERMINATE
        except QueryError as e:
            logger.error(f"Query failed at {at.isoformat()}: {e}")
            return PredicateOutcome.INDETERMINATE
        except Exception as e:
            logger.error(f"Query failed at {at.isoformat()}: {e!r}")
            return PredicateOutcome.INDETERMINATE

        if record is None:
            logger.info("No rows in result set.")
            return PredicateOutcome.FALSE

        value = record.first()
        if value is None:
            return PredicateOutcome.FALSE
        if isinstance(value, bool):
            return PredicateOutcome.TRUE if value else PredicateOutcome.FALSE

        logger.warning(
            f"First column is {type(value).__name__}, expected BOOL; treating as failed."
        )
        return PredicateOutcome.INDETERMINATE

    def find_closest_time(self) -> Result[datetime]:
        """Check the window bounds, then bisect.

        Returns:
            Ok with the latest instant found to return true, or Err describing
            why the search could not produce one.
        """
        self.steps = []
        if self.start >= self.end:
            return Err.from_exception(
                PreconditionError(
                    f"Start timestamp {self.start.isoformat()} must be before "
                    f"end timestamp {self.end.isoformat()}."
                )
            )
        if self.accuracy <= _ZERO:
            return Err.from_exception(
                PreconditionError(f"Accuracy must be a positive duration, got {self.accuracy}.")
            )

        try:
            if self.evaluate(self.start) is not PredicateOutcome.TRUE:
                return Err.from_exception(
                    PreconditionError(
                        f"Check query did not return true at start timestamp "
                        f"{self.start.isoformat()}.",
                        details={"at": self.start.isoformat()},
                    )
                )
            if self.evaluate(self.end) is PredicateOutcome.TRUE:
                return Err.from_exception(
                    PreconditionError(
                        f"Check query returned true at end timestamp {self.end.isoformat()}.",
                        details={"at": self.end.isoformat()},
                    )
                )
        except TargetNotFoundError as e:
            return Err.from_exception(e)

        iterations = expected_iterations(self.start, self.end, self.accuracy)
        logger.info(
            f"Searching between {self.start.isoformat()} and {self.end.isoformat()} "
            f"with target accuracy of {self.accuracy}."
        )
        logger.info(f"Using query '{self.query}'.")
        logger.info(f"Expected iterations: {iterations}.")

        return self._bisect(SearchState(TimeWindow(self.start, self.end), iterations))

    def _bisect(self, state: SearchState) -> Result[datetime]:
        # Invariant: state.window.start returned true, state.window.end did not.
        warned = False
        while True:
            window = state.window
            width = window.width
            if width == _ZERO or (width // 2 == _ZERO and width >= self.accuracy):
                return Err.from_exception(
                    ConvergenceError(details={"steps": state.steps, "at": window.start.isoformat()})
                )

            medium = window.midpoint()
            logger.info(
                f"{window.start.isoformat()} -({medium.isoformat()})- "
                f"{window.end.isoformat()}: {width}"
            )

            try:
                outcome = self.evaluate(medium)
            except TargetNotFoundError as e:
                return Err.from_exception(e)

            self.steps.append(SearchStep(at=medium, outcome=outcome, window=window))
            state.consume()
            if state.over_budget and not warned:
                warned = True
                logger.warning(
                    "Search exceeded the expected number of iterations; continuing "
                    "until the window converges."
                )

            if outcome is PredicateOutcome.TRUE:
                if window.end - medium < self.accuracy:
                    logger.info(f"Converged after {state.steps} steps.")
                    return Ok(medium)
                logger.info("Query succeeded. Searching later...")
                state.window = window.later(medium)
            elif outcome is PredicateOutcome.FALSE:
                logger.info("Query failed. Searching earlier...")
                state.window = window.earlier(medium)
            else:
                logger.error("Query errored. Searching earlier...")
                state.window = window.earlier(medium)


def find_closest_time(
    query: str,
    start: datetime,
    end: datetime,
    accuracy: timedelta,
    client: TimeTravelClient,
) -> Result[datetime]:
    """Find the latest instant in [start, end] at which ``query`` returned true."""
    return TimelineSearcher(query, start, end, accuracy, client).find_closest_time()
