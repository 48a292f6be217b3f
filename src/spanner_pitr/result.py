"""Tagged success/failure outcome shared by the search engine and exporter.

Terminal failures of an operation are returned as ``Err`` with a
human-readable message rather than raised, so callers branch on the outcome
explicitly::

    outcome = searcher.find_closest_time()
    if isinstance(outcome, Ok):
        restore_from(outcome.value)
    else:
        logger.error(outcome.error)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, NoReturn, Optional, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful outcome carrying a value."""

    value: T

    @property
    def is_ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Err:
    """Failed outcome carrying a descriptive error message.

    ``exception`` optionally keeps the error that caused the failure so the
    CLI can render its code and recovery suggestion.
    """

    error: str
    exception: Optional[BaseException] = field(default=None, compare=False, repr=False)

    @classmethod
    def from_exception(cls, exc: BaseException) -> "Err":
        return cls(str(exc), exc)

    @property
    def is_ok(self) -> bool:
        return False

    def unwrap(self) -> NoReturn:
        raise ValueError(f"Called unwrap() on Err: {self.error}")


Result = Union[Ok[T], Err]


__all__ = ["Ok", "Err", "Result"]
