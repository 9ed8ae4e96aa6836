from __future__ import annotations

"""Typed outcomes threaded from the remote fetch through retries into the cache."""


from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Generic, Optional, Tuple, TypeVar, Union

if TYPE_CHECKING:
    from .error_classifier_helpers import ClassifiedError

T = TypeVar("T")


@dataclass(frozen=True)
class RetryAttempt:
    """One failed attempt inside a retry run."""

    attempt_index: int
    classified_error: "ClassifiedError"
    next_delay_ms: Optional[float] = None


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T
    attempts: Tuple[RetryAttempt, ...] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    """Terminal failure; ``cancelled`` marks runs stopped by the caller between attempts."""

    error: "ClassifiedError"
    attempts: Tuple[RetryAttempt, ...] = field(default_factory=tuple)
    cancelled: bool = False

    @property
    def ok(self) -> bool:
        return False

    @property
    def attempt_count(self) -> int:
        return len(self.attempts)


Result = Union[Success[T], Failure]

__all__ = ["Failure", "Result", "RetryAttempt", "Success"]
