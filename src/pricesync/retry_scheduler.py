"""Bounded exponential-backoff retries for price API operations."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, List, Optional, TypeVar

from .error_classifier import ErrorClassifier
from .error_classifier_helpers import ClassifiedError, ErrorKind
from .result import Failure, Result, RetryAttempt, Success
from .retry_scheduler_helpers import DEFAULT_RETRY_POLICY, DelayCalculator, RetryPolicy

__all__ = ["Operation", "RetryPolicy", "RetryScheduler"]

logger = logging.getLogger(__name__)

T = TypeVar("T")

Operation = Callable[[], Awaitable[T]]
SleepFunc = Callable[[float], Awaitable[Any]]


class RetryScheduler:
    """
    Runs an operation until it succeeds, hits a non-retryable error, or
    exhausts the policy's attempt budget.

    Failures never escape as exceptions: every outcome is a ``Success`` or a
    ``Failure``. Cancellation is cooperative and checked between attempts and
    during backoff waits, never in the middle of an in-flight call.
    """

    def __init__(
        self,
        classifier: Optional[ErrorClassifier] = None,
        *,
        sleep: SleepFunc = asyncio.sleep,
    ):
        self._classifier = classifier or ErrorClassifier()
        self._sleep = sleep

    async def run(
        self,
        operation: Operation[T],
        policy: Optional[RetryPolicy] = None,
        *,
        cancel_event: Optional[asyncio.Event] = None,
        operation_name: str = "operation",
    ) -> Result[T]:
        active_policy = policy or DEFAULT_RETRY_POLICY
        attempts: List[RetryAttempt] = []
        last_error: Optional[ClassifiedError] = None

        for attempt_index in range(active_policy.max_attempts):
            if cancel_event is not None and cancel_event.is_set():
                return self._cancelled(attempts, last_error, operation_name)

            try:
                value = await operation()
            except asyncio.CancelledError:
                raise
            except Exception as exc:  # every failure becomes a typed result
                classified = self._classifier.classify(exc)
                last_error = classified
                is_last_attempt = attempt_index + 1 >= active_policy.max_attempts

                if not classified.retryable or is_last_attempt:
                    attempts.append(RetryAttempt(attempt_index, classified, None))
                    logger.warning(
                        "%s failed after %d attempt(s): %s (%s, retryable=%s)",
                        operation_name,
                        attempt_index + 1,
                        classified.describe(),
                        classified.detail,
                        classified.retryable,
                    )
                    return Failure(classified, tuple(attempts))

                delay_ms = DelayCalculator.calculate_full_delay(active_policy, attempt_index)
                attempts.append(RetryAttempt(attempt_index, classified, delay_ms))
                logger.warning(
                    "%s failed (%d/%d): %s; retrying in %.0fms",
                    operation_name,
                    attempt_index + 1,
                    active_policy.max_attempts,
                    classified.describe(),
                    delay_ms,
                )
                if await self._wait_backoff(delay_ms, cancel_event):
                    return self._cancelled(attempts, last_error, operation_name)
            else:
                if attempts:
                    logger.info("%s succeeded after %d attempt(s)", operation_name, attempt_index + 1)
                return Success(value, tuple(attempts))

        # Unreachable: the final attempt always returns above
        raise RuntimeError(f"{operation_name} exhausted retries without an outcome")

    async def _wait_backoff(self, delay_ms: float, cancel_event: Optional[asyncio.Event]) -> bool:
        """Wait out the backoff delay; returns True when cancellation was requested."""
        delay_seconds = max(0.0, delay_ms / 1000.0)
        if cancel_event is None:
            await self._sleep(delay_seconds)
            return False
        if cancel_event.is_set():
            return True
        sleeper = asyncio.ensure_future(self._sleep(delay_seconds))
        waiter = asyncio.ensure_future(cancel_event.wait())
        try:
            await asyncio.wait({sleeper, waiter}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in (sleeper, waiter):
                if not task.done():
                    task.cancel()
            await asyncio.gather(sleeper, waiter, return_exceptions=True)
        return cancel_event.is_set()

    @staticmethod
    def _cancelled(
        attempts: List[RetryAttempt],
        last_error: Optional[ClassifiedError],
        operation_name: str,
    ) -> Failure:
        logger.info("%s cancelled after %d attempt(s)", operation_name, len(attempts))
        error = last_error or ClassifiedError.of(ErrorKind.UNKNOWN, detail="cancelled before completion")
        return Failure(error, tuple(attempts), cancelled=True)
