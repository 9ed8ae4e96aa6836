"""Delay calculation helpers for retry scheduling."""

import logging

from . import random as retry_random
from .types import RetryPolicy

logger = logging.getLogger(__name__)


class DelayCalculator:
    """Calculates backoff delays with optional jitter."""

    @staticmethod
    def calculate_base_delay(policy: RetryPolicy, attempt_index: int) -> float:
        """
        Calculate the exponential backoff delay after a failed attempt.

        Args:
            policy: Retry policy
            attempt_index: Zero-based index of the attempt that just failed

        Returns:
            Delay in milliseconds, capped at ``policy.max_delay_ms``
        """
        if attempt_index < 0:
            raise ValueError("attempt_index must be non-negative")
        return min(policy.base_delay_ms * (policy.multiplier**attempt_index), policy.max_delay_ms)

    @staticmethod
    def apply_jitter(base_delay: float, jitter_ratio: float) -> float:
        """Spread delays by +/- ``jitter_ratio`` of the base delay."""
        if jitter_ratio <= 0 or base_delay <= 0:
            return base_delay
        jitter_amount = base_delay * jitter_ratio
        return max(0.0, base_delay + retry_random.uniform(-jitter_amount, jitter_amount))

    @classmethod
    def calculate_full_delay(cls, policy: RetryPolicy, attempt_index: int) -> float:
        base_delay = cls.calculate_base_delay(policy, attempt_index)
        final_delay = cls.apply_jitter(base_delay, policy.jitter_ratio)
        logger.debug(
            "Calculated retry backoff: attempt_index=%d, base_delay=%.0fms, final_delay=%.0fms",
            attempt_index,
            base_delay,
            final_delay,
        )
        return final_delay
