"""Next-fire computations for PollingScheduler."""

import logging
from typing import Optional

logger = logging.getLogger(__name__)


class DelayPlanner:
    """Works out how long to wait before the next refresh of a key."""

    @staticmethod
    def remaining_delay(
        last_completed_at: Optional[float],
        interval_seconds: float,
        now: float,
    ) -> float:
        """
        Delay until one full interval has passed since the last completed fetch.

        Args:
            last_completed_at: Loop time of the last completed fetch, None if never fetched
            interval_seconds: Effective interval under the current profile
            now: Current loop time

        Returns:
            Seconds to wait; 0 means the refresh is already due
        """
        if last_completed_at is None:
            return 0.0
        return max(0.0, last_completed_at + interval_seconds - now)

    @staticmethod
    def clamp_interval(interval_seconds: float, min_interval_seconds: float) -> float:
        if interval_seconds < min_interval_seconds:
            logger.debug("Clamping polling interval %.3fs to minimum %.3fs", interval_seconds, min_interval_seconds)
            return min_interval_seconds
        return interval_seconds


__all__ = ["DelayPlanner"]
