"""Helper modules for retry scheduling."""

from .delay_calculator import DelayCalculator
from .types import DEFAULT_RETRY_POLICY, RetryPolicy

__all__ = ["DEFAULT_RETRY_POLICY", "DelayCalculator", "RetryPolicy"]
