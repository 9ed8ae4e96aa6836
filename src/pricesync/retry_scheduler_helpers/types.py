"""Retry policy definition."""

from dataclasses import dataclass

from ..config.errors import ConfigurationError

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_BASE_DELAY_MS = 1000.0
DEFAULT_MAX_DELAY_MS = 30000.0


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded exponential backoff: delay = min(base * multiplier ** attempt_index, cap)."""

    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    base_delay_ms: float = DEFAULT_BASE_DELAY_MS
    max_delay_ms: float = DEFAULT_MAX_DELAY_MS
    multiplier: float = 2.0
    jitter_ratio: float = 0.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ConfigurationError.invalid_value("max_attempts", self.max_attempts, "At least one attempt is required")
        if self.base_delay_ms < 0:
            raise ConfigurationError.invalid_value("base_delay_ms", self.base_delay_ms, "Must be non-negative")
        if self.max_delay_ms < self.base_delay_ms:
            raise ConfigurationError.invalid_value("max_delay_ms", self.max_delay_ms, "Must not be below base_delay_ms")
        if self.multiplier < 1:
            raise ConfigurationError.invalid_value("multiplier", self.multiplier, "Must be at least 1")
        if not 0 <= self.jitter_ratio < 1:
            raise ConfigurationError.invalid_value("jitter_ratio", self.jitter_ratio, "Must be within [0, 1)")


DEFAULT_RETRY_POLICY = RetryPolicy()

__all__ = [
    "DEFAULT_BASE_DELAY_MS",
    "DEFAULT_MAX_ATTEMPTS",
    "DEFAULT_MAX_DELAY_MS",
    "DEFAULT_RETRY_POLICY",
    "RetryPolicy",
]
