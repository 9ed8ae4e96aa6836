"""
Runtime (battery) profiles and host state.

A ``RuntimeProfile`` bundles the battery preset chosen by the user with the
host signals the scheduler reacts to: whether the app is in the foreground and
whether the device reports low power. Profiles are immutable; host transitions
produce a new profile through ``with_host_state``.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict, Optional, Tuple

from .config.errors import ConfigurationError

HOUR_SECONDS = 60 * 60

# Cache durations are stretched by this factor when aggressive caching is on
AGGRESSIVE_CACHE_FACTOR = 1.5


@dataclass(frozen=True)
class RuntimeProfile:
    name: str
    price_interval_seconds: float
    cache_stale_multiplier: float
    cache_expire_multiplier: float
    cache_max_age_seconds: float
    aggressive_caching: bool = False
    background_polling_enabled: bool = False
    background_interval_multiplier: float = 2.0
    low_power_interval_multiplier: float = 2.0
    is_foreground: bool = True
    is_low_power: bool = False

    def __post_init__(self) -> None:
        for field_name in (
            "price_interval_seconds",
            "cache_max_age_seconds",
            "cache_stale_multiplier",
            "cache_expire_multiplier",
        ):
            value = getattr(self, field_name)
            if value <= 0:
                raise ConfigurationError.non_positive(field_name, value)
        if self.cache_expire_multiplier < self.cache_stale_multiplier:
            raise ConfigurationError.invalid_value(
                "cache_expire_multiplier",
                self.cache_expire_multiplier,
                "Must not be below cache_stale_multiplier",
            )
        for field_name in ("background_interval_multiplier", "low_power_interval_multiplier"):
            value = getattr(self, field_name)
            if value < 1:
                raise ConfigurationError.invalid_value(field_name, value, "Must be at least 1")

    @property
    def allows_polling(self) -> bool:
        """Foreground always polls; background only when the preset enables it."""
        return self.is_foreground or self.background_polling_enabled

    def effective_interval(self, base_interval_seconds: float) -> float:
        """Stretch ``base_interval_seconds`` for low-power and background states."""
        if base_interval_seconds <= 0:
            raise ConfigurationError.non_positive("base_interval_seconds", base_interval_seconds)
        interval = float(base_interval_seconds)
        if self.is_low_power:
            interval *= self.low_power_interval_multiplier
        if not self.is_foreground:
            interval *= self.background_interval_multiplier
        return interval

    def cache_durations(self, interval_seconds: float) -> Tuple[float, float]:
        """Return ``(stale_after_ms, expire_after_ms)`` for data refreshed every ``interval_seconds``."""
        factor = AGGRESSIVE_CACHE_FACTOR if self.aggressive_caching else 1.0
        stale_seconds = min(interval_seconds * self.cache_stale_multiplier * factor, self.cache_max_age_seconds)
        expire_seconds = min(interval_seconds * self.cache_expire_multiplier * factor, self.cache_max_age_seconds)
        return stale_seconds * 1000.0, expire_seconds * 1000.0

    def with_host_state(
        self,
        *,
        is_foreground: Optional[bool] = None,
        is_low_power: Optional[bool] = None,
    ) -> "RuntimeProfile":
        return replace(
            self,
            is_foreground=self.is_foreground if is_foreground is None else is_foreground,
            is_low_power=self.is_low_power if is_low_power is None else is_low_power,
        )


DEFAULT_PROFILE = RuntimeProfile(
    name="default",
    price_interval_seconds=4 * HOUR_SECONDS,
    cache_stale_multiplier=0.5,
    cache_expire_multiplier=2.0,
    cache_max_age_seconds=24 * HOUR_SECONDS,
)

BATTERY_SAVER_PROFILE = RuntimeProfile(
    name="battery_saver",
    price_interval_seconds=6 * HOUR_SECONDS,
    cache_stale_multiplier=0.8,
    cache_expire_multiplier=3.0,
    cache_max_age_seconds=48 * HOUR_SECONDS,
    aggressive_caching=True,
)

PERFORMANCE_PROFILE = RuntimeProfile(
    name="performance",
    price_interval_seconds=2 * HOUR_SECONDS,
    cache_stale_multiplier=0.3,
    cache_expire_multiplier=1.5,
    cache_max_age_seconds=12 * HOUR_SECONDS,
    background_polling_enabled=True,
)

PROFILES: Dict[str, RuntimeProfile] = {
    profile.name: profile for profile in (DEFAULT_PROFILE, BATTERY_SAVER_PROFILE, PERFORMANCE_PROFILE)
}


def profile_by_name(name: str) -> RuntimeProfile:
    key = name.strip().lower().replace("-", "_")
    try:
        return PROFILES[key]
    except KeyError as exc:
        raise ConfigurationError.unknown_profile(name, PROFILES) from exc


__all__ = [
    "BATTERY_SAVER_PROFILE",
    "DEFAULT_PROFILE",
    "PERFORMANCE_PROFILE",
    "PROFILES",
    "RuntimeProfile",
    "profile_by_name",
]
