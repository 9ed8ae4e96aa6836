import pytest

from pricesync.config.errors import ConfigurationError
from pricesync.runtime_profile import (
    BATTERY_SAVER_PROFILE,
    DEFAULT_PROFILE,
    HOUR_SECONDS,
    PERFORMANCE_PROFILE,
    RuntimeProfile,
    profile_by_name,
)


def test_presets():
    assert DEFAULT_PROFILE.price_interval_seconds == 4 * HOUR_SECONDS
    assert BATTERY_SAVER_PROFILE.price_interval_seconds == 6 * HOUR_SECONDS
    assert BATTERY_SAVER_PROFILE.aggressive_caching
    assert PERFORMANCE_PROFILE.price_interval_seconds == 2 * HOUR_SECONDS
    assert PERFORMANCE_PROFILE.background_polling_enabled


def test_profile_by_name_normalizes_and_rejects_unknown():
    assert profile_by_name("Battery-Saver") is BATTERY_SAVER_PROFILE
    assert profile_by_name("performance") is PERFORMANCE_PROFILE
    with pytest.raises(ConfigurationError):
        profile_by_name("turbo")


def test_background_polling_follows_preset():
    assert DEFAULT_PROFILE.allows_polling
    assert not DEFAULT_PROFILE.with_host_state(is_foreground=False).allows_polling
    assert PERFORMANCE_PROFILE.with_host_state(is_foreground=False).allows_polling


def test_effective_interval_stretches_for_low_power_and_background():
    profile = PERFORMANCE_PROFILE.with_host_state(is_foreground=False, is_low_power=True)

    assert DEFAULT_PROFILE.effective_interval(300) == 300
    assert DEFAULT_PROFILE.with_host_state(is_low_power=True).effective_interval(300) == 600
    assert profile.effective_interval(300) == 1200
    with pytest.raises(ConfigurationError):
        DEFAULT_PROFILE.effective_interval(0)


def test_cache_durations_follow_multipliers_and_cap():
    stale_ms, expire_ms = DEFAULT_PROFILE.cache_durations(4 * HOUR_SECONDS)

    assert stale_ms == 2 * HOUR_SECONDS * 1000
    assert expire_ms == 8 * HOUR_SECONDS * 1000

    capped_stale, capped_expire = DEFAULT_PROFILE.cache_durations(20 * HOUR_SECONDS)
    assert capped_stale == 10 * HOUR_SECONDS * 1000
    assert capped_expire == 24 * HOUR_SECONDS * 1000


def test_aggressive_caching_extends_durations():
    stale_ms, expire_ms = BATTERY_SAVER_PROFILE.cache_durations(HOUR_SECONDS)

    assert stale_ms == pytest.approx(0.8 * 1.5 * HOUR_SECONDS * 1000)
    assert expire_ms == pytest.approx(3.0 * 1.5 * HOUR_SECONDS * 1000)


def test_with_host_state_keeps_unspecified_flags():
    background = DEFAULT_PROFILE.with_host_state(is_foreground=False)
    low_power = background.with_host_state(is_low_power=True)

    assert not low_power.is_foreground
    assert low_power.is_low_power
    assert DEFAULT_PROFILE.is_foreground


@pytest.mark.parametrize(
    "overrides",
    [
        {"price_interval_seconds": 0},
        {"cache_stale_multiplier": 2.0, "cache_expire_multiplier": 1.0},
        {"low_power_interval_multiplier": 0.5},
    ],
)
def test_invalid_profiles_rejected(overrides):
    fields = {
        "name": "custom",
        "price_interval_seconds": 60,
        "cache_stale_multiplier": 0.5,
        "cache_expire_multiplier": 2.0,
        "cache_max_age_seconds": 3600,
    }
    fields.update(overrides)

    with pytest.raises(ConfigurationError):
        RuntimeProfile(**fields)
