"""Service settings collected from the environment."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

from ..cache_store_helpers.backup_store import DEFAULT_KEY_PREFIX, DEFAULT_TTL_SECONDS
from ..instruments import SUPPORTED_CODES, normalize_code
from ..retry_scheduler_helpers import RetryPolicy
from ..runtime_profile import RuntimeProfile, profile_by_name
from .errors import ConfigurationError
from .runtime import env_float, env_int, env_list, env_seconds, env_str

ENV_PREFIX = "PRICESYNC_"


def _name(suffix: str) -> str:
    return f"{ENV_PREFIX}{suffix}"


def _positive_int(suffix: str, default: int) -> int:
    value = env_int(_name(suffix), or_value=default)
    assert value is not None
    if value <= 0:
        raise ConfigurationError.non_positive(_name(suffix), value)
    return value


def _positive_float(suffix: str, default: float) -> float:
    value = env_float(_name(suffix), or_value=default)
    assert value is not None
    if value <= 0:
        raise ConfigurationError.non_positive(_name(suffix), value)
    return value


@dataclass(frozen=True)
class SyncSettings:
    api_base_url: str
    api_key: Optional[str] = None
    connect_timeout_seconds: float = 10.0
    request_timeout_seconds: float = 30.0
    retry_policy: RetryPolicy = field(default_factory=RetryPolicy)
    profile_name: str = "default"
    instruments: Tuple[str, ...] = SUPPORTED_CODES
    history_days: int = 30
    chart_limit: int = 30
    redis_url: Optional[str] = None
    backup_ttl_seconds: int = DEFAULT_TTL_SECONDS
    backup_key_prefix: str = DEFAULT_KEY_PREFIX

    @property
    def profile(self) -> RuntimeProfile:
        return profile_by_name(self.profile_name)

    @classmethod
    def from_env(cls) -> "SyncSettings":
        api_base_url = env_str(_name("API_BASE_URL"), required=True)
        assert api_base_url is not None

        retry_policy = RetryPolicy(
            max_attempts=_positive_int("RETRY_MAX_ATTEMPTS", 3),
            base_delay_ms=_positive_float("RETRY_BASE_DELAY_MS", 1000.0),
            max_delay_ms=_positive_float("RETRY_MAX_DELAY_MS", 30000.0),
            jitter_ratio=env_float(_name("RETRY_JITTER_RATIO"), or_value=0.0) or 0.0,
        )

        profile_name = env_str(_name("PROFILE"), or_value="default") or "default"
        # Fail fast on a typo rather than at first use
        profile_by_name(profile_name)

        raw_instruments = env_list(_name("INSTRUMENTS"), or_value=SUPPORTED_CODES) or SUPPORTED_CODES
        instruments = tuple(dict.fromkeys(normalize_code(code) for code in raw_instruments))

        backup_ttl = env_seconds(_name("BACKUP_TTL_SECONDS"), or_value=DEFAULT_TTL_SECONDS)

        return cls(
            api_base_url=api_base_url,
            api_key=env_str(_name("API_KEY")),
            connect_timeout_seconds=_positive_float("CONNECT_TIMEOUT_SECONDS", 10.0),
            request_timeout_seconds=_positive_float("REQUEST_TIMEOUT_SECONDS", 30.0),
            retry_policy=retry_policy,
            profile_name=profile_name,
            instruments=instruments,
            history_days=_positive_int("HISTORY_DAYS", 30),
            chart_limit=_positive_int("CHART_LIMIT", 30),
            redis_url=env_str(_name("REDIS_URL")),
            backup_ttl_seconds=DEFAULT_TTL_SECONDS if backup_ttl is None else backup_ttl,
            backup_key_prefix=env_str(_name("BACKUP_KEY_PREFIX"), or_value=DEFAULT_KEY_PREFIX) or DEFAULT_KEY_PREFIX,
        )


__all__ = ["ENV_PREFIX", "SyncSettings"]
