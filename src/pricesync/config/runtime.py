"""Typed access to environment variables with file-backed fallbacks."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Callable, Optional, Sequence, TypeVar

from .defaults_loader import collect_defaults
from .errors import ConfigurationError

T = TypeVar("T")

_BOOL_WORDS = {
    **dict.fromkeys(("1", "true", "t", "yes", "y", "on"), True),
    **dict.fromkeys(("0", "false", "f", "no", "n", "off"), False),
}

_DOTENV_CANDIDATES = (Path(".env"), Path.home() / ".env")
_JSON_ENV_CANDIDATES = (Path("config/pricesync_env.json"), Path.home() / ".pricesync_env.json")

_file_defaults: Optional[dict[str, str]] = None


def _load_default_values() -> dict[str, str]:
    global _file_defaults
    if _file_defaults is None:
        _file_defaults = collect_defaults(_DOTENV_CANDIDATES, _JSON_ENV_CANDIDATES)
    return _file_defaults


def reset_default_values() -> None:
    """Forget cached file defaults so the next lookup re-reads them."""
    global _file_defaults
    _file_defaults = None


def _lookup(name: str) -> Optional[str]:
    """Environment first, then file defaults; blank values count as unset."""
    for candidate in (os.getenv(name), _load_default_values().get(name)):
        if candidate is not None and candidate.strip():
            return candidate.strip()
    return None


def _missing(name: str) -> ConfigurationError:
    return ConfigurationError.missing_value(name, "set it in the environment or a defaults file")


def _typed(name: str, or_value: Optional[T], required: bool, parse: Callable[[str], T], kind: str) -> Optional[T]:
    raw = _lookup(name)
    if raw is None:
        if required and or_value is None:
            raise _missing(name)
        return or_value
    try:
        return parse(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError.invalid_value(name, raw, f"Expected {kind}") from exc


def _parse_bool(raw: str) -> bool:
    try:
        return _BOOL_WORDS[raw.lower()]
    except KeyError:
        raise ValueError(raw) from None


def env_str(name: str, or_value: Optional[str] = None, *, required: bool = False) -> Optional[str]:
    return _typed(name, or_value, required, str, "a string")


def env_int(name: str, or_value: Optional[int] = None, *, required: bool = False) -> Optional[int]:
    return _typed(name, or_value, required, int, "an integer")


def env_float(name: str, or_value: Optional[float] = None, *, required: bool = False) -> Optional[float]:
    return _typed(name, or_value, required, float, "a number")


def env_bool(name: str, or_value: Optional[bool] = None, *, required: bool = False) -> Optional[bool]:
    return _typed(name, or_value, required, _parse_bool, "a boolean")


def env_seconds(name: str, or_value: Optional[int] = None, *, required: bool = False) -> Optional[int]:
    """Whole seconds; negative durations are rejected."""
    value = env_int(name, or_value, required=required)
    if value is not None and value < 0:
        raise ConfigurationError.invalid_value(name, value, "Must be non-negative")
    return value


def env_list(
    name: str,
    or_value: Optional[Sequence[str]] = None,
    *,
    separator: str = ",",
    required: bool = False,
) -> Optional[tuple[str, ...]]:
    """Comma separated values, stripped, blanks dropped, first occurrence kept."""
    raw = _lookup(name)
    items = tuple(dict.fromkeys(part.strip() for part in raw.split(separator) if part.strip())) if raw else ()
    if items:
        return items
    if required and not or_value:
        raise _missing(name)
    return None if or_value is None else tuple(or_value)


__all__ = [
    "ConfigurationError",
    "env_bool",
    "env_float",
    "env_int",
    "env_list",
    "env_seconds",
    "env_str",
    "reset_default_values",
]
