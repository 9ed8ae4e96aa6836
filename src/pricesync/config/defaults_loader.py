"""File-backed defaults for ``PRICESYNC_*`` settings.

Values found here are only consulted when the process environment leaves a
variable unset or blank. Two formats are understood: ``.env`` files with
``KEY=value`` lines, and flat JSON objects mapping variable names to scalars.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterable

import orjson

from .errors import ConfigurationError

logger = logging.getLogger(__name__)


def _unquote(raw: str) -> str:
    value = raw.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "'\"":
        return value[1:-1]
    return value


def read_dotenv(path: Path) -> Dict[str, str]:
    """Parse ``KEY=value`` lines; comments, blanks and ``export`` prefixes are tolerated."""
    if not path.is_file():
        return {}
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"Failed to read defaults from {path}") from exc

    values: Dict[str, str] = {}
    for line_number, line in enumerate(text.splitlines(), start=1):
        entry = line.strip()
        if not entry or entry.startswith("#"):
            continue
        entry = entry.removeprefix("export ").lstrip()
        key, sep, raw_value = entry.partition("=")
        key = key.strip()
        if not sep or not key:
            logger.debug("Ignoring malformed line %d in %s", line_number, path)
            continue
        values[key] = _unquote(raw_value)
    return values


def _scalar_to_str(path: Path, key: str, value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    raise ConfigurationError(f"{path}: value for {key!r} must be a scalar, got {type(value).__name__}")


def read_json_defaults(path: Path) -> Dict[str, str]:
    """Read a flat JSON object; every value is rendered the way it would appear in the environment."""
    if not path.is_file():
        return {}
    try:
        payload = orjson.loads(path.read_bytes())
    except OSError as exc:
        raise ConfigurationError(f"Failed to read defaults from {path}") from exc
    except orjson.JSONDecodeError as exc:
        raise ConfigurationError(f"Defaults file {path} is not valid JSON") from exc

    if not isinstance(payload, dict):
        raise ConfigurationError(f"Defaults file {path} must hold a JSON object")
    return {str(key): _scalar_to_str(path, str(key), value) for key, value in payload.items()}


def collect_defaults(dotenv_paths: Iterable[Path], json_paths: Iterable[Path]) -> Dict[str, str]:
    """Merge every source; the first file that defines a key wins and ``.env`` files are read first."""
    merged: Dict[str, str] = {}
    sources = [(path, read_dotenv) for path in dotenv_paths] + [(path, read_json_defaults) for path in json_paths]
    for path, reader in sources:
        for key, value in reader(path).items():
            merged.setdefault(key, value)
    return merged


__all__ = ["collect_defaults", "read_dotenv", "read_json_defaults"]
