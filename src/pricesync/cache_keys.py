"""
Cache key scheme.

Keys are hierarchical colon-separated strings rooted at ``lme`` so related
entries share a prefix: ``lme:latest:prices:<codes>``,
``lme:metal:<code>:history:<days>`` and
``lme:metal:<code>:chart:<period>:<limit>``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Iterable, Optional

from .data_models import ChartPeriod
from .exceptions import ValidationError
from .instruments import normalize_code

ROOT = "lme"


def _codes_segment(codes: Iterable[str]) -> str:
    normalized = sorted({normalize_code(code) for code in codes})
    if not normalized:
        raise ValidationError("At least one instrument code is required")
    return ",".join(normalized)


def latest_key(codes: Iterable[str]) -> str:
    return f"{ROOT}:latest:prices:{_codes_segment(codes)}"


def metal_prefix(code: str) -> str:
    return f"{ROOT}:metal:{normalize_code(code)}"


def history_key(code: str, days: int) -> str:
    return f"{metal_prefix(code)}:history:{int(days)}"


def chart_key(code: str, period: ChartPeriod, limit: int) -> str:
    return f"{metal_prefix(code)}:chart:{ChartPeriod.parse(period).value}:{int(limit)}"


@dataclass(frozen=True)
class ParsedKey:
    """Structured view of a cache key, used to route a refresh to the right fetch."""

    kind: str
    codes: FrozenSet[str]
    days: Optional[int] = None
    period: Optional[ChartPeriod] = None
    limit: Optional[int] = None

    @property
    def code(self) -> str:
        (only,) = self.codes
        return only


def parse_key(key: str) -> ParsedKey:
    parts = key.split(":")
    try:
        if parts[0] != ROOT:
            raise ValueError("unknown root")
        if parts[1] == "latest" and parts[2] == "prices" and len(parts) == 4:
            return ParsedKey(kind="latest", codes=frozenset(parts[3].split(",")))
        if parts[1] == "metal" and parts[3] == "history" and len(parts) == 5:
            return ParsedKey(kind="history", codes=frozenset({parts[2]}), days=int(parts[4]))
        if parts[1] == "metal" and parts[3] == "chart" and len(parts) == 6:
            return ParsedKey(
                kind="chart",
                codes=frozenset({parts[2]}),
                period=ChartPeriod.parse(parts[4]),
                limit=int(parts[5]),
            )
    except (IndexError, ValueError) as exc:
        raise ValidationError(f"Unrecognized cache key: {key!r}", value=key) from exc
    raise ValidationError(f"Unrecognized cache key: {key!r}", value=key)


__all__ = ["ParsedKey", "ROOT", "chart_key", "history_key", "latest_key", "metal_prefix", "parse_key"]
