"""Enumerations shared by price and chart models."""

from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import Any

from ..exceptions import ValidationError


class ChangeType(Enum):
    """Direction of a price move."""

    POSITIVE = "positive"
    NEGATIVE = "negative"
    UNCHANGED = "unchanged"
    UNKNOWN = "unknown"

    @classmethod
    def from_value(cls, raw: Any) -> "ChangeType":
        """Parse a wire value; missing or unrecognized values map to ``UNKNOWN``."""
        if isinstance(raw, cls):
            return raw
        if isinstance(raw, str):
            for member in cls:
                if member.value == raw.strip().lower():
                    return member
        return cls.UNKNOWN

    @classmethod
    def from_change(cls, change_percent: Decimal) -> "ChangeType":
        if change_percent > 0:
            return cls.POSITIVE
        if change_percent < 0:
            return cls.NEGATIVE
        return cls.UNCHANGED


class ChartPeriod(Enum):
    """Calendar period used to bucket a price series."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"

    @classmethod
    def parse(cls, raw: Any) -> "ChartPeriod":
        if isinstance(raw, cls):
            return raw
        if isinstance(raw, str):
            lowered = raw.strip().lower()
            for member in cls:
                if member.value == lowered:
                    return member
        raise ValidationError(f"Unsupported chart period: {raw!r}", value=raw)


__all__ = ["ChangeType", "ChartPeriod"]
