"""Summary statistics over a daily price series."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Sequence

from ..data_models import PricePoint

WHOLE_UNIT = Decimal("1")
PERCENT_QUANTUM = Decimal("0.01")
ZERO = Decimal("0")


@dataclass(frozen=True)
class PriceStatistics:
    """
    Detail-screen statistics for one instrument.

    Prices and volatility are whole currency units; ``total_change_percent``
    compares the newest observation against the oldest.
    """

    highest: Decimal
    lowest: Decimal
    average: Decimal
    volatility: Decimal
    total_change_percent: Decimal
    sample_count: int

    @classmethod
    def empty(cls) -> "PriceStatistics":
        return cls(ZERO, ZERO, ZERO, ZERO, ZERO.quantize(PERCENT_QUANTUM), 0)


def _whole(value: Decimal) -> Decimal:
    return value.quantize(WHOLE_UNIT, rounding=ROUND_HALF_UP)


def summarize(points: Sequence[PricePoint]) -> PriceStatistics:
    """Highest, lowest, mean, population standard deviation and total change."""
    if not points:
        return PriceStatistics.empty()

    ordered = sorted(points, key=lambda point: (point.observed_date, point.price_minor))
    prices = [point.price_minor for point in ordered]
    count = len(prices)
    mean = sum(prices, ZERO) / count
    variance = sum(((price - mean) ** 2 for price in prices), ZERO) / count
    volatility = variance.sqrt()

    first_price = prices[0]
    last_price = prices[-1]
    total_change = (last_price - first_price) / first_price * 100

    return PriceStatistics(
        highest=_whole(max(prices)),
        lowest=_whole(min(prices)),
        average=_whole(mean),
        volatility=_whole(volatility),
        total_change_percent=total_change.quantize(PERCENT_QUANTUM, rounding=ROUND_HALF_UP),
        sample_count=count,
    )


__all__ = ["PriceStatistics", "summarize"]
