"""
Time-bucketed chart statistics.

Reduces a daily price series into daily, weekly (Monday-anchored) or monthly
(calendar) buckets with average, minimum, maximum and the change of the
average against the preceding bucket. Aggregation is a pure function of the
input set: points are sorted before partitioning, so any permutation of the
same points yields the same buckets. Periods without observations produce no
bucket at all.
"""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal
from itertools import groupby
from typing import Iterable, List, Sequence

from .chart_aggregator_helpers import BucketBounds, PriceStatistics, summarize
from .data_models import ChangeType, ChartBucket, ChartPeriod, PricePoint
from .exceptions import ValidationError

logger = logging.getLogger(__name__)

PRICE_QUANTUM = Decimal("0.01")
PERCENT_QUANTUM = Decimal("0.01")
_ZERO_PERCENT = Decimal("0.00")


def change_percent(previous_avg: Decimal, current_avg: Decimal) -> Decimal:
    """Percent change rounded half-up to two places; 0 when there is no usable base."""
    if previous_avg == 0:
        return _ZERO_PERCENT
    change = (current_avg - previous_avg) / previous_avg * 100
    return change.quantize(PERCENT_QUANTUM, rounding=ROUND_HALF_UP)


def _sorted_points(points: Iterable[PricePoint]) -> List[PricePoint]:
    ordered = sorted(points, key=lambda point: (point.observed_date, point.price_minor))
    codes = {point.instrument_code for point in ordered}
    if len(codes) > 1:
        raise ValidationError(
            f"Cannot aggregate a series that mixes instruments: {', '.join(sorted(codes))}",
            value=sorted(codes),
        )
    return ordered


class ChartAggregator:
    """Stateless bucket builder; safe to share between callers."""

    @staticmethod
    def aggregate(points: Iterable[PricePoint], period: ChartPeriod) -> List[ChartBucket]:
        period = ChartPeriod.parse(period)
        ordered = _sorted_points(points)
        if not ordered:
            return []

        buckets: List[ChartBucket] = []
        previous_avg = None
        for start, grouped in groupby(ordered, key=lambda point: BucketBounds.period_start(point.observed_date, period)):
            prices = [point.price_minor for point in grouped]
            avg_price = (sum(prices, Decimal("0")) / len(prices)).quantize(PRICE_QUANTUM, rounding=ROUND_HALF_UP)
            if previous_avg is None:
                change = _ZERO_PERCENT
                change_type = ChangeType.UNCHANGED
            else:
                change = change_percent(previous_avg, avg_price)
                change_type = ChangeType.from_change(change)
            buckets.append(
                ChartBucket(
                    period_start=start,
                    label=BucketBounds.label(start, period),
                    avg_price=avg_price,
                    min_price=min(prices),
                    max_price=max(prices),
                    change_percent=change,
                    change_type=change_type,
                    sample_count=len(prices),
                )
            )
            previous_avg = avg_price

        logger.debug("Aggregated %d points into %d %s buckets", len(ordered), len(buckets), period.value)
        return buckets

    @staticmethod
    def summarize(points: Sequence[PricePoint]) -> PriceStatistics:
        _sorted_points(points)
        return summarize(points)

    @staticmethod
    def latest_buckets(buckets: Sequence[ChartBucket], limit: int) -> List[ChartBucket]:
        """The ``limit`` most recent buckets, still in ascending order."""
        if limit <= 0:
            return []
        return list(buckets[-limit:])


def aggregate(points: Iterable[PricePoint], period: ChartPeriod) -> List[ChartBucket]:
    return ChartAggregator.aggregate(points, period)


__all__ = ["ChartAggregator", "PriceStatistics", "aggregate", "change_percent"]
