"""Calendar bucket boundaries and labels for each chart period."""

from __future__ import annotations

from datetime import date, timedelta

from ..data_models import ChartPeriod


class BucketBounds:
    """Daily buckets are single dates, weekly buckets start on Monday, monthly on the 1st."""

    @staticmethod
    def period_start(day: date, period: ChartPeriod) -> date:
        if period is ChartPeriod.DAILY:
            return day
        if period is ChartPeriod.WEEKLY:
            return day - timedelta(days=day.weekday())
        return day.replace(day=1)

    @staticmethod
    def next_period_start(start: date, period: ChartPeriod) -> date:
        """First day after the bucket beginning at ``start`` (exclusive end)."""
        if period is ChartPeriod.DAILY:
            return start + timedelta(days=1)
        if period is ChartPeriod.WEEKLY:
            return start + timedelta(days=7)
        if start.month == 12:
            return date(start.year + 1, 1, 1)
        return date(start.year, start.month + 1, 1)

    @staticmethod
    def label(start: date, period: ChartPeriod) -> str:
        if period is ChartPeriod.MONTHLY:
            return f"{start.year:04d}/{start.month:02d}"
        return f"{start.month:02d}/{start.day:02d}"


__all__ = ["BucketBounds"]
