"""Immutable value types exchanged between the sync components."""

from .chart_bucket import ChartBucket
from .enums import ChangeType, ChartPeriod
from .price_point import PricePoint

__all__ = ["ChangeType", "ChartBucket", "ChartPeriod", "PricePoint"]
