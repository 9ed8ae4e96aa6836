"""Helper modules for chart aggregation."""

from .bucket_bounds import BucketBounds
from .statistics import PriceStatistics, summarize

__all__ = ["BucketBounds", "PriceStatistics", "summarize"]
