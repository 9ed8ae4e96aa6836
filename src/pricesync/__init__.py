"""Price synchronization, freshness-aware caching and chart aggregation for LME base metals."""

from .cache_store import CacheStore
from .chart_aggregator import ChartAggregator, aggregate
from .data_models import ChangeType, ChartBucket, ChartPeriod, PricePoint
from .error_classifier import ErrorClassifier, classify_error
from .label_layout import LabelLayoutEngine
from .polling_scheduler import PollingScheduler, PollingState
from .price_service import PriceSyncService, QueryResult, QueryStatus
from .remote_data_source import RemoteDataSource
from .retry_scheduler import RetryPolicy, RetryScheduler
from .runtime_profile import RuntimeProfile, profile_by_name

__all__ = [
    "CacheStore",
    "ChangeType",
    "ChartAggregator",
    "ChartBucket",
    "ChartPeriod",
    "ErrorClassifier",
    "LabelLayoutEngine",
    "PollingScheduler",
    "PollingState",
    "PricePoint",
    "PriceSyncService",
    "QueryResult",
    "QueryStatus",
    "RemoteDataSource",
    "RetryPolicy",
    "RetryScheduler",
    "RuntimeProfile",
    "aggregate",
    "classify_error",
    "profile_by_name",
]
