"""
Consumer-facing price queries.

``PriceSyncService`` wires the components together: the polling scheduler
drives refreshes, each refresh runs the remote fetch through the retry
scheduler and commits the outcome to the cache, and queries read only from
the cache (or its durable backup). Queries never wait on the network; a
stale or missing value schedules a background refresh instead, and the
caller gets an explicit Fresh, Stale or Unavailable result carrying the
last classified error when there is one.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, FrozenSet, Generic, Iterable, List, Optional, Sequence, Tuple, TypeVar

from . import cache_keys
from .cache_store import CacheStore
from .cache_store_helpers import CacheLookup, CacheState
from .chart_aggregator import ChartAggregator
from .chart_aggregator_helpers import PriceStatistics
from .data_models import ChartBucket, ChartPeriod, PricePoint
from .error_classifier_helpers import ClassifiedError
from .label_layout import LabelLayoutEngine, LabelPlan
from .polling_scheduler import PollingScheduler, PollingState
from .remote_data_source import RemoteDataSource
from .result import Result, Success
from .retry_scheduler import RetryPolicy, RetryScheduler
from .runtime_profile import DEFAULT_PROFILE, RuntimeProfile

logger = logging.getLogger(__name__)

T = TypeVar("T")

HISTORY_BASE_INTERVAL_SECONDS = 5 * 60
CHART_BASE_INTERVAL_SECONDS = {
    ChartPeriod.DAILY: 5 * 60,
    ChartPeriod.WEEKLY: 15 * 60,
    ChartPeriod.MONTHLY: 15 * 60,
}


class QueryStatus(Enum):
    FRESH = "fresh"
    STALE = "stale"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class QueryResult(Generic[T]):
    """A cached value (possibly stale, explicitly marked) or an unavailable signal."""

    status: QueryStatus
    value: Optional[T] = None
    fetched_at: Optional[float] = None
    from_backup: bool = False
    error: Optional[ClassifiedError] = None

    @property
    def available(self) -> bool:
        return self.status is not QueryStatus.UNAVAILABLE

    @property
    def is_stale(self) -> bool:
        return self.status is QueryStatus.STALE

    @property
    def user_message(self) -> Optional[str]:
        return self.error.user_message if self.error else None


def _from_lookup(lookup: CacheLookup, error: Optional[ClassifiedError]) -> QueryResult[Any]:
    status = QueryStatus.FRESH if lookup.state is CacheState.FRESH else QueryStatus.STALE
    return QueryResult(
        status=status,
        value=lookup.value,
        fetched_at=lookup.fetched_at,
        from_backup=lookup.from_backup,
        error=error if status is QueryStatus.STALE else None,
    )


class PriceSyncService:
    """Polling-backed price cache with a read-only query surface."""

    def __init__(
        self,
        source: RemoteDataSource,
        *,
        cache: Optional[CacheStore] = None,
        retry_scheduler: Optional[RetryScheduler] = None,
        retry_policy: Optional[RetryPolicy] = None,
        profile: RuntimeProfile = DEFAULT_PROFILE,
        label_engine: Optional[LabelLayoutEngine] = None,
        min_interval_seconds: float = 1.0,
    ):
        self._source = source
        self._cache = cache or CacheStore()
        self._retry = retry_scheduler or RetryScheduler()
        self._retry_policy = retry_policy
        self._labels = label_engine or LabelLayoutEngine()
        self._scheduler = PollingScheduler(self._refresh_key, profile, min_interval_seconds=min_interval_seconds)
        self._last_errors: Dict[str, ClassifiedError] = {}

    @property
    def cache(self) -> CacheStore:
        return self._cache

    @property
    def scheduler(self) -> PollingScheduler:
        return self._scheduler

    @property
    def profile(self) -> RuntimeProfile:
        return self._scheduler.profile

    # Polling registration

    def watch_latest(self, codes: Iterable[str]) -> str:
        key = cache_keys.latest_key(codes)
        self._scheduler.start(key, lambda profile: profile.price_interval_seconds)
        return key

    def watch_history(self, code: str, days: int) -> str:
        key = cache_keys.history_key(code, days)
        self._scheduler.start(key, lambda profile: HISTORY_BASE_INTERVAL_SECONDS)
        return key

    def watch_chart(self, code: str, period: ChartPeriod, limit: int) -> str:
        chart_period = ChartPeriod.parse(period)
        key = cache_keys.chart_key(code, chart_period, limit)
        base_interval = CHART_BASE_INTERVAL_SECONDS[chart_period]
        self._scheduler.start(key, lambda profile: base_interval)
        return key

    def unwatch(self, key: str) -> None:
        self._scheduler.stop(key)

    def polling_state(self, key: str) -> PollingState:
        return self._scheduler.state(key)

    def last_error(self, key: str) -> Optional[ClassifiedError]:
        return self._last_errors.get(key)

    # Host signals

    def set_profile(self, profile: RuntimeProfile) -> None:
        """Switch the battery preset; the current host state carries over."""
        current = self._scheduler.profile
        self._scheduler.set_profile(
            profile.with_host_state(is_foreground=current.is_foreground, is_low_power=current.is_low_power)
        )

    def set_host_state(self, *, is_foreground: Optional[bool] = None, is_low_power: Optional[bool] = None) -> None:
        profile = self._scheduler.profile.with_host_state(is_foreground=is_foreground, is_low_power=is_low_power)
        self._scheduler.set_profile(profile)

    # Queries (cache reads only)

    async def latest(self, codes: Iterable[str]) -> QueryResult[List[PricePoint]]:
        """
        Latest prices for ``codes``.

        Without an entry of its own, a subset is served from a cached or
        watched superset entry so it shares that entry's polling.
        """
        key = cache_keys.latest_key(codes)
        if self._cache.get(key) is None and key not in self._scheduler.keys():
            requested = cache_keys.parse_key(key).codes
            superset_key = self._covering_latest_key(requested)
            if superset_key is not None:
                result = await self._query(superset_key)
                if result.value is None:
                    return result
                return replace(result, value=[point for point in result.value if point.instrument_code in requested])
        return await self._query(key)

    async def history(self, code: str, days: int) -> QueryResult[List[PricePoint]]:
        return await self._query(cache_keys.history_key(code, days))

    async def chart(self, code: str, period: ChartPeriod, limit: int) -> QueryResult[List[ChartBucket]]:
        """
        Server-side bucket statistics, or buckets aggregated from cached history.

        The history fallback is reported as Stale since it is derived data.
        """
        chart_period = ChartPeriod.parse(period)
        key = cache_keys.chart_key(code, chart_period, limit)
        result = await self._query(key)
        if result.available:
            return result

        derived = await self._chart_from_history(code, chart_period, limit)
        if derived is not None:
            return QueryResult(
                status=QueryStatus.STALE,
                value=derived.value,
                fetched_at=derived.fetched_at,
                from_backup=derived.from_backup,
                error=result.error,
            )
        return result

    async def summary(self, code: str, days: int) -> QueryResult[PriceStatistics]:
        result = await self.history(code, days)
        if not result.available or result.value is None:
            return QueryResult(status=QueryStatus.UNAVAILABLE, error=result.error)
        return QueryResult(
            status=result.status,
            value=ChartAggregator.summarize(result.value),
            fetched_at=result.fetched_at,
            from_backup=result.from_backup,
            error=result.error,
        )

    def label_plan(
        self,
        raw_labels: Sequence[str],
        pixel_budget: float,
        period: ChartPeriod = ChartPeriod.DAILY,
        *,
        min_spacing_px: Optional[float] = None,
        avg_label_width_px: Optional[float] = None,
    ) -> LabelPlan:
        config = self._labels.config
        return self._labels.plan(
            raw_labels,
            pixel_budget,
            config.min_spacing_px if min_spacing_px is None else min_spacing_px,
            config.label_width_px if avg_label_width_px is None else avg_label_width_px,
            period,
        )

    def chart_label_plan(self, buckets: Sequence[ChartBucket], period: ChartPeriod, chart_width_px: float) -> LabelPlan:
        return self._labels.plan_for_chart([bucket.label for bucket in buckets], period, chart_width_px)

    async def refresh_now(self, key: str) -> QueryResult[Any]:
        """Manual refresh: wait for a fetch of ``key`` and return what the cache then holds."""
        await self._scheduler.refresh_now(key)
        return await self._query(key, schedule_refresh=False)

    async def shutdown(self) -> None:
        await self._scheduler.shutdown()
        await self._cache.close()
        logger.info("Price sync service stopped")

    # Internals

    async def _query(self, key: str, *, schedule_refresh: bool = True) -> QueryResult[Any]:
        lookup = await self._cache.lookup(key)
        error = self._last_errors.get(key)
        if lookup is None:
            if schedule_refresh:
                self._scheduler.trigger(key)
            return QueryResult(status=QueryStatus.UNAVAILABLE, error=error)
        if schedule_refresh and lookup.state is not CacheState.FRESH:
            self._scheduler.trigger(key)
        return _from_lookup(lookup, error)

    def _covering_latest_key(self, requested: FrozenSet[str]) -> Optional[str]:
        """Smallest watched or cached latest-prices key whose code set contains ``requested``."""
        prefix = cache_keys.latest_key(requested).rsplit(":", 1)[0] + ":"
        candidates = [
            key
            for key in set(self._scheduler.keys()) | set(self._cache.keys())
            if key.startswith(prefix) and cache_keys.parse_key(key).codes > requested
        ]
        if not candidates:
            return None
        return min(candidates, key=lambda key: (len(cache_keys.parse_key(key).codes), key))

    async def _chart_from_history(
        self, code: str, period: ChartPeriod, limit: int
    ) -> Optional[QueryResult[List[ChartBucket]]]:
        prefix = f"{cache_keys.metal_prefix(code)}:history:"
        candidates = sorted(
            (key for key in self._cache.keys() if key.startswith(prefix)),
            key=lambda key: cache_keys.parse_key(key).days or 0,
            reverse=True,
        )
        for key in candidates:
            lookup = await self._cache.lookup(key)
            if lookup is None or not lookup.value:
                continue
            buckets = ChartAggregator.latest_buckets(ChartAggregator.aggregate(lookup.value, period), limit)
            return QueryResult(
                status=QueryStatus.STALE,
                value=buckets,
                fetched_at=lookup.fetched_at,
                from_backup=lookup.from_backup,
            )
        return None

    def _operation_for(self, key: str) -> Tuple[Callable[[], Awaitable[Any]], float]:
        """The fetch for ``key`` and its base refresh interval in seconds."""
        parsed = cache_keys.parse_key(key)
        if parsed.kind == "latest":
            return (lambda: self._source.fetch_latest(parsed.codes)), self.profile.price_interval_seconds
        if parsed.kind == "history":
            assert parsed.days is not None
            return (lambda: self._source.fetch_history(parsed.code, parsed.days)), HISTORY_BASE_INTERVAL_SECONDS
        assert parsed.period is not None and parsed.limit is not None
        return (
            (lambda: self._source.fetch_bucket_stats(parsed.code, parsed.period, parsed.limit)),
            CHART_BASE_INTERVAL_SECONDS[parsed.period],
        )

    async def _refresh_key(self, key: str, cancel_event: asyncio.Event) -> Result[Any]:
        operation, base_interval = self._operation_for(key)
        sequence = self._cache.begin_fetch(key)
        result = await self._retry.run(
            operation,
            self._retry_policy,
            cancel_event=cancel_event,
            operation_name=f"refresh {key}",
        )

        if isinstance(result, Success):
            if cancel_event.is_set():
                logger.info("Dropping result for %s fetched after cancellation", key)
                return result
            stale_ms, expire_ms = self.profile.cache_durations(self.profile.effective_interval(base_interval))
            if self._cache.commit(key, result.value, stale_ms, expire_ms, sequence):
                self._last_errors.pop(key, None)
                logger.info("Refreshed %s", key)
            return result

        if not result.cancelled:
            self._last_errors[key] = result.error
            logger.warning(
                "Refresh of %s failed (%s); keeping previous value",
                key,
                result.error.describe(),
            )
        return result


__all__ = [
    "CHART_BASE_INTERVAL_SECONDS",
    "HISTORY_BASE_INTERVAL_SECONDS",
    "PriceSyncService",
    "QueryResult",
    "QueryStatus",
]
