"""
Remote price source.

Fetches latest prices, N-day history and server-side bucket statistics from
the PostgREST API in front of the processed LME price tables. Every method
either returns fully validated models or raises the raw error it hit; it
never classifies, retries or caches.

The HTTP client is injected, so several sources can coexist and tests can
pass a stub.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Callable, Iterable, List, Mapping, Optional, Protocol

from .data_models import ChartBucket, ChartPeriod, PricePoint
from .exceptions import RemoteHTTPError, ValidationError
from .instruments import normalize_code
from .price_point_parser import ChartBucketParser, PricePointParser, latest_per_instrument
from .remote_data_source_helpers import queries

logger = logging.getLogger(__name__)

HTTP_NOT_FOUND = 404


class JsonClient(Protocol):
    async def request_json(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Mapping[str, str]] = None,
        json_body: Optional[Any] = None,
    ) -> Any: ...


def _positive(name: str, value: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValidationError(f"{name} must be a positive integer, got {value!r}", value=value)
    return value


class RemoteDataSource:
    """Async reads against the price API."""

    def __init__(self, client: JsonClient, *, today: Callable[[], date] = date.today):
        self._client = client
        self._today = today

    async def fetch_latest(self, codes: Iterable[str]) -> List[PricePoint]:
        """Newest price per requested instrument, ordered by code."""
        requested = {normalize_code(code) for code in codes}
        if not requested:
            raise ValidationError("fetch_latest requires at least one instrument code")

        try:
            payload = await self._client.request_json("POST", queries.LATEST_PRICES_RPC, json_body={})
        except RemoteHTTPError as exc:
            if exc.status != HTTP_NOT_FOUND:
                raise
            logger.info("Latest-prices RPC unavailable (HTTP 404); falling back to table query")
            payload = await self._client.request_json(
                "GET",
                queries.PRICES_TABLE,
                params=queries.latest_fallback_params(self._today()),
            )

        points = PricePointParser.parse_rows(payload, context="latest prices")
        latest = [point for point in latest_per_instrument(points) if point.instrument_code in requested]
        logger.debug("Fetched latest prices for %s", ",".join(point.instrument_code for point in latest))
        return latest

    async def fetch_history(self, code: str, days: int) -> List[PricePoint]:
        """Daily prices for the last ``days`` days, oldest first."""
        instrument = normalize_code(code)
        _positive("days", days)
        payload = await self._client.request_json(
            "GET",
            queries.PRICES_TABLE,
            params=queries.history_params(instrument, self._today(), days),
        )
        points = PricePointParser.parse_rows(payload, context=f"{instrument} history")
        history = sorted(
            (point for point in points if point.instrument_code == instrument),
            key=lambda point: point.observed_date,
        )
        logger.debug("Fetched %d history points for %s (%d days)", len(history), instrument, days)
        return history

    async def fetch_bucket_stats(self, code: str, period: ChartPeriod, limit: int) -> List[ChartBucket]:
        """Server-side period statistics, oldest bucket first."""
        instrument = normalize_code(code)
        chart_period = ChartPeriod.parse(period)
        _positive("limit", limit)
        payload = await self._client.request_json(
            "POST",
            queries.CHART_STATS_RPC,
            json_body=queries.chart_stats_body(instrument, chart_period, limit),
        )
        buckets = ChartBucketParser.parse_rows(payload, context=f"{instrument} {chart_period.value} chart stats")
        logger.debug("Fetched %d %s buckets for %s", len(buckets), chart_period.value, instrument)
        return buckets


__all__ = ["JsonClient", "RemoteDataSource"]
