"""
Price API payload parsing

Converts JSON rows returned by the price API into validated ``PricePoint`` and
``ChartBucket`` values. Individual rows that fail validation are skipped with a
warning; a payload whose overall shape is wrong raises
``PayloadValidationError`` so the caller sees a failed fetch instead of a
silently empty one.
"""

from __future__ import annotations

import logging
import math
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Iterable, List, Mapping, Optional

from .data_models import ChangeType, ChartBucket, PricePoint
from .exceptions import PayloadValidationError, ValidationError
from .instruments import normalize_code

logger = logging.getLogger(__name__)

PRICE_QUANTUM = Decimal("0.01")
PERCENT_QUANTUM = Decimal("0.01")

_ROW_ERRORS = (ValidationError, KeyError, TypeError, ValueError, InvalidOperation)


def to_decimal(raw: Any, quantum: Decimal = PRICE_QUANTUM) -> Decimal:
    """Coerce a JSON number or numeric string to a quantized ``Decimal``."""
    if raw is None or isinstance(raw, bool):
        raise ValidationError(f"Expected a number, got {raw!r}", value=raw)
    if isinstance(raw, float) and not math.isfinite(raw):
        raise ValidationError(f"Expected a finite number, got {raw!r}", value=raw)
    try:
        value = Decimal(str(raw).strip())
    except InvalidOperation as exc:
        raise ValidationError(f"Expected a number, got {raw!r}", value=raw) from exc
    if not value.is_finite():
        raise ValidationError(f"Expected a finite number, got {raw!r}", value=raw)
    return value.quantize(quantum, rounding=ROUND_HALF_UP)


def to_positive_price(raw: Any) -> Decimal:
    price = to_decimal(raw)
    if price <= 0:
        raise ValidationError(f"Invalid price: {raw!r}. Must be positive.", value=raw)
    return price


def to_date(raw: Any) -> date:
    """Parse ``YYYY-MM-DD`` or an ISO timestamp into a calendar date."""
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    if not isinstance(raw, str) or not raw.strip():
        raise ValidationError(f"Expected an ISO date, got {raw!r}", value=raw)
    text = raw.strip()
    if len(text) == len("YYYY-MM-DD"):
        return date.fromisoformat(text)
    return datetime.fromisoformat(text.replace("Z", "+00:00")).date()


def _optional_percent(raw: Any) -> Optional[Decimal]:
    if raw is None:
        return None
    return to_decimal(raw, PERCENT_QUANTUM)


def _require_rows(payload: Any, context: str) -> List[Mapping[str, Any]]:
    if payload is None:
        return []
    if not isinstance(payload, list):
        raise PayloadValidationError(
            f"Expected a JSON array for {context}, got {type(payload).__name__}",
            context=context,
        )
    return payload


class PricePointParser:
    """
    Parses price API rows

    Validates codes, dates and prices, rejecting invalid rows rather than
    coercing them to zero.
    """

    @staticmethod
    def parse_row(row: Mapping[str, Any]) -> PricePoint:
        if not isinstance(row, Mapping):
            raise ValidationError(f"Expected a JSON object, got {type(row).__name__}")
        raw_code = row["metal_code"]
        if not isinstance(raw_code, str) or not raw_code.strip():
            raise ValidationError(f"Invalid metal code: {raw_code!r}", value=raw_code)
        return PricePoint(
            instrument_code=normalize_code(raw_code),
            observed_date=to_date(row["price_date"]),
            price_minor=to_positive_price(row["price_krw_per_kg"]),
            change_percent=_optional_percent(row.get("change_percent")),
            change_type=ChangeType.from_value(row.get("change_type")),
        )

    @classmethod
    def parse_rows(cls, payload: Any, context: str) -> List[PricePoint]:
        points: List[PricePoint] = []
        for row in _require_rows(payload, context):
            try:
                points.append(cls.parse_row(row))
            except _ROW_ERRORS as exc:
                logger.warning("Skipping invalid %s row %r: %s", context, row, exc)
        return points


class ChartBucketParser:
    """Parses server-side chart statistics rows."""

    @staticmethod
    def parse_row(row: Mapping[str, Any]) -> ChartBucket:
        if not isinstance(row, Mapping):
            raise ValidationError(f"Expected a JSON object, got {type(row).__name__}")
        avg_price = to_positive_price(row["avg_price"])
        label = row["period_label"]
        if not isinstance(label, str) or not label:
            raise ValidationError(f"Invalid period label: {label!r}", value=label)
        # Missing extremes fall back to the average, as the server omits them for single samples
        min_price = avg_price if row.get("min_price") is None else to_positive_price(row["min_price"])
        max_price = avg_price if row.get("max_price") is None else to_positive_price(row["max_price"])
        raw_change = row.get("change_percent")
        change_percent = Decimal("0.00") if raw_change is None else to_decimal(raw_change, PERCENT_QUANTUM)
        raw_type = row.get("change_type")
        change_type = ChangeType.from_change(change_percent) if raw_type is None else ChangeType.from_value(raw_type)
        raw_count = row.get("data_points")
        return ChartBucket(
            period_start=to_date(row["period_start"]),
            label=label,
            avg_price=avg_price,
            min_price=min_price,
            max_price=max_price,
            change_percent=change_percent,
            change_type=change_type,
            sample_count=1 if raw_count is None else int(raw_count),
        )

    @classmethod
    def parse_rows(cls, payload: Any, context: str) -> List[ChartBucket]:
        buckets: List[ChartBucket] = []
        for row in _require_rows(payload, context):
            try:
                buckets.append(cls.parse_row(row))
            except _ROW_ERRORS as exc:
                logger.warning("Skipping invalid %s row %r: %s", context, row, exc)
        buckets.sort(key=lambda bucket: bucket.period_start)
        return buckets


def latest_per_instrument(points: Iterable[PricePoint]) -> List[PricePoint]:
    """Keep the newest point per instrument, ordered by instrument code."""
    newest: dict[str, PricePoint] = {}
    for point in points:
        current = newest.get(point.instrument_code)
        if current is None or point.observed_date > current.observed_date:
            newest[point.instrument_code] = point
    return [newest[code] for code in sorted(newest)]


__all__ = [
    "ChartBucketParser",
    "PRICE_QUANTUM",
    "PricePointParser",
    "latest_per_instrument",
    "to_date",
    "to_decimal",
    "to_positive_price",
]
