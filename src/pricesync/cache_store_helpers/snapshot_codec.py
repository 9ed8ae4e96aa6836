"""
Serialization of cached values for the durable backup.

Only sequences of ``PricePoint`` or ``ChartBucket`` are persisted. Each
snapshot records its original fetch time so a value restored from the backup
reports its true age.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Sequence, Union

import orjson

from ..data_models import ChartBucket, PricePoint
from ..exceptions import DataError, ValidationError

PRICE_POINTS = "price_points"
CHART_BUCKETS = "chart_buckets"

SnapshotValue = Union[List[PricePoint], List[ChartBucket]]


@dataclass(frozen=True)
class Snapshot:
    value: SnapshotValue
    fetched_at: float


def _kind_for(items: Sequence[Any]) -> str:
    if all(isinstance(item, PricePoint) for item in items):
        return PRICE_POINTS
    if all(isinstance(item, ChartBucket) for item in items):
        return CHART_BUCKETS
    raise DataError("Backup snapshots must hold only PricePoint or only ChartBucket items")


def encode_snapshot(value: Sequence[Any], fetched_at: float) -> bytes:
    if not isinstance(value, (list, tuple)):
        raise DataError(f"Cannot snapshot value of type {type(value).__name__}")
    payload = {
        "kind": _kind_for(value),
        "fetched_at": fetched_at,
        "items": [item.to_dict() for item in value],
    }
    return orjson.dumps(payload)


def decode_snapshot(raw: Union[bytes, str]) -> Snapshot:
    try:
        payload = orjson.loads(raw)
    except orjson.JSONDecodeError as exc:
        raise DataError("Backup snapshot is not valid JSON") from exc

    if not isinstance(payload, dict):
        raise DataError("Backup snapshot must be a JSON object")

    kind = payload.get("kind")
    items = payload.get("items")
    fetched_at = payload.get("fetched_at")
    if not isinstance(items, list) or not isinstance(fetched_at, (int, float)):
        raise DataError("Backup snapshot is missing items or fetched_at")

    try:
        if kind == PRICE_POINTS:
            value: SnapshotValue = [PricePoint.from_dict(item) for item in items]
        elif kind == CHART_BUCKETS:
            value = [ChartBucket.from_dict(item) for item in items]
        else:
            raise DataError(f"Unknown backup snapshot kind: {kind!r}")
    except (KeyError, TypeError, ValueError, ArithmeticError, ValidationError) as exc:
        raise DataError(f"Backup snapshot item is malformed: {exc}") from exc

    return Snapshot(value=value, fetched_at=float(fetched_at))


__all__ = ["CHART_BUCKETS", "PRICE_POINTS", "Snapshot", "decode_snapshot", "encode_snapshot"]
