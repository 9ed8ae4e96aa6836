"""Aggregated statistics for one calendar period of a price series."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Dict

from ..exceptions import ValidationError
from .enums import ChangeType


@dataclass(frozen=True)
class ChartBucket:
    """Bucketed price statistics; ``sample_count`` is always at least one."""

    period_start: date
    label: str
    avg_price: Decimal
    min_price: Decimal
    max_price: Decimal
    change_percent: Decimal
    change_type: ChangeType
    sample_count: int

    def __post_init__(self) -> None:
        if self.sample_count < 1:
            raise ValidationError(
                f"Chart bucket {self.label} must contain at least one sample",
                value=self.sample_count,
            )
        if self.min_price > self.max_price:
            raise ValidationError(
                f"Chart bucket {self.label} has min_price above max_price",
                value=(self.min_price, self.max_price),
            )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "period_start": self.period_start.isoformat(),
            "label": self.label,
            "avg_price": str(self.avg_price),
            "min_price": str(self.min_price),
            "max_price": str(self.max_price),
            "change_percent": str(self.change_percent),
            "change_type": self.change_type.value,
            "sample_count": self.sample_count,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "ChartBucket":
        return cls(
            period_start=date.fromisoformat(payload["period_start"]),
            label=payload["label"],
            avg_price=Decimal(payload["avg_price"]),
            min_price=Decimal(payload["min_price"]),
            max_price=Decimal(payload["max_price"]),
            change_percent=Decimal(payload["change_percent"]),
            change_type=ChangeType.from_value(payload.get("change_type")),
            sample_count=int(payload["sample_count"]),
        )


__all__ = ["ChartBucket"]
