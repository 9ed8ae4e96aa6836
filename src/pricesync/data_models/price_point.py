"""Daily price observation for a single instrument."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Optional

from ..exceptions import ValidationError
from .enums import ChangeType


@dataclass(frozen=True)
class PricePoint:
    """
    One observed price in the local currency's smallest meaningful unit.

    ``price_minor`` is a fixed-precision ``Decimal`` (KRW per kg with two
    decimal places). Points with a non-positive price are never constructed;
    the transform boundary rejects them instead of zeroing them.
    """

    instrument_code: str
    observed_date: date
    price_minor: Decimal
    change_percent: Optional[Decimal] = None
    change_type: ChangeType = ChangeType.UNKNOWN

    def __post_init__(self) -> None:
        if not self.instrument_code:
            raise ValidationError("PricePoint requires an instrument code")
        if self.price_minor <= 0:
            raise ValidationError(
                f"Invalid price for {self.instrument_code} on {self.observed_date}: {self.price_minor}",
                value=self.price_minor,
            )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "instrument_code": self.instrument_code,
            "observed_date": self.observed_date.isoformat(),
            "price_minor": str(self.price_minor),
            "change_percent": None if self.change_percent is None else str(self.change_percent),
            "change_type": self.change_type.value,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "PricePoint":
        raw_change = payload.get("change_percent")
        return cls(
            instrument_code=payload["instrument_code"],
            observed_date=date.fromisoformat(payload["observed_date"]),
            price_minor=Decimal(payload["price_minor"]),
            change_percent=None if raw_change is None else Decimal(raw_change),
            change_type=ChangeType.from_value(payload.get("change_type")),
        )


__all__ = ["PricePoint"]
