"""Layout constants and validated configuration for the label engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict

from ..config.errors import ConfigurationError
from ..data_models import ChartPeriod

PADDING_LEFT_PX = 30
PADDING_RIGHT_PX = 50
LABEL_WIDTH_PX = 35
MIN_LABEL_SPACING_PX = 8

# (max chart width exclusive, font size); wider charts use DEFAULT_FONT_SIZE
FONT_SIZE_TIERS = ((350, 10), (400, 11))
DEFAULT_FONT_SIZE = 12


@dataclass(frozen=True)
class PeriodLimits:
    """Visible-label bounds for one period and the capacity below which labels are compacted."""

    min_labels: int
    max_labels: int
    compact_below: int

    def clamp(self, capacity: int) -> int:
        return max(self.min_labels, min(self.max_labels, capacity))


def _default_limits() -> Dict[ChartPeriod, PeriodLimits]:
    return {
        ChartPeriod.DAILY: PeriodLimits(min_labels=3, max_labels=8, compact_below=6),
        ChartPeriod.WEEKLY: PeriodLimits(min_labels=3, max_labels=6, compact_below=5),
        ChartPeriod.MONTHLY: PeriodLimits(min_labels=3, max_labels=5, compact_below=6),
    }


@dataclass(frozen=True)
class LabelLayoutConfig:
    padding_left_px: float = PADDING_LEFT_PX
    padding_right_px: float = PADDING_RIGHT_PX
    label_width_px: float = LABEL_WIDTH_PX
    min_spacing_px: float = MIN_LABEL_SPACING_PX
    period_limits: Dict[ChartPeriod, PeriodLimits] = field(default_factory=_default_limits)

    def __post_init__(self) -> None:
        if self.label_width_px <= 0:
            raise ConfigurationError.non_positive("label_width_px", self.label_width_px)
        if self.min_spacing_px < 0:
            raise ConfigurationError.invalid_value("min_spacing_px", self.min_spacing_px, "Must be non-negative")
        if self.padding_left_px < 0 or self.padding_right_px < 0:
            raise ConfigurationError.invalid_value(
                "padding", (self.padding_left_px, self.padding_right_px), "Must be non-negative"
            )
        for period in ChartPeriod:
            limits = self.period_limits.get(period)
            if limits is None:
                raise ConfigurationError.missing_value(f"period_limits[{period.value}]")
            if limits.min_labels < 2 or limits.max_labels < limits.min_labels:
                raise ConfigurationError.invalid_value(
                    f"period_limits[{period.value}]",
                    (limits.min_labels, limits.max_labels),
                    "Need 2 <= min_labels <= max_labels",
                )

    def limits_for(self, period: ChartPeriod) -> PeriodLimits:
        return self.period_limits[period]

    def available_width(self, chart_width_px: float) -> float:
        return chart_width_px - self.padding_left_px - self.padding_right_px


def font_size_for_width(chart_width_px: float) -> int:
    for max_width, font_size in FONT_SIZE_TIERS:
        if chart_width_px < max_width:
            return font_size
    return DEFAULT_FONT_SIZE


__all__ = [
    "DEFAULT_FONT_SIZE",
    "LABEL_WIDTH_PX",
    "LabelLayoutConfig",
    "MIN_LABEL_SPACING_PX",
    "PADDING_LEFT_PX",
    "PADDING_RIGHT_PX",
    "PeriodLimits",
    "font_size_for_width",
]
