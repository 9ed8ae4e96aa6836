"""
Axis label selection for fixed-width charts.

Given the raw x-axis labels of a chart and the pixels available for them, the
engine decides which labels to show so that none collide: it computes how
many labels fit, keeps the first and last, spreads the rest evenly, and
compacts label text when the axis is crowded. Plans are pure functions of
their inputs, so re-rendering the same data never makes labels jump.
"""

from __future__ import annotations

import logging
import math
from typing import Optional, Sequence

from .config.errors import ConfigurationError
from .data_models import ChartPeriod
from .label_layout_helpers import (
    LabelFormatter,
    LabelLayoutConfig,
    LabelPlan,
    LabelSlot,
    font_size_for_width,
    select_indices,
)

logger = logging.getLogger(__name__)


class LabelLayoutEngine:
    """Plans non-overlapping label subsets; holds only immutable configuration."""

    def __init__(self, config: Optional[LabelLayoutConfig] = None):
        self.config = config or LabelLayoutConfig()

    def capacity(
        self,
        pixel_budget: float,
        min_spacing_px: float,
        avg_label_width_px: float,
        period: ChartPeriod,
    ) -> int:
        """Labels that fit the budget, clamped to the period's bounds."""
        _validate_geometry(pixel_budget, min_spacing_px, avg_label_width_px)
        raw_capacity = math.floor(pixel_budget / (avg_label_width_px + min_spacing_px))
        return self.config.limits_for(period).clamp(raw_capacity)

    def plan(
        self,
        raw_labels: Sequence[str],
        pixel_budget: float,
        min_spacing_px: float,
        avg_label_width_px: float,
        period: ChartPeriod = ChartPeriod.DAILY,
        *,
        font_size: Optional[int] = None,
    ) -> LabelPlan:
        period = ChartPeriod.parse(period)
        capacity = self.capacity(pixel_budget, min_spacing_px, avg_label_width_px, period)
        compact = capacity < self.config.limits_for(period).compact_below

        visible = set(select_indices(len(raw_labels), capacity))
        slots = tuple(
            LabelSlot(index=index, text=LabelFormatter.format(label, period, compact), is_visible=index in visible)
            for index, label in enumerate(raw_labels)
        )
        logger.debug(
            "Label plan: %d of %d labels visible (capacity=%d, compact=%s, period=%s)",
            len(visible),
            len(raw_labels),
            capacity,
            compact,
            period.value,
        )
        return LabelPlan(slots=slots, capacity=capacity, compact=compact, font_size=font_size)

    def plan_for_chart(self, raw_labels: Sequence[str], period: ChartPeriod, chart_width_px: float) -> LabelPlan:
        """Plan with the default geometry for a chart of ``chart_width_px`` pixels."""
        budget = self.config.available_width(chart_width_px)
        return self.plan(
            raw_labels,
            budget,
            self.config.min_spacing_px,
            self.config.label_width_px,
            period,
            font_size=font_size_for_width(chart_width_px),
        )


def _validate_geometry(pixel_budget: float, min_spacing_px: float, avg_label_width_px: float) -> None:
    if pixel_budget <= 0:
        raise ConfigurationError.non_positive("pixel_budget", pixel_budget)
    if avg_label_width_px <= 0:
        raise ConfigurationError.non_positive("avg_label_width_px", avg_label_width_px)
    if min_spacing_px < 0:
        raise ConfigurationError.invalid_value("min_spacing_px", min_spacing_px, "Must be non-negative")


__all__ = ["LabelLayoutEngine", "LabelPlan", "LabelSlot"]
