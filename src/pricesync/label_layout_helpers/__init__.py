"""Helper modules for axis label layout."""

from .config import LabelLayoutConfig, PeriodLimits, font_size_for_width
from .formatter import LabelFormatter
from .index_selector import select_indices
from .types import LabelPlan, LabelSlot

__all__ = [
    "LabelFormatter",
    "LabelLayoutConfig",
    "LabelPlan",
    "LabelSlot",
    "PeriodLimits",
    "font_size_for_width",
    "select_indices",
]
