"""Helper modules for the polling scheduler."""

from .delay_planner import DelayPlanner
from .types import InFlightFetch, IntervalProvider, PollingSlot, PollingState, RefreshJob

__all__ = ["DelayPlanner", "InFlightFetch", "IntervalProvider", "PollingSlot", "PollingState", "RefreshJob"]
