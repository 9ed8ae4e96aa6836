"""Types shared by the polling scheduler."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Optional

if TYPE_CHECKING:
    from ..runtime_profile import RuntimeProfile

# Receives the key and the cancel event the job must honour between attempts
RefreshJob = Callable[[str, asyncio.Event], Awaitable[Any]]

# Returns the base refresh interval in seconds for the active profile
IntervalProvider = Callable[["RuntimeProfile"], float]


class PollingState(Enum):
    IDLE = "idle"
    SCHEDULED = "scheduled"
    FETCHING = "fetching"
    SUSPENDED = "suspended"


@dataclass
class PollingSlot:
    """Mutable per-key scheduler bookkeeping; times are event-loop seconds."""

    key: str
    interval_provider: IntervalProvider
    state: PollingState = PollingState.IDLE
    timer_task: Optional["asyncio.Task[None]"] = None
    next_fire_at: Optional[float] = None
    last_completed_at: Optional[float] = None
    completed_fetches: int = 0


@dataclass
class InFlightFetch:
    task: "asyncio.Task[None]"
    cancel_event: asyncio.Event = field(default_factory=asyncio.Event)
    # Cancelled fetch of the same key this one waits for before running
    predecessor: Optional["asyncio.Task[None]"] = None

    @property
    def active(self) -> bool:
        return not self.task.done() and not self.cancel_event.is_set()


__all__ = ["InFlightFetch", "IntervalProvider", "PollingSlot", "PollingState", "RefreshJob"]
