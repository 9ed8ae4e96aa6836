"""
Periodic refresh driver for cache keys.

Each registered key owns one timer. When it fires, the scheduler runs the
injected refresh job (which fetches through the retry scheduler and commits
to the cache) and, once that job finishes, arms the timer again one full
interval later. Success and exhausted retries are treated the same: a failed
refresh never shortens the next wait.

At most one fetch per key is in flight. A timer that fires while a fetch is
running does nothing, and ``trigger``/``refresh_now`` join the running fetch
instead of starting a second one.

Polling is suspended while the runtime profile disallows it (the host is in
the background and the preset does not enable background polling) and
resumes when a new profile allows it again.
"""

import asyncio
import logging
from typing import Dict, List, Optional

from .config.errors import ConfigurationError
from .polling_scheduler_helpers import (
    DelayPlanner,
    InFlightFetch,
    IntervalProvider,
    PollingSlot,
    PollingState,
    RefreshJob,
)
from .runtime_profile import DEFAULT_PROFILE, RuntimeProfile

logger = logging.getLogger(__name__)

DEFAULT_MIN_INTERVAL_SECONDS = 1.0
DEFAULT_SHUTDOWN_TIMEOUT_SECONDS = 5.0


class PollingScheduler:
    """Per-key timer state machine: Idle, Scheduled, Fetching, Suspended."""

    def __init__(
        self,
        refresh_job: RefreshJob,
        profile: RuntimeProfile = DEFAULT_PROFILE,
        *,
        min_interval_seconds: float = DEFAULT_MIN_INTERVAL_SECONDS,
    ):
        if min_interval_seconds <= 0:
            raise ConfigurationError.non_positive("min_interval_seconds", min_interval_seconds)
        self._refresh_job = refresh_job
        self._profile = profile
        self._min_interval_seconds = min_interval_seconds
        self._slots: Dict[str, PollingSlot] = {}
        self._in_flight: Dict[str, InFlightFetch] = {}

    @property
    def profile(self) -> RuntimeProfile:
        return self._profile

    def keys(self) -> List[str]:
        return sorted(self._slots)

    def state(self, key: str) -> PollingState:
        slot = self._slots.get(key)
        return slot.state if slot else PollingState.IDLE

    def is_fetching(self, key: str) -> bool:
        fetch = self._in_flight.get(key)
        return fetch is not None and fetch.active

    def interval_for(self, key: str) -> Optional[float]:
        """Effective interval in seconds for a registered key under the current profile."""
        slot = self._slots.get(key)
        return self._effective_interval(slot) if slot else None

    def start(self, key: str, interval_provider: IntervalProvider, *, fetch_immediately: bool = True) -> None:
        """Register ``key`` and begin polling it (Idle -> Scheduled, or Suspended)."""
        existing = self._slots.get(key)
        if existing is not None:
            existing.interval_provider = interval_provider
            logger.debug("Polling for %s already started; interval provider updated", key)
            return

        slot = PollingSlot(key=key, interval_provider=interval_provider)
        self._slots[key] = slot

        if not self._profile.allows_polling:
            slot.state = PollingState.SUSPENDED
            logger.info("Registered %s while polling is suspended (profile=%s)", key, self._profile.name)
            return

        if fetch_immediately:
            self._start_fetch(slot)
        else:
            self._arm_timer(slot, self._effective_interval(slot))
        logger.info("Started polling %s every %.0fs", key, self._effective_interval(slot))

    def stop(self, key: str) -> None:
        """
        Unregister ``key`` and cancel its timer.

        An in-flight refresh is asked to stop through its cancel event; the
        retry loop notices between attempts, so no partial write can follow.
        """
        slot = self._slots.pop(key, None)
        if slot is not None:
            self._cancel_timer(slot)
            slot.state = PollingState.IDLE
        fetch = self._in_flight.get(key)
        if fetch is not None:
            fetch.cancel_event.set()
        if slot is not None or fetch is not None:
            logger.info("Stopped polling %s", key)

    def set_profile(self, profile: RuntimeProfile) -> None:
        """Apply a new runtime profile, suspending or resuming every registered key."""
        previous = self._profile
        self._profile = profile
        logger.info(
            "Runtime profile %s -> %s (foreground=%s, low_power=%s, polling=%s)",
            previous.name,
            profile.name,
            profile.is_foreground,
            profile.is_low_power,
            profile.allows_polling,
        )
        for slot in list(self._slots.values()):
            if profile.allows_polling:
                self._resume(slot)
            else:
                self._suspend(slot)

    def trigger(self, key: str) -> Optional["asyncio.Task[None]"]:
        """
        Request a non-blocking refresh, joining one already in flight.

        Returns None without fetching while polling is suspended.
        """
        if not self._profile.allows_polling:
            logger.debug("Ignoring refresh trigger for %s while suspended", key)
            return None
        slot = self._slots.get(key)
        if slot is not None:
            return self._start_fetch(slot)
        return self._begin_fetch(key)

    async def refresh_now(self, key: str) -> None:
        """Fetch ``key`` immediately and wait for it, even while suspended."""
        slot = self._slots.get(key)
        task = self._start_fetch(slot) if slot is not None else self._begin_fetch(key)
        # Shielded so a cancelled caller does not cancel a fetch other callers joined
        await asyncio.shield(task)

    async def shutdown(self, timeout: float = DEFAULT_SHUTDOWN_TIMEOUT_SECONDS) -> None:
        """Stop every key and wait for in-flight refreshes to wind down."""
        for key in list(self._slots):
            self.stop(key)
        fetches = list(self._in_flight.values())
        for fetch in fetches:
            fetch.cancel_event.set()
        tasks = [task for fetch in fetches for task in (fetch.task, fetch.predecessor) if task and not task.done()]
        if not tasks:
            return
        _, pending = await asyncio.wait(tasks, timeout=timeout)
        for task in pending:
            task.cancel()
        if pending:
            logger.warning("Cancelled %d refresh task(s) that outlived shutdown", len(pending))
            await asyncio.gather(*pending, return_exceptions=True)

    def _effective_interval(self, slot: PollingSlot) -> float:
        interval = self._profile.effective_interval(slot.interval_provider(self._profile))
        return DelayPlanner.clamp_interval(interval, self._min_interval_seconds)

    def _start_fetch(self, slot: PollingSlot) -> "asyncio.Task[None]":
        self._cancel_timer(slot)
        slot.state = PollingState.FETCHING
        return self._begin_fetch(slot.key)

    def _begin_fetch(self, key: str) -> "asyncio.Task[None]":
        current = self._in_flight.get(key)
        if current is not None and current.active:
            logger.debug("Refresh for %s already in flight; joining it", key)
            return current.task

        # A cancelled fetch may still be inside its network call; queue behind it
        predecessor = current.task if current is not None and not current.task.done() else None
        cancel_event = asyncio.Event()
        task = asyncio.get_running_loop().create_task(self._run_fetch(key, cancel_event, predecessor))
        self._in_flight[key] = InFlightFetch(task=task, cancel_event=cancel_event, predecessor=predecessor)
        return task

    async def _run_fetch(
        self,
        key: str,
        cancel_event: asyncio.Event,
        predecessor: Optional["asyncio.Task[None]"] = None,
    ) -> None:
        try:
            if predecessor is not None:
                logger.debug("Waiting for cancelled refresh of %s to wind down", key)
                await asyncio.wait({predecessor})
            if not cancel_event.is_set():
                await self._refresh_job(key, cancel_event)
        except asyncio.CancelledError:
            raise
        except Exception:  # a crashing job must not kill the schedule
            logger.exception("Refresh job for %s raised", key)
        finally:
            current = self._in_flight.get(key)
            if current is not None and current.task is asyncio.current_task():
                del self._in_flight[key]
        self._after_fetch(key, cancel_event)

    def _after_fetch(self, key: str, cancel_event: asyncio.Event) -> None:
        slot = self._slots.get(key)
        if slot is None or cancel_event.is_set():
            return
        slot.last_completed_at = asyncio.get_running_loop().time()
        slot.completed_fetches += 1
        if not self._profile.allows_polling:
            slot.state = PollingState.SUSPENDED
            return
        self._arm_timer(slot, self._effective_interval(slot))

    def _arm_timer(self, slot: PollingSlot, delay: float) -> None:
        self._cancel_timer(slot)
        loop = asyncio.get_running_loop()
        slot.next_fire_at = loop.time() + delay
        slot.timer_task = loop.create_task(self._timer(slot, delay))
        slot.state = PollingState.SCHEDULED
        logger.debug("Next refresh of %s in %.1fs", slot.key, delay)

    async def _timer(self, slot: PollingSlot, delay: float) -> None:
        await asyncio.sleep(delay)
        if self._slots.get(slot.key) is not slot:
            return
        slot.timer_task = None
        slot.next_fire_at = None
        if self.is_fetching(slot.key):
            logger.debug("Timer for %s fired during a fetch; skipping", slot.key)
            return
        if not self._profile.allows_polling:
            slot.state = PollingState.SUSPENDED
            return
        self._start_fetch(slot)

    @staticmethod
    def _cancel_timer(slot: PollingSlot) -> None:
        timer = slot.timer_task
        slot.timer_task = None
        slot.next_fire_at = None
        if timer is not None and not timer.done() and timer is not asyncio.current_task():
            timer.cancel()

    def _suspend(self, slot: PollingSlot) -> None:
        self._cancel_timer(slot)
        if slot.state is not PollingState.FETCHING:
            slot.state = PollingState.SUSPENDED
            logger.debug("Suspended polling for %s", slot.key)

    def _resume(self, slot: PollingSlot) -> None:
        if slot.state is PollingState.FETCHING and self.is_fetching(slot.key):
            return
        if slot.state is PollingState.SCHEDULED and slot.last_completed_at is None:
            # never fetched yet; keep the initial timer
            return
        now = asyncio.get_running_loop().time()
        delay = DelayPlanner.remaining_delay(slot.last_completed_at, self._effective_interval(slot), now)
        if delay <= 0:
            self._start_fetch(slot)
        else:
            self._arm_timer(slot, delay)


__all__ = ["PollingScheduler", "PollingState"]
