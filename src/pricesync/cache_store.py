"""
Freshness-aware cache for price data.

``CacheStore`` exclusively owns cache entries. Each key holds the last
committed value together with its fetch time and the instants at which it
turns stale and expires; the entry state is derived from the clock on every
read, so it never has to be updated in place.

Writes are ordered by fetch-start sequence numbers: a refresh calls
``begin_fetch`` before going to the network and ``commit`` with the returned
sequence afterwards. A completion whose sequence is older than the committed
one is discarded, so a slow fetch can never overwrite a newer value.

Every committed value is also mirrored to an optional durable backup. Those
writes run as background tasks and their failures are only logged; the
in-memory write has already succeeded by the time they start.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Callable, Dict, Optional, Tuple

from .async_helpers import BackgroundTaskSet
from .cache_store_helpers import (
    BackupStore,
    CacheEntry,
    CacheLookup,
    CacheSource,
    CacheState,
    StoredValue,
    decode_snapshot,
    encode_snapshot,
)
from .config.errors import ConfigurationError
from .exceptions import BackupStoreError, DataError

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


def _validate_durations(stale_after_ms: float, expire_after_ms: float) -> None:
    if stale_after_ms < 0:
        raise ConfigurationError.invalid_value("stale_after_ms", stale_after_ms, "Must be non-negative")
    if expire_after_ms < stale_after_ms:
        raise ConfigurationError.invalid_value("expire_after_ms", expire_after_ms, "Must not be below stale_after_ms")


class CacheStore:
    """Per-key cache entries with a Fresh/Stale/Expired lifecycle and a durable fallback."""

    def __init__(self, backup_store: Optional[BackupStore] = None, *, clock: Clock = time.time):
        self._backup_store = backup_store
        self._clock = clock
        self._slots: Dict[str, StoredValue[Any]] = {}
        self._issued_sequences: Dict[str, int] = {}
        self._backup_tasks = BackgroundTaskSet("cache-backup", (BackupStoreError, DataError))

    @property
    def backup_store(self) -> Optional[BackupStore]:
        return self._backup_store

    def keys(self) -> Tuple[str, ...]:
        return tuple(sorted(self._slots))

    def get(self, key: str) -> Optional[CacheEntry[Any]]:
        stored = self._slots.get(key)
        if stored is None:
            return None
        return CacheEntry.from_stored(key, stored, self._clock())

    def state(self, key: str) -> Optional[CacheState]:
        entry = self.get(key)
        return entry.state if entry else None

    def begin_fetch(self, key: str) -> int:
        """Reserve the next write sequence for ``key``; call before the fetch starts."""
        sequence = self._issued_sequences.get(key, 0) + 1
        self._issued_sequences[key] = sequence
        return sequence

    def put(self, key: str, value: Any, stale_after_ms: float, expire_after_ms: float) -> CacheEntry[Any]:
        """Unconditionally store ``value``; the entry is Fresh relative to the given durations."""
        sequence = self.begin_fetch(key)
        self.commit(key, value, stale_after_ms, expire_after_ms, sequence)
        entry = self.get(key)
        assert entry is not None
        return entry

    def commit(
        self,
        key: str,
        value: Any,
        stale_after_ms: float,
        expire_after_ms: float,
        sequence: int,
    ) -> bool:
        """
        Store the result of a fetch that started with ``sequence``.

        Returns False, leaving the current value untouched, when a fetch that
        started later has already committed.
        """
        _validate_durations(stale_after_ms, expire_after_ms)

        current = self._slots.get(key)
        if current is not None and sequence < current.sequence:
            logger.warning(
                "Discarding stale completion for %s (sequence %d < committed %d)",
                key,
                sequence,
                current.sequence,
            )
            return False

        now = self._clock()
        self._slots[key] = StoredValue(
            value=value,
            fetched_at=now,
            stale_at=now + stale_after_ms / 1000.0,
            expires_at=now + expire_after_ms / 1000.0,
            sequence=sequence,
        )
        if self._issued_sequences.get(key, 0) < sequence:
            self._issued_sequences[key] = sequence
        logger.debug("Committed %s (sequence %d, stale in %.0fms)", key, sequence, stale_after_ms)
        self._schedule_backup_write(key, value, now, sequence)
        return True

    def invalidate(self, key: str) -> None:
        """Drop the in-memory entry; the durable backup keeps its snapshot."""
        self._slots.pop(key, None)

    async def get_or_backup(self, key: str) -> Optional[Any]:
        lookup = await self.lookup(key)
        return lookup.value if lookup else None

    async def lookup(self, key: str) -> Optional[CacheLookup]:
        """
        Serve a Fresh or Stale in-memory value, else the last backed-up value.

        Values restored from the backup are reported as Stale with their
        original fetch time. Returns None only when neither source has a value.
        """
        entry = self.get(key)
        if entry is not None and entry.state.servable:
            return CacheLookup(entry.value, entry.state, CacheSource.MEMORY, entry.fetched_at)

        if self._backup_store is None:
            return None

        try:
            raw = await self._backup_store.get(key)
        except BackupStoreError as exc:
            logger.warning("Backup read failed for %s: %s", key, exc)
            return None
        if raw is None:
            return None

        try:
            snapshot = decode_snapshot(raw)
        except DataError as exc:
            logger.warning("Ignoring unreadable backup for %s: %s", key, exc)
            return None

        logger.info("Serving %s from durable backup (fetched at %.0f)", key, snapshot.fetched_at)
        return CacheLookup(snapshot.value, CacheState.STALE, CacheSource.BACKUP, snapshot.fetched_at)

    async def flush_backups(self, timeout: Optional[float] = None) -> None:
        """Wait for pending backup writes."""
        await self._backup_tasks.drain(timeout)

    async def close(self) -> None:
        await self.flush_backups()
        if self._backup_store is not None:
            await self._backup_store.close()

    def _schedule_backup_write(self, key: str, value: Any, fetched_at: float, sequence: int) -> None:
        if self._backup_store is None:
            return
        try:
            payload = encode_snapshot(value, fetched_at)
        except DataError as exc:
            logger.debug("Not backing up %s: %s", key, exc)
            return
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop; skipping backup write for %s", key)
            return
        self._backup_tasks.schedule(
            lambda: self._write_backup(key, payload, sequence),
            description=f"backup write for {key}",
        )

    async def _write_backup(self, key: str, payload: bytes, sequence: int) -> None:
        current = self._slots.get(key)
        if current is not None and current.sequence > sequence:
            logger.debug("Skipping superseded backup write for %s", key)
            return
        assert self._backup_store is not None
        await self._backup_store.set(key, payload)


__all__ = ["CacheEntry", "CacheLookup", "CacheSource", "CacheState", "CacheStore"]
