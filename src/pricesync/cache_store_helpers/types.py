"""Cache entry types and the freshness state machine."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, Optional, TypeVar

T = TypeVar("T")


class CacheState(Enum):
    FRESH = "fresh"
    STALE = "stale"
    EXPIRED = "expired"

    @property
    def servable(self) -> bool:
        return self is not CacheState.EXPIRED


class CacheSource(Enum):
    """Where a looked-up value came from."""

    MEMORY = "memory"
    BACKUP = "backup"


def derive_state(now: float, stale_at: float, expires_at: float) -> CacheState:
    """Fresh before ``stale_at``, stale until ``expires_at``, expired from then on."""
    if now < stale_at:
        return CacheState.FRESH
    if now < expires_at:
        return CacheState.STALE
    return CacheState.EXPIRED


@dataclass(frozen=True)
class StoredValue(Generic[T]):
    """Committed slot contents; timestamps are epoch seconds."""

    value: T
    fetched_at: float
    stale_at: float
    expires_at: float
    sequence: int


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    """Snapshot of a cache slot with its state evaluated at read time."""

    key: str
    value: T
    fetched_at: float
    stale_at: float
    expires_at: float
    state: CacheState
    sequence: int = 0

    @classmethod
    def from_stored(cls, key: str, stored: StoredValue[T], now: float) -> "CacheEntry[T]":
        return cls(
            key=key,
            value=stored.value,
            fetched_at=stored.fetched_at,
            stale_at=stored.stale_at,
            expires_at=stored.expires_at,
            state=derive_state(now, stored.stale_at, stored.expires_at),
            sequence=stored.sequence,
        )


@dataclass(frozen=True)
class CacheLookup:
    """Result of a read that may fall back to the durable backup."""

    value: Any
    state: CacheState
    source: CacheSource
    fetched_at: Optional[float] = None

    @property
    def from_backup(self) -> bool:
        return self.source is CacheSource.BACKUP


__all__ = [
    "CacheEntry",
    "CacheLookup",
    "CacheSource",
    "CacheState",
    "StoredValue",
    "derive_state",
]
