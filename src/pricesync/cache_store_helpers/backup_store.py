"""
Durable backup stores for last known-good cache values.

The backup is a plain key/value store consulted only when the in-memory entry
is missing or expired. Implementations raise ``BackupStoreError`` on failure;
``CacheStore`` logs those and carries on.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Awaitable, Dict, Optional, Protocol, Tuple, TypeVar, Union, cast

from redis import asyncio as redis_asyncio
from redis.exceptions import RedisError

from ..exceptions import BackupStoreError

if TYPE_CHECKING:
    from redis.asyncio import Redis

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_KEY_PREFIX = "pricesync:backup:"
DEFAULT_TTL_SECONDS = 7 * 24 * 60 * 60

REDIS_ERRORS = (RedisError, ConnectionError, TimeoutError, asyncio.TimeoutError)


def _awaitable(result: "Awaitable[T] | T") -> Awaitable[T]:
    # redis-py annotates commands as sync/async unions; the asyncio client always returns awaitables
    return cast(Awaitable[T], result)


class BackupStore(Protocol):
    async def get(self, key: str) -> Optional[bytes]: ...

    async def set(self, key: str, payload: bytes) -> None: ...

    async def close(self) -> None: ...


class InMemoryBackupStore:
    """Process-local backup, used when no Redis URL is configured and in tests."""

    def __init__(self) -> None:
        self._data: Dict[str, bytes] = {}
        self.write_count = 0

    async def get(self, key: str) -> Optional[bytes]:
        return self._data.get(key)

    async def set(self, key: str, payload: bytes) -> None:
        self._data[key] = payload
        self.write_count += 1

    async def close(self) -> None:
        return None

    def keys(self) -> Tuple[str, ...]:
        return tuple(sorted(self._data))


class RedisBackupStore:
    """Backup snapshots stored as Redis strings with a TTL."""

    def __init__(
        self,
        redis_client: "Redis",
        *,
        key_prefix: str = DEFAULT_KEY_PREFIX,
        ttl_seconds: Optional[int] = DEFAULT_TTL_SECONDS,
        owns_client: bool = False,
    ) -> None:
        self._redis = redis_client
        self._key_prefix = key_prefix
        self._ttl_seconds = ttl_seconds
        self._owns_client = owns_client

    @classmethod
    def from_url(
        cls,
        url: str,
        *,
        key_prefix: str = DEFAULT_KEY_PREFIX,
        ttl_seconds: Optional[int] = DEFAULT_TTL_SECONDS,
    ) -> "RedisBackupStore":
        client = redis_asyncio.Redis.from_url(url)
        logger.info("Using Redis backup store at %s (prefix=%s)", url, key_prefix)
        return cls(client, key_prefix=key_prefix, ttl_seconds=ttl_seconds, owns_client=True)

    def _redis_key(self, key: str) -> str:
        return f"{self._key_prefix}{key}"

    async def get(self, key: str) -> Optional[bytes]:
        redis_key = self._redis_key(key)
        try:
            raw: Union[bytes, str, None] = await _awaitable(self._redis.get(redis_key))
        except REDIS_ERRORS as exc:
            raise BackupStoreError(f"Failed to read backup {redis_key}", key=redis_key) from exc
        if raw is None:
            return None
        return raw.encode("utf-8") if isinstance(raw, str) else raw

    async def set(self, key: str, payload: bytes) -> None:
        redis_key = self._redis_key(key)
        try:
            await _awaitable(self._redis.set(redis_key, payload, ex=self._ttl_seconds))
        except REDIS_ERRORS as exc:
            raise BackupStoreError(f"Failed to write backup {redis_key}", key=redis_key) from exc

    async def close(self) -> None:
        if not self._owns_client:
            return
        try:
            await self._redis.aclose()
        except REDIS_ERRORS as exc:
            logger.warning("Error closing Redis backup client: %s", exc)


__all__ = [
    "BackupStore",
    "DEFAULT_KEY_PREFIX",
    "DEFAULT_TTL_SECONDS",
    "InMemoryBackupStore",
    "RedisBackupStore",
]
