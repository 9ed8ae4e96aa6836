"""Helper modules for the cache store."""

from .backup_store import BackupStore, InMemoryBackupStore, RedisBackupStore
from .snapshot_codec import Snapshot, decode_snapshot, encode_snapshot
from .types import CacheEntry, CacheLookup, CacheSource, CacheState, StoredValue, derive_state

__all__ = [
    "BackupStore",
    "CacheEntry",
    "CacheLookup",
    "CacheSource",
    "CacheState",
    "InMemoryBackupStore",
    "RedisBackupStore",
    "Snapshot",
    "StoredValue",
    "decode_snapshot",
    "derive_state",
    "encode_snapshot",
]
