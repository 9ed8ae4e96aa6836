import pytest

from pricesync.cache_store import CacheStore
from pricesync.cache_store_helpers import CacheSource, CacheState, InMemoryBackupStore, derive_state
from pricesync.config.errors import ConfigurationError


def test_derive_state_boundaries():
    assert derive_state(9.999, 10.0, 20.0) is CacheState.FRESH
    assert derive_state(10.0, 10.0, 20.0) is CacheState.STALE
    assert derive_state(19.999, 10.0, 20.0) is CacheState.STALE
    assert derive_state(20.0, 10.0, 20.0) is CacheState.EXPIRED


def test_entry_transitions_exactly_at_thresholds(clock):
    cache = CacheStore(clock=clock)
    cache.put("k", ["v"], stale_after_ms=1_000, expire_after_ms=5_000)

    assert cache.state("k") is CacheState.FRESH
    clock.advance(0.75)
    assert cache.state("k") is CacheState.FRESH
    clock.advance(0.25)
    assert cache.state("k") is CacheState.STALE
    clock.advance(3.75)
    assert cache.state("k") is CacheState.STALE
    clock.advance(0.25)
    assert cache.state("k") is CacheState.EXPIRED


def test_zero_stale_duration_is_immediately_stale(clock):
    cache = CacheStore(clock=clock)
    entry = cache.put("k", "v", stale_after_ms=0, expire_after_ms=10)

    assert entry.state is CacheState.STALE


def test_invalid_durations_rejected(clock):
    cache = CacheStore(clock=clock)
    with pytest.raises(ConfigurationError):
        cache.put("k", "v", stale_after_ms=-1, expire_after_ms=10)
    with pytest.raises(ConfigurationError):
        cache.put("k", "v", stale_after_ms=10, expire_after_ms=5)
    assert cache.get("k") is None


def test_older_sequence_completion_is_discarded(clock, caplog):
    cache = CacheStore(clock=clock)
    slow = cache.begin_fetch("k")
    fast = cache.begin_fetch("k")

    assert cache.commit("k", "newer", 1_000, 2_000, fast)
    assert not cache.commit("k", "older", 1_000, 2_000, slow)

    entry = cache.get("k")
    assert entry.value == "newer"
    assert entry.sequence == fast
    assert "Discarding stale completion" in caplog.text


def test_commit_in_sequence_order_keeps_last(clock):
    cache = CacheStore(clock=clock)
    first = cache.begin_fetch("k")
    second = cache.begin_fetch("k")

    assert cache.commit("k", "first", 1_000, 2_000, first)
    assert cache.commit("k", "second", 1_000, 2_000, second)
    assert cache.get("k").value == "second"


def test_put_after_commit_is_accepted(clock):
    cache = CacheStore(clock=clock)
    cache.commit("k", "fetched", 1_000, 2_000, cache.begin_fetch("k"))

    entry = cache.put("k", "manual", 1_000, 2_000)

    assert entry.value == "manual"
    assert entry.sequence == 2


def test_invalidate_removes_memory_entry(clock):
    cache = CacheStore(clock=clock)
    cache.put("k", "v", 1_000, 2_000)
    cache.invalidate("k")
    cache.invalidate("missing")

    assert cache.get("k") is None
    assert cache.keys() == ()


@pytest.mark.asyncio
async def test_lookup_serves_fresh_and_stale_from_memory(clock, point_factory):
    cache = CacheStore(clock=clock)
    value = [point_factory("2024-01-01", 100)]
    cache.put("k", value, 1_000, 2_000)

    fresh = await cache.lookup("k")
    clock.advance(1.5)
    stale = await cache.lookup("k")

    assert fresh.state is CacheState.FRESH
    assert fresh.source is CacheSource.MEMORY
    assert stale.state is CacheState.STALE
    assert stale.value == value


@pytest.mark.asyncio
async def test_expired_entry_falls_back_to_backup_as_stale(clock, point_factory):
    backup = InMemoryBackupStore()
    cache = CacheStore(backup, clock=clock)
    value = [point_factory("2024-01-01", 100), point_factory("2024-01-02", 101)]
    fetched_at = clock.now
    cache.put("k", value, 1_000, 2_000)
    await cache.flush_backups()
    clock.advance(10)

    assert cache.state("k") is CacheState.EXPIRED
    lookup = await cache.lookup("k")

    assert lookup.source is CacheSource.BACKUP
    assert lookup.from_backup
    assert lookup.state is CacheState.STALE
    assert lookup.value == value
    assert lookup.fetched_at == fetched_at


@pytest.mark.asyncio
async def test_backup_survives_new_cache_instance(clock, point_factory):
    backup = InMemoryBackupStore()
    first = CacheStore(backup, clock=clock)
    value = [point_factory("2024-01-01", 100)]
    first.put("k", value, 1_000, 2_000)
    await first.flush_backups()

    restarted = CacheStore(backup, clock=clock)

    assert await restarted.get_or_backup("k") == value


@pytest.mark.asyncio
async def test_lookup_without_any_value_returns_none(clock):
    cache = CacheStore(InMemoryBackupStore(), clock=clock)

    assert await cache.lookup("missing") is None
    assert await cache.get_or_backup("missing") is None


@pytest.mark.asyncio
async def test_unserialisable_values_are_not_backed_up(clock):
    backup = InMemoryBackupStore()
    cache = CacheStore(backup, clock=clock)
    cache.put("k", {"raw": 1}, 1_000, 2_000)
    await cache.flush_backups()

    assert backup.write_count == 0


@pytest.mark.asyncio
async def test_unreadable_backup_is_ignored(clock, caplog):
    backup = InMemoryBackupStore()
    await backup.set("k", b"not json")
    cache = CacheStore(backup, clock=clock)

    assert await cache.lookup("k") is None
    assert "Ignoring unreadable backup" in caplog.text


@pytest.mark.asyncio
async def test_superseded_backup_write_is_skipped(clock, point_factory):
    backup = InMemoryBackupStore()
    cache = CacheStore(backup, clock=clock)
    cache.put("k", [point_factory("2024-01-01", 100)], 1_000, 2_000)
    newest = [point_factory("2024-01-02", 200)]
    cache.put("k", newest, 1_000, 2_000)
    await cache.flush_backups()

    assert backup.write_count == 1
    restored = CacheStore(backup, clock=clock)
    assert await restored.get_or_backup("k") == newest


def test_commit_without_event_loop_skips_backup(clock, point_factory):
    backup = InMemoryBackupStore()
    cache = CacheStore(backup, clock=clock)

    cache.put("k", [point_factory("2024-01-01", 100)], 1_000, 2_000)

    assert backup.write_count == 0
    assert cache.get("k") is not None
