import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from pricesync.cache_store import CacheStore
from pricesync.cache_store_helpers import RedisBackupStore, decode_snapshot
from pricesync.exceptions import BackupStoreError


@pytest.mark.asyncio
async def test_redis_backup_store_prefixes_keys_and_sets_ttl(fake_redis):
    store = RedisBackupStore(fake_redis, key_prefix="test:", ttl_seconds=60)

    await store.set("lme:latest:prices:CU", b"payload")

    assert fake_redis.dump_string("test:lme:latest:prices:CU") == b"payload"
    assert fake_redis.ttls["test:lme:latest:prices:CU"] == 60
    assert await store.get("lme:latest:prices:CU") == b"payload"
    assert await store.get("missing") is None


@pytest.mark.asyncio
async def test_redis_backup_store_encodes_string_replies(fake_redis):
    store = RedisBackupStore(fake_redis, key_prefix="")
    fake_redis._data["k"] = "text"

    assert await store.get("k") == b"text"


@pytest.mark.asyncio
async def test_redis_errors_are_wrapped(fake_redis):
    store = RedisBackupStore(fake_redis)
    fake_redis.fail_with = RedisConnectionError("down")

    with pytest.raises(BackupStoreError):
        await store.get("k")
    with pytest.raises(BackupStoreError):
        await store.set("k", b"v")


@pytest.mark.asyncio
async def test_close_only_closes_owned_clients(fake_redis):
    await RedisBackupStore(fake_redis).close()
    assert not fake_redis.closed

    await RedisBackupStore(fake_redis, owns_client=True).close()
    assert fake_redis.closed


@pytest.mark.asyncio
async def test_cache_mirrors_commits_to_redis(fake_redis, clock, point_factory):
    cache = CacheStore(RedisBackupStore(fake_redis, key_prefix="bk:"), clock=clock)
    value = [point_factory("2024-01-01", 100)]

    cache.put("lme:metal:CU:history:30", value, 1_000, 2_000)
    await cache.flush_backups()

    snapshot = decode_snapshot(fake_redis.dump_string("bk:lme:metal:CU:history:30"))
    assert snapshot.value == value
    assert snapshot.fetched_at == clock.now


@pytest.mark.asyncio
async def test_backup_failures_do_not_affect_memory_cache(fake_redis, clock, point_factory, caplog):
    fake_redis.fail_with = RedisConnectionError("down")
    cache = CacheStore(RedisBackupStore(fake_redis), clock=clock)
    value = [point_factory("2024-01-01", 100)]

    cache.put("k", value, 1_000, 2_000)
    await cache.flush_backups()

    assert cache.get("k").value == value
    assert "backup write for k failed" in caplog.text

    clock.advance(10)
    assert await cache.lookup("k") is None
    assert "Backup read failed" in caplog.text
