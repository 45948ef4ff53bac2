from __future__ import annotations

import asyncio
from fnmatch import fnmatchcase

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from inspira.services.cache import (
    InMemoryCacheService,
    RedisCacheService,
    course_progress_pattern,
    invalidating,
    progress_key,
)
from inspira.services.errors import PersistenceError


def test_in_memory_set_get_delete() -> None:
    cache = InMemoryCacheService()
    asyncio.run(cache.set("k", "v", 60))
    assert asyncio.run(cache.get("k")) == "v"
    asyncio.run(cache.delete("k"))
    assert asyncio.run(cache.get("k")) is None


def test_course_pattern_only_hits_that_course() -> None:
    cache = InMemoryCacheService()
    asyncio.run(cache.set(progress_key("user-2", "course-1"), "a", 60))
    asyncio.run(cache.set(progress_key("user-3", "course-1"), "b", 60))
    asyncio.run(cache.set(progress_key("user-2", "course-2"), "c", 60))

    asyncio.run(cache.delete_pattern(course_progress_pattern("course-1")))

    assert asyncio.run(cache.get(progress_key("user-2", "course-1"))) is None
    assert asyncio.run(cache.get(progress_key("user-3", "course-1"))) is None
    assert asyncio.run(cache.get(progress_key("user-2", "course-2"))) == "c"


class _DownRedis:
    async def get(self, *_a, **_k):
        raise RedisConnectionError("down")

    async def setex(self, *_a, **_k):
        raise RedisConnectionError("down")

    async def delete(self, *_a, **_k):
        raise RedisConnectionError("down")

    async def scan_iter(self, *_a, **_k):
        raise RedisConnectionError("down")
        yield


def test_redis_read_failure_is_a_miss() -> None:
    cache = RedisCacheService(_DownRedis())
    assert asyncio.run(cache.get("k")) is None
    asyncio.run(cache.set("k", "v", 60))  # swallowed with a warning


def test_redis_invalidation_failure_surfaces() -> None:
    cache = RedisCacheService(_DownRedis())
    with pytest.raises(PersistenceError):
        asyncio.run(cache.delete("k"))
    with pytest.raises(PersistenceError):
        asyncio.run(cache.delete_pattern("progress:*"))


def test_in_memory_entries_expire() -> None:
    now = [100.0]
    cache = InMemoryCacheService(clock=lambda: now[0])
    asyncio.run(cache.set("k", "v", 30))
    now[0] = 129.0
    assert asyncio.run(cache.get("k")) == "v"
    now[0] = 130.0
    assert asyncio.run(cache.get("k")) is None


class _FakeRedis:
    def __init__(self, keys: list[str]) -> None:
        self.keys = set(keys)

    async def scan_iter(self, match: str, count: int):
        for key in sorted(self.keys):
            if fnmatchcase(key, match):
                yield key

    async def delete(self, *keys: str) -> None:
        self.keys.difference_update(keys)


def test_redis_pattern_delete_is_namespaced() -> None:
    fake = _FakeRedis(
        [
            "cache:progress:user-2:course-1",
            "cache:progress:user-3:course-1",
            "cache:progress:user-2:course-2",
            "progress:user-2:course-1",
        ]
    )
    asyncio.run(RedisCacheService(fake).delete_pattern(course_progress_pattern("course-1")))
    assert fake.keys == {"cache:progress:user-2:course-2", "progress:user-2:course-1"}


class _FlakyCache(InMemoryCacheService):
    """Deletes succeed ``healthy_deletes`` times, then the cache goes down."""

    def __init__(self, healthy_deletes: int) -> None:
        super().__init__()
        self.healthy_deletes = healthy_deletes

    async def delete(self, key: str) -> None:
        if self.healthy_deletes == 0:
            raise PersistenceError(f"cache invalidation failed for {key}")
        self.healthy_deletes -= 1
        await super().delete(key)


def test_invalidating_refuses_the_write_when_cache_is_down() -> None:
    writes: list[str] = []

    async def _run():
        async with invalidating(_FlakyCache(healthy_deletes=0), "k"):
            writes.append("toggle")

    with pytest.raises(PersistenceError):
        asyncio.run(_run())
    assert writes == []


def test_invalidating_keeps_an_applied_write_when_cache_drops_midway() -> None:
    cache = _FlakyCache(healthy_deletes=1)
    writes: list[str] = []

    async def _run():
        await cache.set("k", "stale", 60)
        async with invalidating(cache, "k"):
            writes.append("toggle")

    asyncio.run(_run())  # post-write failure is logged, not raised
    assert writes == ["toggle"]
    assert asyncio.run(cache.get("k")) is None
