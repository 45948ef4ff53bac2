"""Read-through cache for per-learner progress summaries.

    GET summary  -> cache hit  -> return
                 -> cache miss -> compute from repos -> store (TTL) -> return
    toggle / quiz submission   -> delete the learner's entry
    lesson or module removed   -> delete every learner's entry for the course

Keys are ``progress:{student_id}:{course_id}``.  The TTL bounds the damage
of a missed invalidation; explicit deletes keep the normal case exact.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from fnmatch import fnmatchcase
from typing import Protocol, runtime_checkable

from redis.exceptions import RedisError

from inspira.db.redis import redis_pool
from inspira.services.errors import PersistenceError

logger = logging.getLogger(__name__)


@runtime_checkable
class CacheService(Protocol):
    """String cache keyed by plain names; glob patterns for bulk deletes."""

    async def get(self, key: str) -> str | None: ...
    async def set(self, key: str, value: str, ttl_seconds: int) -> None: ...
    async def delete(self, key: str) -> None: ...
    async def delete_pattern(self, pattern: str) -> None: ...


class InMemoryCacheService:
    """Single-process cache; expired entries are dropped on read."""

    def __init__(self, clock=time.monotonic) -> None:
        self._clock = clock
        self._store: dict[str, tuple[float, str]] = {}

    async def get(self, key: str) -> str | None:
        entry = self._store.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if self._clock() >= expires_at:
            del self._store[key]
            return None
        return value

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        self._store[key] = (self._clock() + ttl_seconds, value)

    async def delete(self, key: str) -> None:
        self._store.pop(key, None)

    async def delete_pattern(self, pattern: str) -> None:
        for key in [k for k in self._store if fnmatchcase(k, pattern)]:
            del self._store[key]


class RedisCacheService:
    """Cache shared by every API replica.

    A failed read or write is a miss: the summary is recomputed from the
    repositories.  A failed delete raises PersistenceError, since the
    stale entry would otherwise be served until its TTL ran out.
    """

    _NAMESPACE = "cache:"
    _DELETE_BATCH = 100

    def __init__(self, redis_client) -> None:
        self._redis = redis_client

    def _key(self, key: str) -> str:
        return self._NAMESPACE + key

    async def get(self, key: str) -> str | None:
        try:
            return await self._redis.get(self._key(key))
        except RedisError:
            logger.warning("Cache read failed  key=%s", key, exc_info=True)
            return None

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        try:
            await self._redis.setex(self._key(key), ttl_seconds, value)
        except RedisError:
            logger.warning("Cache write failed  key=%s", key, exc_info=True)

    async def delete(self, key: str) -> None:
        try:
            await self._redis.delete(self._key(key))
        except RedisError as e:
            raise PersistenceError(f"cache invalidation failed for {key}") from e

    async def delete_pattern(self, pattern: str) -> None:
        # SCAN walks the keyspace in slices; KEYS would block the server.
        batch: list[str] = []
        try:
            async for key in self._redis.scan_iter(
                match=self._key(pattern), count=self._DELETE_BATCH
            ):
                batch.append(key)
                if len(batch) >= self._DELETE_BATCH:
                    await self._redis.delete(*batch)
                    batch.clear()
            if batch:
                await self._redis.delete(*batch)
        except RedisError as e:
            raise PersistenceError(f"cache invalidation failed for {pattern}") from e


def progress_key(student_id: str, course_id: str) -> str:
    return f"progress:{student_id}:{course_id}"


def course_progress_pattern(course_id: str) -> str:
    return progress_key("*", course_id)


cache_service: CacheService = (
    RedisCacheService(redis_pool) if redis_pool is not None else InMemoryCacheService()
)


@asynccontextmanager
async def invalidating(
    cache: CacheService, key: str, *, pattern: bool = False
) -> AsyncIterator[None]:
    """Drop cached entries on both sides of a write.

    The first delete runs before the write: if the cache is unreachable it
    raises PersistenceError and the write never happens.  The second runs
    after the write has been applied, so a failure there is only logged;
    the entry that may have been refilled meanwhile expires with its TTL.
    """
    drop = cache.delete_pattern if pattern else cache.delete
    await drop(key)
    yield
    try:
        await drop(key)
    except PersistenceError:
        logger.warning("Post-write invalidation failed  key=%s", key, exc_info=True)
