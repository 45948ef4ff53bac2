"""Optional Redis client for the progress cache.

``redis_pool`` is a pooled async client when REDIS_URL is set and None
otherwise.  Redis holds nothing but cached summaries, so an unreachable
server at startup is logged and the API starts anyway.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from inspira.core.config import SETTINGS

logger = logging.getLogger(__name__)

redis_pool: aioredis.Redis | None = (
    aioredis.from_url(SETTINGS.redis_url, decode_responses=True, max_connections=20)
    if SETTINGS.redis_url
    else None
)


@asynccontextmanager
async def lifespan_redis() -> AsyncIterator[None]:
    if redis_pool is None:
        logger.info("Redis not configured; progress cache is in-process")
        yield
        return

    try:
        await redis_pool.ping()  # type: ignore[misc]
    except RedisError:
        logger.exception("Redis unreachable at startup; cache will miss until it returns")
    else:
        logger.info("Redis ready")

    try:
        yield
    finally:
        await redis_pool.aclose()
        logger.info("Redis pool closed")
