"""Operational endpoints: liveness, readiness and the Prometheus scrape.

  /health (liveness):  "is the process alive?"  Always 200; the body's
                       ``status`` says whether a dependency is degraded.
  /ready (readiness):  "can this instance serve traffic?"  503 while the
                       database is configured but unreachable.  Redis is
                       not critical: the cache degrades to misses.
  /metrics:            text exposition format for Prometheus; hidden from
                       the OpenAPI schema.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Response, status
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from inspira.db import engine as db_engine
from inspira.db.redis import redis_pool

logger = logging.getLogger(__name__)

router = APIRouter(tags=["observability"])


async def _check_redis() -> str:
    if redis_pool is None:
        return "not_configured"
    try:
        await redis_pool.ping()  # type: ignore[misc]
    except RedisError:
        logger.warning("Health check: redis unreachable", exc_info=True)
        return "degraded"
    return "ok"


async def _check_database() -> str:
    if db_engine.engine is None:
        return "not_configured"
    try:
        async with db_engine.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError):
        logger.warning("Health check: database unreachable", exc_info=True)
        return "degraded"
    return "ok"


@router.get("/health")
async def health() -> dict:
    checks = {
        "redis": await _check_redis(),
        "database": await _check_database(),
    }
    overall = "degraded" if "degraded" in checks.values() else "ok"
    return {"status": overall, "checks": checks}


@router.get("/ready")
async def ready() -> Response:
    if await _check_database() == "degraded":
        return Response(status_code=status.HTTP_503_SERVICE_UNAVAILABLE)
    return Response(status_code=status.HTTP_200_OK)


@router.get("/metrics", include_in_schema=False)
async def metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
