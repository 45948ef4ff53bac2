"""ASGI entry point: ``uvicorn inspira.main:app``."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import AsyncExitStack, asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from inspira.api import (
    access_codes,
    auth,
    catalog_admin,
    coupons,
    courses,
    health,
    notes,
    progress,
    students,
)
from inspira.core.config import SETTINGS
from inspira.core.logging import setup_logging
from inspira.db import engine as db_engine
from inspira.db.engine import lifespan_db
from inspira.db.redis import lifespan_redis
from inspira.middleware.metrics import MetricsMiddleware
from inspira.middleware.request_context import RequestContextMiddleware
from inspira.repos.registry import in_memory_repos
from inspira.repos.seed import seed_sample_data
from inspira.services.checkout import log_certificate_due
from inspira.services.completion import completion_trigger

setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)

logger = logging.getLogger(__name__)

FRONTEND_ORIGINS = ["http://localhost:5173"]


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    async with AsyncExitStack() as stack:
        await stack.enter_async_context(lifespan_db())
        await stack.enter_async_context(lifespan_redis())
        completion_trigger.subscribe(log_certificate_due)
        stack.callback(completion_trigger.unsubscribe, log_certificate_due)
        # Without a database there is nothing to browse; load the demo catalog.
        if db_engine.async_session_factory is None and not SETTINGS.is_prod:
            await seed_sample_data(in_memory_repos)
            logger.info("Sample data loaded into in-memory repositories")
        yield


app = FastAPI(
    title="inspira-courses",
    lifespan=lifespan,
    docs_url="/docs" if SETTINGS.is_dev else None,
    redoc_url=None,
)

# Added last = outermost: the request ID is bound before metrics and CORS run.
app.add_middleware(
    CORSMiddleware,
    allow_origins=FRONTEND_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestContextMiddleware)

for module in (
    health,
    auth,
    courses,
    progress,
    coupons,
    catalog_admin,
    students,
    access_codes,
    notes,
):
    app.include_router(module.router)

logger.info(
    "inspira-courses configured  env=%s port=%d database=%s redis=%s",
    SETTINGS.app_env,
    SETTINGS.port,
    "postgres" if SETTINGS.database_url else "memory",
    "on" if SETTINGS.redis_url else "off",
)
