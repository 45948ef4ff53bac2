"""Postgres access through SQLAlchemy's async API (asyncpg driver).

With DATABASE_URL unset, ``engine`` and ``async_session_factory`` stay
None and requests are served from the in-memory repositories.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Iterator
from contextlib import asynccontextmanager, contextmanager

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from inspira.core.config import SETTINGS
from inspira.services.errors import ConflictError, PersistenceError

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


engine: AsyncEngine | None = None
async_session_factory: async_sessionmaker[AsyncSession] | None = None

if SETTINGS.database_url:
    engine = create_async_engine(
        SETTINGS.database_url,
        echo=SETTINGS.is_dev,
        pool_size=5,
        max_overflow=10,
        pool_pre_ping=True,
    )
    async_session_factory = async_sessionmaker(engine, expire_on_commit=False)


@contextmanager
def translate_db_errors(operation: str) -> Iterator[None]:
    """Turn driver exceptions into domain errors.

    A violated unique or primary key is a ConflictError (409); any other
    database failure is a PersistenceError (503).
    """
    try:
        yield
    except IntegrityError as e:
        logger.warning("Constraint violated  operation=%s detail=%s", operation, e.orig)
        raise ConflictError(f"{operation}: conflicting record") from e
    except SQLAlchemyError as e:
        logger.error("Database failure  operation=%s", operation, exc_info=True)
        raise PersistenceError(f"{operation}: database unavailable") from e


@asynccontextmanager
async def lifespan_db() -> AsyncIterator[None]:
    if engine is None:
        logger.info("Database not configured; serving from in-memory repositories")
        yield
        return

    logger.info(
        "Database engine ready  url=%s", engine.url.render_as_string(hide_password=True)
    )
    try:
        yield
    finally:
        await engine.dispose()
        logger.info("Database engine disposed")
