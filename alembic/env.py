"""Migration runner for the inspira schema.

The target database is DATABASE_URL, the same variable the API reads.
Migrations run synchronously, so an ``postgresql+asyncpg`` URL is switched
to the psycopg2 driver here.
"""

from __future__ import annotations

from logging.config import fileConfig

from sqlalchemy import create_engine, make_url, pool

from alembic import context
from inspira.core.config import SETTINGS
from inspira.db import tables  # noqa: F401  (registers every table on Base.metadata)
from inspira.db.engine import Base

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)


def _sync_url() -> str:
    raw = SETTINGS.database_url or config.get_main_option("sqlalchemy.url")
    url = make_url(raw)
    if url.drivername == "postgresql+asyncpg":
        url = url.set(drivername="postgresql+psycopg2")
    return url.render_as_string(hide_password=False)


def _configure(**kwargs) -> None:
    context.configure(target_metadata=Base.metadata, compare_type=True, **kwargs)
    with context.begin_transaction():
        context.run_migrations()


if context.is_offline_mode():
    _configure(
        url=_sync_url(),
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
else:
    connectable = create_engine(_sync_url(), poolclass=pool.NullPool)
    with connectable.connect() as connection:
        _configure(connection=connection)
