from __future__ import annotations
import os
import sys
import asyncio
import logging
from pathlib import Path
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlalchemy import engine_from_config
from sqlalchemy.engine.url import make_url
from sqlalchemy.exc import ArgumentError, NoSuchModuleError

# --- Ensure project root and src/ on sys.path ---
ROOT = Path(__file__).resolve().parents[1]  # migrations/ -> project root
for p in (ROOT, ROOT / "src"):
    s = str(p)
    if p.exists() and s not in sys.path:
        sys.path.insert(0, s)

from velion_dkn.app.core.logging import setup_logging  # noqa: E402
from velion_dkn.db.settings import DBSettings  # noqa: E402
from velion_dkn.models import Base  # noqa: E402

config = context.config

# --- Logging: app logging unless told to use alembic.ini ---
if os.getenv("ALEMBIC_USE_APP_LOGGING", "1") == "1":
    setup_logging(level=os.getenv("LOG_LEVEL"), fmt=os.getenv("LOG_FORMAT"))
elif config.config_file_name is not None:
    fileConfig(config.config_file_name)

# --- Database URL: explicit option wins, then DB_DATABASE_URL / DATABASE_URL ---
if not config.get_main_option("sqlalchemy.url"):
    config.set_main_option("sqlalchemy.url", DBSettings().resolved_database_url)

target_metadata = Base.metadata

url_str = config.get_main_option("sqlalchemy.url") or ""
try:
    driver = make_url(url_str).get_dialect().driver  # 'asyncpg', 'aiosqlite', 'psycopg2', ...
except (ArgumentError, NoSuchModuleError):
    driver = ""
is_async = driver in {"asyncpg", "aiosqlite"}

logging.getLogger(__name__).debug("Running migrations with driver %r", driver)


def run_migrations_offline():
    context.configure(
        url=url_str,
        target_metadata=target_metadata,
        literal_binds=True,
        compare_type=True,
        render_as_batch=True,
    )
    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection):
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        compare_type=True,
        render_as_batch=True,
    )
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online_async():
    from sqlalchemy.ext.asyncio import create_async_engine

    connectable = create_async_engine(url_str, poolclass=pool.NullPool)
    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)
    await connectable.dispose()


def run_migrations_online_sync():
    connectable = engine_from_config(
        config.get_section(config.config_ini_section),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with connectable.connect() as connection:
        do_run_migrations(connection)
    connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
elif is_async:
    asyncio.run(run_migrations_online_async())
else:
    run_migrations_online_sync()
