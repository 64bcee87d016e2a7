from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from .settings import DBSettings


class DBEngine:
    """Owns the async engine and hands out sessions.

    Built once per application and passed to every component that reads or
    writes the database; nothing else creates engines.
    """

    def __init__(self, settings: DBSettings):
        options: dict[str, Any] = {"echo": settings.echo}
        if settings.is_memory_sqlite:
            # every session must share the one connection that holds the data
            options.update(poolclass=StaticPool, connect_args={"check_same_thread": False})
        else:
            options.update(
                pool_pre_ping=True,
                pool_recycle=settings.pool_recycle,
                pool_timeout=settings.pool_timeout,
                pool_size=settings.pool_size,
                max_overflow=settings.max_overflow,
            )

        self.settings = settings
        self._engine: AsyncEngine = create_async_engine(settings.resolved_database_url, **options)
        self._sessions: async_sessionmaker[AsyncSession] = async_sessionmaker(
            bind=self._engine, expire_on_commit=False
        )

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        async with self._sessions() as sess:
            yield sess

    async def create_all(self) -> None:
        """Create missing tables straight from the models (tests, ``init-db``)."""
        from velion_dkn.models import Base

        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self._engine.dispose()
