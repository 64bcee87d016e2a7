from __future__ import annotations

from contextlib import AsyncExitStack
from typing import Type, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from .engine import DBEngine
from .repository import Repository

T = TypeVar("T")


class UnitOfWork:
    """One session, one transaction.

    Commits when the block exits cleanly and rolls back when it raises; the
    exception is never swallowed. Repositories handed out by ``repo()`` share
    the session and never commit on their own.
    """

    def __init__(self, engine: DBEngine):
        self._engine = engine
        self._stack: AsyncExitStack | None = None
        self.session: AsyncSession | None = None

    async def __aenter__(self) -> "UnitOfWork":
        self._stack = AsyncExitStack()
        self.session = await self._stack.enter_async_context(self._engine.session())
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        assert self.session is not None and self._stack is not None
        try:
            if exc_type is None:
                await self.session.commit()
            else:
                await self.session.rollback()
        finally:
            await self._stack.aclose()
        return False

    def repo(self, model: Type[T]) -> Repository[T]:
        assert self.session is not None
        return Repository[T](self.session, model)
