from __future__ import annotations

from typing import Any, Generic, Iterable, Optional, Type, TypeVar

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from .filters import Clause, apply_filters

T = TypeVar("T")


class Repository(Generic[T]):
    """Generic async SQLAlchemy repository.

    - Thin CRUD helpers over an AsyncSession and a mapped model class.
    - Never commits; the surrounding UnitOfWork owns the transaction.
    """

    def __init__(self, session: AsyncSession, model: Type[T]):
        self.session = session
        self.model = model

    async def get(self, id: Any) -> Optional[T]:
        return await self.session.get(self.model, id)

    async def count(self, where: Iterable[Clause] | None = None) -> int:
        stmt = apply_filters(select(func.count()).select_from(self.model), where)
        return int((await self.session.execute(stmt)).scalar_one())

    async def create(self, **data) -> T:
        obj = self.model(**data)
        self.session.add(obj)
        await self.session.flush()
        return obj

    async def delete(self, id: Any) -> int:
        res = await self.session.execute(delete(self.model).where(self.model.id == id))  # type: ignore[attr-defined]
        return int(res.rowcount or 0)
