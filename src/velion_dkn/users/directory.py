"""Read-only aggregates over users and their documents."""

from __future__ import annotations

from sqlalchemy import func, select

from velion_dkn.db.engine import DBEngine
from velion_dkn.db.repository import FilterSet, apply_filters
from velion_dkn.documents.models import Document

from .models import User
from .schemas import ExpertEntry, ExpertFilters, LeaderboardEntry, UserStats

DEFAULT_LEADERBOARD_LIMIT = 10


def _summary(user: User) -> dict:
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "department": user.department,
        "region": user.region,
        "expertise": user.expertise,
        "role": user.role,
    }


class UserDirectory:
    def __init__(self, engine: DBEngine):
        self.engine = engine

    async def leaderboard(self, limit: int = DEFAULT_LEADERBOARD_LIMIT) -> list[LeaderboardEntry]:
        """Users ranked by documents, then downloads. Users without documents count as zero."""
        document_count = func.count(Document.id).label("document_count")
        total_downloads = func.coalesce(func.sum(Document.download_count), 0).label("total_downloads")
        stmt = (
            select(User, document_count, total_downloads)
            .outerjoin(Document, Document.uploader_id == User.id)
            .group_by(User.id)
            .order_by(document_count.desc(), total_downloads.desc(), User.id.asc())
            .limit(limit)
        )
        async with self.engine.session() as session:
            rows = (await session.execute(stmt)).all()
        return [
            LeaderboardEntry(
                **_summary(user),
                document_count=int(count or 0),
                total_downloads=int(downloads or 0),
            )
            for user, count, downloads in rows
        ]

    async def experts(self, filters: ExpertFilters) -> list[ExpertEntry]:
        fs = (
            FilterSet()
            .eq(User.department, filters.department)
            .eq(User.region, filters.region)
            .contains(User.expertise, filters.expertise)
            .any_contains((User.name, User.expertise), filters.search)
        )
        document_count = func.count(Document.id).label("document_count")
        stmt = (
            apply_filters(select(User, document_count), fs)
            .outerjoin(Document, Document.uploader_id == User.id)
            .group_by(User.id)
            .order_by(document_count.desc(), User.id.asc())
        )
        async with self.engine.session() as session:
            rows = (await session.execute(stmt)).all()
        return [ExpertEntry(**_summary(user), document_count=int(count or 0)) for user, count in rows]

    async def stats(self, user_id: int) -> UserStats:
        """Counts for one user plus competition rank by document count.

        rank = 1 + number of users with strictly more documents, so ties share
        a rank. Unknown users simply have zero of everything.
        """
        own_count = (
            select(func.count(Document.id)).where(Document.uploader_id == user_id).scalar_subquery()
        )
        ahead = (
            select(Document.uploader_id)
            .group_by(Document.uploader_id)
            .having(func.count(Document.id) > own_count)
            .subquery()
        )
        totals = select(
            func.count(Document.id),
            func.coalesce(func.sum(Document.download_count), 0),
        ).where(Document.uploader_id == user_id)

        async with self.engine.session() as session:
            count, downloads = (await session.execute(totals)).one()
            users_ahead = await session.scalar(select(func.count()).select_from(ahead))

        return UserStats(
            document_count=int(count or 0),
            total_downloads=int(downloads or 0),
            rank=int(users_ahead or 0) + 1,
        )

    async def _distinct(self, column) -> list[str]:
        stmt = select(column).where(column.is_not(None)).distinct().order_by(column)
        async with self.engine.session() as session:
            return list((await session.execute(stmt)).scalars().all())

    async def departments(self) -> list[str]:
        return await self._distinct(User.department)

    async def regions(self) -> list[str]:
        return await self._distinct(User.region)
