import pytest
from sqlalchemy import update

from velion_dkn.db.uow import UnitOfWork
from velion_dkn.documents.models import Document
from velion_dkn.users.schemas import ExpertFilters


async def _set_downloads(engine, document_id: int, count: int) -> None:
    async with UnitOfWork(engine) as uow:
        await uow.session.execute(update(Document).where(Document.id == document_id).values(download_count=count))


@pytest.mark.asyncio
class TestLeaderboard:
    async def test_orders_by_documents_then_downloads(self, upload, directory, engine, users):
        a1 = await upload(users["ada"], title="a1")
        await upload(users["ada"], title="a2")
        b1 = await upload(users["ben"], title="b1")
        await upload(users["ben"], title="b2")
        await _set_downloads(engine, a1.id, 3)
        await _set_downloads(engine, b1.id, 5)

        board = await directory.leaderboard()

        assert [(e.name, e.document_count, e.total_downloads) for e in board] == [
            ("Ben Consultant", 2, 5),
            ("Ada Reviewer", 2, 3),
            ("Cleo Analyst", 0, 0),
        ]

    async def test_limit(self, directory, users):
        board = await directory.leaderboard(limit=2)
        # nobody has documents yet: ties fall back to id order
        assert [e.id for e in board] == [users["ada"].id, users["ben"].id]


@pytest.mark.asyncio
class TestStats:
    async def test_ties_share_a_rank(self, upload, directory, engine, users):
        await upload(users["ada"], title="a1")
        await upload(users["ada"], title="a2")
        b1 = await upload(users["ben"], title="b1")
        await upload(users["ben"], title="b2")
        await upload(users["cleo"], title="c1")
        await _set_downloads(engine, b1.id, 4)

        ada = await directory.stats(users["ada"].id)
        ben = await directory.stats(users["ben"].id)
        cleo = await directory.stats(users["cleo"].id)

        assert (ada.document_count, ada.total_downloads, ada.rank) == (2, 0, 1)
        assert (ben.document_count, ben.total_downloads, ben.rank) == (2, 4, 1)
        assert (cleo.document_count, cleo.rank) == (1, 3)

    async def test_user_without_documents(self, upload, directory, users):
        await upload(users["ada"])

        stats = await directory.stats(users["cleo"].id)
        assert (stats.document_count, stats.total_downloads, stats.rank) == (0, 0, 2)

    async def test_unknown_user_gets_zeros(self, directory, users):
        stats = await directory.stats(424242)
        assert (stats.document_count, stats.total_downloads, stats.rank) == (0, 0, 1)


@pytest.mark.asyncio
class TestExperts:
    async def test_filters(self, upload, directory, users):
        await upload(users["cleo"])

        strategy = await directory.experts(ExpertFilters(department="Strategy"))
        assert [e.name for e in strategy] == ["Cleo Analyst", "Ada Reviewer"]
        assert strategy[0].document_count == 1

        python = await directory.experts(ExpertFilters(expertise="python"))
        assert [e.name for e in python] == ["Ben Consultant"]

        by_name = await directory.experts(ExpertFilters(search="ada"))
        assert [e.name for e in by_name] == ["Ada Reviewer"]

        by_skill = await directory.experts(ExpertFilters(search="sizing", region="Americas"))
        assert [e.name for e in by_skill] == ["Cleo Analyst"]

        assert await directory.experts(ExpertFilters(region="Mars")) == []


@pytest.mark.asyncio
async def test_departments_and_regions(directory, users):
    assert await directory.departments() == ["Engineering", "Strategy"]
    assert await directory.regions() == ["APAC", "Americas", "EMEA"]
