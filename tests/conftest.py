"""
Shared fixtures.

Every test gets its own in-memory SQLite database and upload directory, so
tests never see each other's rows or files.
"""

from __future__ import annotations

from typing import Callable

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from velion_dkn.api.fastapi import create_app
from velion_dkn.app.settings import AppSettings
from velion_dkn.auth.security import Principal, issue_token
from velion_dkn.auth.settings import AuthSettings
from velion_dkn.db.engine import DBEngine
from velion_dkn.db.settings import DBSettings
from velion_dkn.db.uow import UnitOfWork
from velion_dkn.documents.review import ReviewWorkflow
from velion_dkn.documents.service import DocumentCatalog
from velion_dkn.storage import LocalBackend
from velion_dkn.users.directory import UserDirectory
from velion_dkn.users.models import User

TEST_SECRET = "test-secret-key-that-is-long-enough"


# =============================================================================
# PYTEST CONFIGURATION
# =============================================================================


def pytest_collection_modifyitems(config, items):
    """Tag tests by directory so `-m api` or `-m storage` selects them."""
    for item in items:
        path = str(item.fspath).replace("\\", "/")
        if "/tests/api/" in path:
            item.add_marker(pytest.mark.api)
        elif "/tests/unit/storage/" in path:
            item.add_marker(pytest.mark.storage)


# =============================================================================
# DATABASE / STORAGE
# =============================================================================


@pytest_asyncio.fixture
async def engine():
    eng = DBEngine(DBSettings(database_url="sqlite+aiosqlite:///:memory:"))
    await eng.create_all()
    yield eng
    await eng.dispose()


@pytest.fixture
def upload_dir(tmp_path):
    return tmp_path / "uploads"


@pytest.fixture
def storage(upload_dir) -> LocalBackend:
    backend = LocalBackend(upload_dir)
    backend.ensure_root()
    return backend


@pytest_asyncio.fixture
async def users(engine) -> dict[str, Principal]:
    """Three accounts: one Knowledge Champion and two consultants."""
    rows = [
        dict(
            name="Ada Reviewer",
            email="ada@velion.example",
            department="Strategy",
            region="EMEA",
            expertise="pricing, supply chain",
            role="manager",
            is_reviewer=True,
        ),
        dict(
            name="Ben Consultant",
            email="ben@velion.example",
            department="Engineering",
            region="APAC",
            expertise="data platforms, python",
        ),
        dict(
            name="Cleo Analyst",
            email="cleo@velion.example",
            department="Strategy",
            region="Americas",
            expertise="market sizing",
        ),
    ]
    out: dict[str, Principal] = {}
    async with UnitOfWork(engine) as uow:
        for key, row in zip(("ada", "ben", "cleo"), rows):
            user = await uow.repo(User).create(**row)
            out[key] = Principal.from_user(user)
    return out


# =============================================================================
# SERVICES
# =============================================================================


@pytest.fixture
def catalog(engine, storage) -> DocumentCatalog:
    return DocumentCatalog(engine, storage)


@pytest.fixture
def review(engine) -> ReviewWorkflow:
    return ReviewWorkflow(engine)


@pytest.fixture
def directory(engine) -> UserDirectory:
    return UserDirectory(engine)


@pytest.fixture
def upload(catalog) -> Callable:
    """Upload helper with sensible defaults."""

    async def _upload(uploader: Principal, title: str = "Quarterly review", **kwargs):
        kwargs.setdefault("content", b"%PDF-1.4 fake body")
        kwargs.setdefault("original_name", "report.pdf")
        return await catalog.upload(uploader_id=uploader.id, title=title, **kwargs)

    return _upload


# =============================================================================
# API
# =============================================================================


@pytest.fixture
def auth_settings() -> AuthSettings:
    return AuthSettings(jwt_secret=TEST_SECRET)


@pytest.fixture
def app_settings(upload_dir) -> AppSettings:
    return AppSettings(upload_dir=str(upload_dir))


@pytest.fixture
def app(app_settings, auth_settings, engine, storage):
    return create_app(
        app_settings=app_settings,
        auth_settings=auth_settings,
        db_engine=engine,
        storage=storage,
    )


@pytest_asyncio.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as c:
        yield c


@pytest.fixture
def auth_headers(auth_settings) -> Callable[[Principal | int], dict[str, str]]:
    def _headers(who: Principal | int) -> dict[str, str]:
        user_id = who if isinstance(who, int) else who.id
        return {"Authorization": f"Bearer {issue_token(user_id, auth_settings)}"}

    return _headers
