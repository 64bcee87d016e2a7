from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from velion_dkn.app.core.env import get_env
from velion_dkn.app.settings import AppSettings, get_app_settings
from velion_dkn.auth.settings import AuthSettings, get_auth_settings
from velion_dkn.db.engine import DBEngine
from velion_dkn.db.integration import attach_db
from velion_dkn.db.settings import get_db_settings
from velion_dkn.documents.review import ReviewWorkflow
from velion_dkn.documents.service import DocumentCatalog
from velion_dkn.storage import LocalBackend, StorageBackend
from velion_dkn.users.directory import UserDirectory

from .middleware.errors.catchall import CatchAllExceptionMiddleware
from .middleware.errors.handlers import register_error_handlers
from .middleware.request_size_limit import RequestSizeLimitMiddleware
from .routers import register_all_routers

logger = logging.getLogger(__name__)


def create_app(
    *,
    app_settings: AppSettings | None = None,
    auth_settings: AuthSettings | None = None,
    db_engine: DBEngine | None = None,
    storage: StorageBackend | None = None,
) -> FastAPI:
    """Build the API.

    Everything the handlers need is constructed here and hung off
    ``app.state``; pass any of them in to override (tests do).
    """
    app_settings = app_settings or get_app_settings()
    auth_settings = auth_settings or get_auth_settings()
    db_engine = db_engine or DBEngine(get_db_settings())
    if storage is None:
        storage = LocalBackend(app_settings.upload_dir)

    app = FastAPI(title=app_settings.name, version=app_settings.version)

    app.state.app_settings = app_settings
    app.state.auth_settings = auth_settings
    app.state.storage = storage
    attach_db(app, db_engine)
    app.state.catalog = DocumentCatalog(db_engine, storage)
    app.state.review = ReviewWorkflow(db_engine)
    app.state.directory = UserDirectory(db_engine)

    # each add wraps the previous ones, so CORS ends up outermost
    app.add_middleware(RequestSizeLimitMiddleware, max_bytes=app_settings.max_upload_bytes)
    app.add_middleware(CatchAllExceptionMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(app)

    register_all_routers(app, base_package="velion_dkn.api.fastapi.routers", prefix=app_settings.api_prefix)

    if isinstance(storage, LocalBackend):
        storage.ensure_root()
        app.mount(app_settings.static_path, StaticFiles(directory=storage.base_path), name="uploads")

    logger.info("%s %s initialized [env: %s]", app_settings.name, app_settings.version, get_env())
    return app


__all__ = ["create_app"]
