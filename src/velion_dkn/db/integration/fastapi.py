from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import Depends, FastAPI, Request

from ..engine import DBEngine

logger = logging.getLogger(__name__)


def attach_db(app: FastAPI, engine: DBEngine) -> DBEngine:
    """Expose ``engine`` on ``app.state`` and dispose it when the app shuts down.

    Composes with any lifespan already installed on the router.
    """
    app.state.db_engine = engine  # type: ignore[attr-defined]
    existing = getattr(app.router, "lifespan_context", None)  # type: ignore[attr-defined]

    @asynccontextmanager
    async def composed_lifespan(_app: FastAPI):
        try:
            url = engine.engine.url
            logger.info(
                "DB attached: url=%s driver=%s",
                url.render_as_string(hide_password=True),
                url.get_backend_name(),
            )
            if existing:
                async with existing(_app):  # type: ignore[misc]
                    yield
            else:
                yield
        finally:
            await engine.dispose()

    app.router.lifespan_context = composed_lifespan  # type: ignore[attr-defined]
    return engine


def get_engine(request: Request) -> DBEngine:
    return request.app.state.db_engine  # type: ignore[attr-defined]


EngineDep = Annotated[DBEngine, Depends(get_engine)]
