from __future__ import annotations

import os
from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import make_url


class DBSettings(BaseSettings):
    """
    Connection settings for the catalog database.

    ``DB_DATABASE_URL`` wins over a bare ``DATABASE_URL``. Pool options are
    ignored for in-memory SQLite, which always runs on a single shared
    connection.
    """

    database_url: Optional[str] = Field(default=None, description="Async SQLAlchemy URL")
    echo: bool = False
    pool_size: int = Field(default=10, ge=1)
    max_overflow: int = Field(default=20, ge=0)
    pool_recycle: int = Field(default=1800, description="Seconds before a pooled connection is replaced")
    pool_timeout: int = Field(default=30, description="Seconds to wait for a free connection")

    model_config = SettingsConfigDict(env_prefix="DB_", env_file=".env", extra="ignore")

    @property
    def resolved_database_url(self) -> str:
        url = self.database_url or os.getenv("DATABASE_URL")
        if not url:
            raise ValueError("DATABASE_URL or DB_DATABASE_URL must be set")
        # postgres:// is what most hosting dashboards hand out
        if url.startswith("postgres://"):
            url = "postgresql+asyncpg://" + url[len("postgres://"):]
        elif url.startswith("postgresql://"):
            url = "postgresql+asyncpg://" + url[len("postgresql://"):]
        return url

    @property
    def is_memory_sqlite(self) -> bool:
        url = make_url(self.resolved_database_url)
        return url.get_backend_name() == "sqlite" and url.database in (None, "", ":memory:")


@lru_cache
def get_db_settings() -> DBSettings:
    return DBSettings()
