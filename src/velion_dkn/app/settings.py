from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

MAX_UPLOAD_BYTES = 10 * 1024 * 1024


class AppSettings(BaseSettings):
    # flat = easy env overrides
    name: str = "Velion DKN API"
    version: str = "1.0.0"
    api_prefix: str = "/api"

    upload_dir: str = Field(default="uploads", description="Directory uploaded files are written to")
    static_path: str = Field(default="/uploads", description="Public path the upload directory is served under")
    max_upload_bytes: int = Field(default=MAX_UPLOAD_BYTES, ge=1)

    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    model_config = SettingsConfigDict(
        env_prefix="APP_",  # APP_NAME, APP_UPLOAD_DIR, ...
        env_file=".env",
        extra="ignore",
    )


@lru_cache
def get_app_settings(**kwargs) -> AppSettings:
    # Only include kwargs that are not None, so defaults in AppSettings are used
    filtered_kwargs = {k: v for k, v in kwargs.items() if v is not None}
    return AppSettings(**filtered_kwargs)
