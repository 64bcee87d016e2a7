# Public DB API exports
from .base import Base, TimestampMixin, utcnow
from .engine import DBEngine
from .health import db_healthcheck
from .repository import Repository
from .settings import DBSettings, get_db_settings
from .uow import UnitOfWork

__all__ = [
    "Base",
    "TimestampMixin",
    "utcnow",
    "DBEngine",
    "db_healthcheck",
    "Repository",
    "DBSettings",
    "get_db_settings",
    "UnitOfWork",
]
