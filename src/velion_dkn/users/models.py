from __future__ import annotations

from sqlalchemy import Boolean, String, Text, inspect
from sqlalchemy.orm import Mapped, mapped_column

from velion_dkn.db.base import Base, TimestampMixin


class User(Base, TimestampMixin):
    """Account row. Written by the auth service; read-only here."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    department: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    region: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    # free-text, comma separated
    expertise: Mapped[str | None] = mapped_column(Text, nullable=True)
    role: Mapped[str] = mapped_column(String(50), nullable=False, default="consultant")
    is_reviewer: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    def __repr__(self) -> str:
        state = inspect(self)
        if state.detached or state.expired:
            return f"<User at {hex(id(self))}>"
        return f"<User(id={self.id}, email={self.email!r}, reviewer={self.is_reviewer})>"
