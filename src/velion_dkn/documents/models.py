from __future__ import annotations

import datetime as dt
from enum import StrEnum

from sqlalchemy import BigInteger, DateTime, ForeignKey, Integer, String, Text, inspect
from sqlalchemy.orm import Mapped, mapped_column

from velion_dkn.db.base import Base, utcnow


class DocumentStatus(StrEnum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


REVIEW_DECISIONS = frozenset({DocumentStatus.APPROVED, DocumentStatus.REJECTED})


class Document(Base):
    """
    One uploaded artifact.

    - ``file_path`` is a storage key relative to the upload directory.
    - ``download_count`` only moves through an atomic ``+ 1`` update.
    - ``reviewed_by``/``reviewed_at`` are set whenever status leaves pending.
    """

    __tablename__ = "documents"

    id: Mapped[int] = mapped_column(primary_key=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    file_path: Mapped[str] = mapped_column(String(500), nullable=False, unique=True)
    file_size: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    tags: Mapped[str | None] = mapped_column(Text, nullable=True)
    department: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    region: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    project_type: Mapped[str | None] = mapped_column(String(100), nullable=True)

    uploader_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    upload_date: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, index=True
    )
    download_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=DocumentStatus.PENDING.value, index=True
    )
    reviewed_by: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    reviewed_at: Mapped[dt.datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    review_comment: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        state = inspect(self)
        if state.detached or state.expired:
            return f"<Document at {hex(id(self))}>"
        return f"<Document(id={self.id}, title={self.title!r}, status={self.status})>"


class Download(Base):
    """Append-only download log."""

    __tablename__ = "downloads"

    id: Mapped[int] = mapped_column(primary_key=True)
    # SET NULL keeps the log intact when a document is deleted
    document_id: Mapped[int | None] = mapped_column(
        ForeignKey("documents.id", ondelete="SET NULL"), nullable=True, index=True
    )
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    downloaded_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
