"""Document catalog: upload, search, download, delete.

Metadata lives in the ``documents`` table, file bodies in a ``StorageBackend``.
Writes that touch both keep them consistent from the caller's point of view:

- upload writes the file first and removes it again if the row cannot be stored;
- delete removes the file first, so a crash leaves at worst a row pointing at a
  missing file, which ``download`` reports as not found;
- download bumps the counter and appends the log row in one transaction.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import aliased

from velion_dkn.auth.security import Principal
from velion_dkn.db.engine import DBEngine
from velion_dkn.db.repository import FilterSet, apply_filters
from velion_dkn.db.uow import UnitOfWork
from velion_dkn.exceptions import NotFoundError, StorageError, ValidationError
from velion_dkn.security.permissions import (
    PENDING_REQUIRES_REVIEWER,
    is_reviewer,
    require_reviewer,
    require_uploader,
)
from velion_dkn.storage import InvalidKeyError, StorageBackend, StorageBackendError, generate_key
from velion_dkn.users.models import User

from .models import Document, DocumentStatus, Download
from .schemas import DocumentFilters, DocumentPage, DocumentRead, Pagination

logger = logging.getLogger(__name__)

DEFAULT_RECENT_LIMIT = 10


@dataclass(frozen=True)
class DownloadTicket:
    """What the transport needs to stream a file back."""

    path: Path
    filename: str


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


class DocumentCatalog:
    def __init__(self, engine: DBEngine, storage: StorageBackend):
        self.engine = engine
        self.storage = storage

    # ------------------------------------------------------------------ reads

    @staticmethod
    def _select():
        uploader = aliased(User, name="uploader")
        reviewer = aliased(User, name="reviewer")
        return (
            select(
                Document,
                uploader.name.label("uploader_name"),
                uploader.email.label("uploader_email"),
                uploader.department.label("uploader_department"),
                reviewer.name.label("reviewer_name"),
            )
            .outerjoin(uploader, Document.uploader_id == uploader.id)
            .outerjoin(reviewer, Document.reviewed_by == reviewer.id)
        )

    @staticmethod
    def _to_read(row) -> DocumentRead:
        doc = DocumentRead.model_validate(row[0])
        return doc.model_copy(
            update={
                "uploader_name": row.uploader_name,
                "uploader_email": row.uploader_email,
                "uploader_department": row.uploader_department,
                "reviewer_name": row.reviewer_name,
            }
        )

    async def _fetch(self, stmt) -> list[DocumentRead]:
        async with self.engine.session() as session:
            rows = (await session.execute(stmt)).all()
        return [self._to_read(r) for r in rows]

    @staticmethod
    def build_filters(filters: DocumentFilters, *, reviewer: bool) -> FilterSet:
        """Fold the optional filters into clauses.

        ``status`` only applies for reviewers; everyone else gets it dropped.
        Unknown values are matched as given and simply find nothing.
        """
        fs = FilterSet()
        if reviewer:
            fs.eq(Document.status, _clean(filters.status))
        fs.any_contains((Document.title, Document.description, Document.tags), _clean(filters.search))
        fs.eq(Document.department, _clean(filters.department))
        fs.eq(Document.region, _clean(filters.region))
        fs.contains(Document.tags, _clean(filters.tags))
        fs.eq(Document.uploader_id, filters.uploader_id)
        return fs

    async def list(
        self,
        filters: DocumentFilters,
        pagination: Pagination,
        principal: Principal,
    ) -> DocumentPage:
        reviewer = is_reviewer(principal)
        stmt = (
            apply_filters(self._select(), self.build_filters(filters, reviewer=reviewer))
            .order_by(Document.upload_date.desc(), Document.id.asc())
            .limit(pagination.limit)
            .offset(pagination.offset)
        )
        return DocumentPage(documents=await self._fetch(stmt), is_reviewer=reviewer)

    async def get_by_id(self, document_id: int) -> DocumentRead:
        docs = await self._fetch(self._select().where(Document.id == document_id))
        if not docs:
            raise NotFoundError("Document not found")
        return docs[0]

    async def get_recent(self, limit: int = DEFAULT_RECENT_LIMIT) -> list[DocumentRead]:
        stmt = self._select().order_by(Document.upload_date.desc(), Document.id.asc()).limit(limit)
        return await self._fetch(stmt)

    async def get_pending(self, principal: Principal) -> list[DocumentRead]:
        """Review queue, oldest first."""
        require_reviewer(principal, PENDING_REQUIRES_REVIEWER)
        stmt = (
            self._select()
            .where(Document.status == DocumentStatus.PENDING.value)
            .order_by(Document.upload_date.asc(), Document.id.asc())
        )
        return await self._fetch(stmt)

    # ----------------------------------------------------------------- writes

    async def _discard(self, key: str) -> None:
        try:
            await self.storage.delete(key)
        except (StorageBackendError, InvalidKeyError):
            logger.warning("Failed to remove stored file %s", key, exc_info=True)

    async def upload(
        self,
        *,
        content: bytes | None,
        original_name: str | None,
        uploader_id: int,
        title: str | None,
        size: int | None = None,
        description: str | None = None,
        tags: str | None = None,
        department: str | None = None,
        region: str | None = None,
        project_type: str | None = None,
    ) -> DocumentRead:
        if content is None:
            raise ValidationError("Please upload a file")

        key = generate_key(original_name)
        try:
            await self.storage.put(key, content)
        except StorageBackendError as exc:
            # the backend removes its own partial write; an existing file at the key is not ours
            logger.error("Failed to store upload for user %s", uploader_id, exc_info=True)
            raise StorageError("Server error during upload") from exc

        title = _clean(title)
        if not title:
            await self._discard(key)
            raise ValidationError("Document title is required")

        try:
            async with UnitOfWork(self.engine) as uow:
                doc = await uow.repo(Document).create(
                    title=title,
                    description=_clean(description),
                    file_name=original_name or key,
                    file_path=key,
                    file_size=size if size is not None else len(content),
                    tags=_clean(tags),
                    department=_clean(department),
                    region=_clean(region),
                    project_type=_clean(project_type),
                    uploader_id=uploader_id,
                )
                document_id = doc.id
        except SQLAlchemyError as exc:
            logger.error("Failed to record upload %s", key, exc_info=True)
            await self._discard(key)
            raise StorageError("Server error during upload") from exc

        logger.info("Document %s uploaded by user %s", document_id, uploader_id)
        return await self.get_by_id(document_id)

    async def download(self, document_id: int, requesting_user_id: int) -> DownloadTicket:
        async with self.engine.session() as session:
            doc = await session.get(Document, document_id)
            if doc is None:
                raise NotFoundError("Document not found")
            key, file_name = doc.file_path, doc.file_name

        try:
            present = await self.storage.exists(key)
        except InvalidKeyError:
            logger.warning("Document %s has an unusable file path %r", document_id, key)
            present = False
        if not present:
            raise NotFoundError("File not found on server")

        try:
            async with UnitOfWork(self.engine) as uow:
                assert uow.session is not None
                res = await uow.session.execute(
                    update(Document)
                    .where(Document.id == document_id)
                    .values(download_count=Document.download_count + 1)
                )
                if not res.rowcount:
                    raise NotFoundError("Document not found")
                await uow.repo(Download).create(document_id=document_id, user_id=requesting_user_id)
        except SQLAlchemyError as exc:
            logger.error("Failed to record download of document %s", document_id, exc_info=True)
            raise StorageError("Server error during download") from exc

        return DownloadTicket(path=self.storage.path_for(key), filename=file_name)

    async def delete(self, document_id: int, requesting_user_id: int) -> None:
        async with self.engine.session() as session:
            doc = await session.get(Document, document_id)
            if doc is None:
                raise NotFoundError("Document not found")
            require_uploader(requesting_user_id, doc.uploader_id)
            key = doc.file_path

        # file before row
        try:
            removed = await self.storage.delete(key)
        except InvalidKeyError:
            logger.warning("Document %s has an unusable file path %r", document_id, key)
            removed = False
        except StorageBackendError as exc:
            logger.error("Failed to remove file for document %s", document_id, exc_info=True)
            raise StorageError() from exc
        if not removed:
            logger.info("Document %s had no file on disk", document_id)

        try:
            async with UnitOfWork(self.engine) as uow:
                await uow.repo(Document).delete(document_id)
        except SQLAlchemyError as exc:
            logger.error("Failed to delete document row %s", document_id, exc_info=True)
            raise StorageError() from exc

        logger.info("Document %s deleted by user %s", document_id, requesting_user_id)
