from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError

from velion_dkn.auth.security import Principal
from velion_dkn.db.base import utcnow
from velion_dkn.db.engine import DBEngine
from velion_dkn.db.uow import UnitOfWork
from velion_dkn.exceptions import NotFoundError, StorageError, ValidationError
from velion_dkn.security.permissions import require_reviewer

from .models import REVIEW_DECISIONS, Document, DocumentStatus

logger = logging.getLogger(__name__)


def parse_decision(raw: str | None) -> DocumentStatus:
    try:
        decision = DocumentStatus((raw or "").strip())
    except ValueError:
        decision = None
    if decision not in REVIEW_DECISIONS:
        raise ValidationError("Status must be either approved or rejected")
    return decision  # type: ignore[return-value]


class ReviewWorkflow:
    """Approve or reject a document.

    Re-reviewing a decided document overwrites the earlier decision; no history
    of prior decisions is kept.
    """

    def __init__(self, engine: DBEngine):
        self.engine = engine

    async def review(
        self,
        document_id: int,
        principal: Principal,
        decision: str | None,
        comment: str | None = None,
    ) -> DocumentStatus:
        require_reviewer(principal)
        status = parse_decision(decision)

        try:
            async with UnitOfWork(self.engine) as uow:
                doc = await uow.repo(Document).get(document_id)
                if doc is None:
                    raise NotFoundError("Document not found")
                previous = doc.status
                doc.status = status.value
                doc.reviewed_by = principal.id
                doc.reviewed_at = utcnow()
                doc.review_comment = (comment or "").strip() or None
        except SQLAlchemyError as exc:
            logger.error("Failed to review document %s", document_id, exc_info=True)
            raise StorageError() from exc

        if previous != DocumentStatus.PENDING.value:
            logger.info(
                "Document %s re-reviewed by user %s: %s -> %s",
                document_id,
                principal.id,
                previous,
                status.value,
            )
        else:
            logger.info("Document %s %s by user %s", document_id, status.value, principal.id)
        return status
