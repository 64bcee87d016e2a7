"""Every mapped table, imported so ``Base.metadata`` is complete."""

from velion_dkn.db.base import Base
from velion_dkn.documents.models import Document, DocumentStatus, Download
from velion_dkn.users.models import User

__all__ = ["Base", "User", "Document", "DocumentStatus", "Download"]
