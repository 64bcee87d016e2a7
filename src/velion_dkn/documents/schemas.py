from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .models import DocumentStatus


class Envelope(BaseModel):
    success: bool = True


class MessageEnvelope(Envelope):
    message: str


class DocumentRead(BaseModel):
    """Document row plus the joined uploader/reviewer columns."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: Optional[str] = None
    file_name: str
    file_path: str
    file_size: int
    tags: Optional[str] = None
    department: Optional[str] = None
    region: Optional[str] = None
    project_type: Optional[str] = None
    uploader_id: int
    upload_date: datetime
    download_count: int = 0
    status: DocumentStatus = DocumentStatus.PENDING
    reviewed_by: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    review_comment: Optional[str] = None

    uploader_name: Optional[str] = None
    uploader_email: Optional[str] = None
    uploader_department: Optional[str] = None
    reviewer_name: Optional[str] = None


class DocumentFilters(BaseModel):
    """Optional list filters; all present filters must match."""

    search: Optional[str] = None
    department: Optional[str] = None
    region: Optional[str] = None
    tags: Optional[str] = None
    uploader_id: Optional[int] = None
    status: Optional[str] = None


class Pagination(BaseModel):
    limit: int = Field(default=50, ge=1)
    offset: int = Field(default=0, ge=0)


class DocumentPage(BaseModel):
    documents: list[DocumentRead]
    is_reviewer: bool


class UploadResponse(MessageEnvelope):
    document: DocumentRead


class DocumentListResponse(Envelope):
    count: int
    documents: list[DocumentRead]
    is_reviewer: bool


class DocumentsResponse(Envelope):
    documents: list[DocumentRead]


class CountedDocumentsResponse(DocumentsResponse):
    count: int


class DocumentResponse(Envelope):
    document: DocumentRead


class ReviewRequest(BaseModel):
    status: Optional[str] = Field(default=None, description="approved | rejected")
    comment: Optional[str] = None
