from __future__ import annotations

import mimetypes
from typing import Optional

from fastapi import APIRouter, File, Form, Query, UploadFile
from fastapi.responses import FileResponse

from velion_dkn.auth.security import CurrentPrincipal
from velion_dkn.documents.schemas import (
    CountedDocumentsResponse,
    DocumentFilters,
    DocumentListResponse,
    DocumentResponse,
    DocumentsResponse,
    MessageEnvelope,
    Pagination,
    ReviewRequest,
    UploadResponse,
)
from velion_dkn.exceptions import ValidationError

from ..deps import CatalogDep, ReviewDep, SettingsDep
from ..middleware.request_size_limit import too_large_message

ROUTER_PREFIX = "/documents"
ROUTER_TAG = "Documents"

router = APIRouter()


@router.post("/upload", response_model=UploadResponse, status_code=201)
async def upload_document(
    principal: CurrentPrincipal,
    catalog: CatalogDep,
    settings: SettingsDep,
    file: Optional[UploadFile] = File(None),
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    tags: Optional[str] = Form(None),
    department: Optional[str] = Form(None),
    region: Optional[str] = Form(None),
    project_type: Optional[str] = Form(None),
) -> UploadResponse:
    """Multipart upload; ``file`` and ``title`` are required."""
    content: bytes | None = None
    filename: str | None = None
    if file is not None:
        if file.size is not None and file.size > settings.max_upload_bytes:
            raise ValidationError(too_large_message(settings.max_upload_bytes))
        content = await file.read()
        if len(content) > settings.max_upload_bytes:
            raise ValidationError(too_large_message(settings.max_upload_bytes))
        filename = file.filename

    document = await catalog.upload(
        content=content,
        original_name=filename,
        size=len(content) if content is not None else None,
        title=title,
        description=description,
        tags=tags,
        department=department,
        region=region,
        project_type=project_type,
        uploader_id=principal.id,
    )
    return UploadResponse(message="Document uploaded successfully", document=document)


@router.get("", response_model=DocumentListResponse)
async def list_documents(
    principal: CurrentPrincipal,
    catalog: CatalogDep,
    search: Optional[str] = None,
    department: Optional[str] = None,
    region: Optional[str] = None,
    tags: Optional[str] = None,
    uploader_id: Optional[int] = None,
    status: Optional[str] = Query(None, description="Reviewers only; ignored for everyone else"),
    limit: int = Query(50, ge=1),
    offset: int = Query(0, ge=0),
) -> DocumentListResponse:
    page = await catalog.list(
        DocumentFilters(
            search=search,
            department=department,
            region=region,
            tags=tags,
            uploader_id=uploader_id,
            status=status,
        ),
        Pagination(limit=limit, offset=offset),
        principal,
    )
    return DocumentListResponse(count=len(page.documents), documents=page.documents, is_reviewer=page.is_reviewer)


@router.get("/recent", response_model=DocumentsResponse)
async def recent_documents(
    principal: CurrentPrincipal,
    catalog: CatalogDep,
    limit: int = Query(10, ge=1),
) -> DocumentsResponse:
    return DocumentsResponse(documents=await catalog.get_recent(limit))


@router.get("/pending", response_model=CountedDocumentsResponse)
async def pending_documents(principal: CurrentPrincipal, catalog: CatalogDep) -> CountedDocumentsResponse:
    documents = await catalog.get_pending(principal)
    return CountedDocumentsResponse(count=len(documents), documents=documents)


@router.get("/{document_id}", response_model=DocumentResponse)
async def get_document(document_id: int, principal: CurrentPrincipal, catalog: CatalogDep) -> DocumentResponse:
    return DocumentResponse(document=await catalog.get_by_id(document_id))


@router.get("/{document_id}/download")
async def download_document(document_id: int, principal: CurrentPrincipal, catalog: CatalogDep) -> FileResponse:
    ticket = await catalog.download(document_id, principal.id)
    media_type = mimetypes.guess_type(ticket.filename)[0] or "application/octet-stream"
    return FileResponse(ticket.path, filename=ticket.filename, media_type=media_type)


@router.put("/{document_id}/review", response_model=MessageEnvelope)
async def review_document(
    document_id: int,
    principal: CurrentPrincipal,
    review: ReviewDep,
    body: Optional[ReviewRequest] = None,
) -> MessageEnvelope:
    body = body or ReviewRequest()
    status = await review.review(document_id, principal, body.status, body.comment)
    return MessageEnvelope(message=f"Document {status.value} successfully")


@router.delete("/{document_id}", response_model=MessageEnvelope)
async def delete_document(document_id: int, principal: CurrentPrincipal, catalog: CatalogDep) -> MessageEnvelope:
    await catalog.delete(document_id, principal.id)
    return MessageEnvelope(message="Document deleted successfully")
