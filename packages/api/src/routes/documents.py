# This project was developed with assistance from AI tools.
"""Policy document routes. Documents arrive through the invite portal."""

import logging

from db import get_db
from db.enums import UserRole
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import CurrentUser, require_roles
from ..schemas.document import DocumentResponse
from ..services import document as doc_service
from ..services.client import get_client
from ..services.storage import get_storage_service

logger = logging.getLogger(__name__)

router = APIRouter()

_ALL_STAFF = (UserRole.ADMIN, UserRole.ATTORNEY, UserRole.STAFF)


@router.get(
    "/clients/{client_id}/documents",
    response_model=list[DocumentResponse],
    dependencies=[Depends(require_roles(*_ALL_STAFF))],
)
async def list_client_documents(
    client_id: str,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> list[DocumentResponse]:
    if await get_client(session, user, client_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Client not found")
    documents = await doc_service.list_client_documents(session, user, client_id)
    return [DocumentResponse.model_validate(d) for d in documents]


@router.get(
    "/documents/{document_id}",
    response_model=DocumentResponse,
    dependencies=[Depends(require_roles(*_ALL_STAFF))],
)
async def get_document(
    document_id: str,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> DocumentResponse:
    doc = await doc_service.get_document(session, user, document_id)
    if doc is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Document not found")
    return DocumentResponse.model_validate(doc)


@router.get(
    "/documents/{document_id}/download",
    dependencies=[Depends(require_roles(*_ALL_STAFF))],
)
async def get_document_download_url(
    document_id: str,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> dict:
    """Return a short-lived presigned URL for the stored file."""
    doc = await doc_service.get_document(session, user, document_id)
    if doc is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Document not found")
    url = await get_storage_service().get_download_url(
        doc.file_path, expires_in=300, filename=doc.file_name
    )
    return {"document_id": doc.id, "url": url, "expires_in": 300}
