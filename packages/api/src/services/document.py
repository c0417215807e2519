# This project was developed with assistance from AI tools.
"""Policy document archive.

Uploads are deduplicated per client by SHA-256 of the file bytes, stored in
S3, and run through best-effort text extraction. A failed extraction never
fails the upload; the error is returned alongside the stored document.
"""

import asyncio
import hashlib
import logging
import uuid
from dataclasses import dataclass
from functools import partial

from db import Document
from db.enums import AuditAction
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..schemas.auth import UserContext
from .audit import write_audit_log
from .ocr import ExtractedPolicyData, OcrExtractionError, extract_policy_data
from .scope import apply_data_scope
from .storage import ALLOWED_CONTENT_TYPES, get_storage_service

logger = logging.getLogger(__name__)


class DocumentUploadError(Exception):
    """Raised when a document upload fails validation."""


class DocumentTooLargeError(DocumentUploadError):
    """Raised when an upload exceeds the configured size limit."""


@dataclass
class ArchivedDocument:
    """Result of archiving one upload."""

    document: Document
    duplicate: bool
    extracted: ExtractedPolicyData | None = None
    ocr_error: str | None = None


def validate_upload(content_type: str, file_data: bytes) -> None:
    """Check content type and size.

    Raises:
        DocumentUploadError: empty file or unsupported content type.
        DocumentTooLargeError: file exceeds ``UPLOAD_MAX_SIZE_MB``.
    """
    if content_type not in ALLOWED_CONTENT_TYPES:
        raise DocumentUploadError(
            f"Unsupported content type: {content_type}. "
            f"Allowed: {', '.join(sorted(ALLOWED_CONTENT_TYPES))}"
        )
    if not file_data:
        raise DocumentUploadError("Uploaded file is empty")
    max_bytes = settings.UPLOAD_MAX_SIZE_MB * 1024 * 1024
    if len(file_data) > max_bytes:
        raise DocumentTooLargeError(
            f"File size {len(file_data)} exceeds maximum of {settings.UPLOAD_MAX_SIZE_MB}MB"
        )


def compute_document_hash(file_data: bytes) -> str:
    return hashlib.sha256(file_data).hexdigest()


async def find_client_document(
    session: AsyncSession, client_id: str, document_hash: str
) -> Document | None:
    stmt = select(Document).where(
        Document.client_id == client_id,
        Document.document_hash == document_hash,
    ).limit(1)
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def _extract(file_data: bytes, content_type: str) -> tuple[ExtractedPolicyData | None, str | None]:
    # pymupdf is blocking; keep it off the event loop
    loop = asyncio.get_running_loop()
    try:
        extracted = await loop.run_in_executor(
            None, partial(extract_policy_data, file_data, content_type)
        )
    except OcrExtractionError as exc:
        logger.info("Text extraction skipped: %s", exc)
        return None, str(exc)
    return extracted, None


async def archive_document(
    session: AsyncSession,
    *,
    client_id: str,
    filename: str,
    content_type: str,
    file_data: bytes,
    uploaded_via: str,
    submission_id: str | None = None,
    user_id: str | None = None,
) -> ArchivedDocument:
    """Store an uploaded policy document for a client. Does not commit.

    1. Validate type and size
    2. Return the existing row if the same bytes were already archived
    3. Extract text and guess policy fields (best-effort)
    4. Upload to S3 and create the Document row
    """
    validate_upload(content_type, file_data)
    document_hash = compute_document_hash(file_data)

    existing = await find_client_document(session, client_id, document_hash)
    if existing is not None:
        logger.info("Duplicate upload for client %s (document %s)", client_id, existing.id)
        extracted = (
            ExtractedPolicyData.model_validate(existing.extracted_data)
            if existing.extracted_data
            else None
        )
        return ArchivedDocument(document=existing, duplicate=True, extracted=extracted)

    extracted, ocr_error = await _extract(file_data, content_type)

    document_id = str(uuid.uuid4())
    storage = get_storage_service()
    object_key = storage.build_object_key(client_id, document_id, filename)
    await storage.upload_file(file_data, object_key, content_type, sha256=document_hash)

    document = Document(
        id=document_id,
        client_id=client_id,
        submission_id=submission_id,
        file_name=filename,
        file_size=len(file_data),
        file_path=object_key,
        mime_type=content_type,
        uploaded_via=uploaded_via,
        extracted_data=extracted.model_dump(mode="json") if extracted else None,
        ocr_confidence=extracted.confidence if extracted else None,
        document_hash=document_hash,
    )
    session.add(document)
    await session.flush()

    await write_audit_log(
        session,
        AuditAction.DOCUMENT_UPLOADED,
        f"Document uploaded: {filename} ({len(file_data)} bytes)",
        user_id=user_id,
        client_id=client_id,
    )
    return ArchivedDocument(
        document=document, duplicate=False, extracted=extracted, ocr_error=ocr_error
    )


async def list_client_documents(
    session: AsyncSession,
    user: UserContext,
    client_id: str,
) -> list[Document]:
    stmt = (
        select(Document)
        .where(Document.client_id == client_id)
        .order_by(Document.created_at.desc())
    )
    stmt = apply_data_scope(stmt, user.data_scope, client_column=Document.client_id)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def get_document(
    session: AsyncSession,
    user: UserContext,
    document_id: str,
) -> Document | None:
    """Return a single document if visible to the current user."""
    stmt = select(Document).where(Document.id == document_id)
    stmt = apply_data_scope(stmt, user.data_scope, client_column=Document.client_id)
    result = await session.execute(stmt)
    return result.scalar_one_or_none()
