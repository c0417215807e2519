# This project was developed with assistance from AI tools.
"""Document and intake response schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from .policy import PolicyResponse
from .receipt import ReceiptResponse


class DocumentResponse(BaseModel):
    """Uploaded document metadata (storage key omitted)."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    client_id: str
    policy_id: str | None = None
    file_name: str
    file_size: int
    mime_type: str
    uploaded_via: str | None = None
    extracted_data: dict | None = None
    ocr_confidence: float | None = None
    document_hash: str
    created_at: datetime


class IntakeResponse(BaseModel):
    """Outcome of one invite-portal submission."""

    submission_id: str
    receipt: ReceiptResponse
    policy: PolicyResponse | None = None
    document: DocumentResponse | None = None
    duplicate_document: bool = False
    ocr_error: str | None = None
    email_sent: bool = False
