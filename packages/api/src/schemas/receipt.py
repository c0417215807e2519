# This project was developed with assistance from AI tools.
"""Receipt and receipt verification schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class ReceiptResponse(BaseModel):
    """Receipt metadata."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    receipt_number: str
    client_id: str
    submission_id: str | None = None
    receipt_hash: str | None = None
    email_sent: bool = False
    email_sent_at: datetime | None = None
    created_at: datetime


class ReceiptListResponse(BaseModel):
    data: list[ReceiptResponse]
    count: int


class ReceiptVerificationResponse(BaseModel):
    """Result of recomputing a receipt's hash.

    ``expected_hash`` is the caller-supplied digest when one was given,
    otherwise the digest stored at creation time.
    """

    model_config = ConfigDict(from_attributes=True)

    receipt_id: str
    receipt_number: str
    client_id: str
    created_at: datetime
    matches: bool
    expected_hash: str | None = None
    recomputed_hash: str
    policies_hashed: int


class ReceiptPolicyItem(BaseModel):
    id: str
    policy_number: str | None = None


class ReceiptAuditItem(BaseModel):
    id: str
    receipt_number: str
    created_at: str
    email_sent: bool
    stored_hash: str | None = None
    recomputed_hash: str
    matches: bool
    policies: list[ReceiptPolicyItem]


class AuditTrailEntry(BaseModel):
    id: str
    action: str
    message: str
    user_id: str | None = None
    policy_id: str | None = None
    created_at: str
    hash: str


class ReceiptsAuditSummary(BaseModel):
    total_receipts: int
    tampered_receipts: int
    total_audit_entries: int
    returned_audit_entries: int
    first_entry_at: str | None = None
    last_entry_at: str | None = None


class ReceiptsAuditResponse(BaseModel):
    """Every receipt for a client re-verified, plus the client's audit trail."""

    client_id: str
    receipts: list[ReceiptAuditItem]
    audit_log: list[AuditTrailEntry]
    summary: ReceiptsAuditSummary
