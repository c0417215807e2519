# This project was developed with assistance from AI tools.
"""Pydantic response schemas for audit trail endpoints."""

from datetime import datetime

from db.enums import AuditAction
from pydantic import BaseModel, ConfigDict


class AuditLogItem(BaseModel):
    """Single audit entry in a query response."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    action: AuditAction
    message: str
    user_id: str | None = None
    client_id: str | None = None
    policy_id: str | None = None
    created_at: datetime


class AuditByClientResponse(BaseModel):
    """Response for audit trail query by client ID."""

    client_id: str
    count: int
    events: list[AuditLogItem]


class AuditSearchResponse(BaseModel):
    """Response for audit trail search queries."""

    count: int
    events: list[AuditLogItem]
