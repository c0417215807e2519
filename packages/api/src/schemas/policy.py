# This project was developed with assistance from AI tools.
"""Policy request/response schemas."""

from datetime import date, datetime

from db.enums import PolicyVerificationStatus
from pydantic import BaseModel, ConfigDict, Field


class PolicyCreate(BaseModel):
    """Register a policy against a client.

    Give either ``insurer_id`` for a directory insurer or ``insurer_name``
    free text; an unmatched name is kept as the raw carrier name.
    """

    policy_number: str | None = Field(default=None, max_length=100)
    policy_type: str | None = Field(default=None, max_length=50)
    insurer_id: str | None = None
    insurer_name: str | None = Field(default=None, max_length=255)


class PolicyUpdate(BaseModel):
    """Partial update to an existing policy."""

    policy_number: str | None = Field(default=None, max_length=100)
    policy_type: str | None = Field(default=None, max_length=50)
    insurer_id: str | None = None
    insurer_name: str | None = Field(default=None, max_length=255)


class PolicyVerifyRequest(BaseModel):
    """Record a verification decision."""

    status: PolicyVerificationStatus
    notes: str | None = None


class PolicyResolveInsurerRequest(BaseModel):
    insurer_id: str


class PolicyResponse(BaseModel):
    """Single policy response."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    client_id: str
    insurer_id: str | None = None
    carrier_name_raw: str | None = None
    display_carrier: str | None = None
    policy_number: str | None = None
    policy_type: str | None = None
    verification_status: PolicyVerificationStatus
    verified_at: datetime | None = None
    verification_notes: str | None = None
    created_at: datetime


class PolicyListResponse(BaseModel):
    data: list[PolicyResponse]
    count: int


class PolicyLocatorResult(BaseModel):
    """One registered policy matching a locator search."""

    client_id: str
    client_name: str
    date_of_birth: date | None = None
    policy_id: str
    policy_number: str | None = None
    policy_type: str | None = None
    insurer_name: str | None = None
    verification_status: PolicyVerificationStatus


class PolicyLocatorResponse(BaseModel):
    results: list[PolicyLocatorResult]
    count: int
