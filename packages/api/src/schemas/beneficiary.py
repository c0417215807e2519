# This project was developed with assistance from AI tools.
"""Beneficiary request/response schemas."""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

from . import EMAIL_PATTERN


class BeneficiaryCreate(BaseModel):
    """Add a beneficiary, optionally attached to some of the client's policies."""

    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    relationship_to_client: str | None = Field(default=None, max_length=100)
    email: str | None = Field(default=None, pattern=EMAIL_PATTERN, max_length=255)
    phone: str | None = None
    date_of_birth: date | None = None
    address_line1: str | None = None
    city: str | None = None
    state: str | None = None
    postal_code: str | None = None
    policy_ids: list[str] = []


class BeneficiaryUpdate(BaseModel):
    first_name: str | None = Field(default=None, min_length=1, max_length=100)
    last_name: str | None = Field(default=None, min_length=1, max_length=100)
    relationship_to_client: str | None = Field(default=None, max_length=100)
    email: str | None = Field(default=None, pattern=EMAIL_PATTERN, max_length=255)
    phone: str | None = None
    date_of_birth: date | None = None
    address_line1: str | None = None
    city: str | None = None
    state: str | None = None
    postal_code: str | None = None


class BeneficiaryAttachRequest(BaseModel):
    policy_id: str


class BeneficiaryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    client_id: str
    first_name: str
    last_name: str
    relationship_to_client: str | None = None
    email: str | None = None
    phone: str | None = None
    date_of_birth: date | None = None
    created_at: datetime


class BeneficiaryListResponse(BaseModel):
    data: list[BeneficiaryResponse]
    count: int
