# This project was developed with assistance from AI tools.
"""Client request/response schemas."""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

from . import EMAIL_PATTERN, Pagination


class ClientCreate(BaseModel):
    """Register a new client."""

    email: str = Field(pattern=EMAIL_PATTERN, max_length=255)
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    phone: str | None = None
    date_of_birth: date | None = None
    ssn_last_4: str | None = Field(default=None, pattern=r"^\d{4}$")
    maiden_name: str | None = None
    drivers_license: str | None = None
    passport_number: str | None = None
    address_line1: str | None = None
    address_line2: str | None = None
    city: str | None = None
    state: str | None = None
    postal_code: str | None = None
    country: str | None = None


class ClientUpdate(BaseModel):
    """Partial update to an existing client. Null fields are left unchanged."""

    email: str | None = Field(default=None, pattern=EMAIL_PATTERN, max_length=255)
    first_name: str | None = Field(default=None, min_length=1, max_length=100)
    last_name: str | None = Field(default=None, min_length=1, max_length=100)
    phone: str | None = None
    date_of_birth: date | None = None
    ssn_last_4: str | None = Field(default=None, pattern=r"^\d{4}$")
    maiden_name: str | None = None
    drivers_license: str | None = None
    passport_number: str | None = None
    address_line1: str | None = None
    address_line2: str | None = None
    city: str | None = None
    state: str | None = None
    postal_code: str | None = None
    country: str | None = None


class ClientResponse(BaseModel):
    """Single client response (no nested relationships)."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    first_name: str
    last_name: str
    email: str
    phone: str | None = None
    date_of_birth: date | None = None
    maiden_name: str | None = None
    address_line1: str | None = None
    address_line2: str | None = None
    city: str | None = None
    state: str | None = None
    postal_code: str | None = None
    country: str | None = None
    created_at: datetime
    updated_at: datetime


class ClientListResponse(BaseModel):
    """Paginated list of clients."""

    data: list[ClientResponse]
    pagination: Pagination


class AccessRequestCreate(BaseModel):
    """Attorney request for access to an existing client."""

    reason: str | None = Field(default=None, max_length=2000)
