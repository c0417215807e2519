# This project was developed with assistance from AI tools.
"""Insurer directory schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class InsurerCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    contact_phone: str | None = None
    contact_email: str | None = None
    website: str | None = None


class InsurerResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    contact_phone: str | None = None
    contact_email: str | None = None
    website: str | None = None
    created_at: datetime


class InsurerListResponse(BaseModel):
    data: list[InsurerResponse]
    count: int
