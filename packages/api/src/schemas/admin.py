# This project was developed with assistance from AI tools.
"""Pydantic models for admin console and access request endpoints."""

from datetime import datetime
from typing import Any

from db.enums import AccessRequestStatus
from pydantic import BaseModel, ConfigDict, Field


class ConsoleCommandInfo(BaseModel):
    """Whitelisted console command, as listed for the UI."""

    id: str
    title: str
    description: str
    usage: str
    writes: bool


class ConsoleCommandsResponse(BaseModel):
    commands: list[ConsoleCommandInfo]


class ConsoleRequest(BaseModel):
    """Run one console command."""

    cmd: str = Field(min_length=1, max_length=64)
    args: dict[str, Any] = Field(default_factory=dict)


class ConsoleResponse(BaseModel):
    ok: bool
    cmd: str
    data: Any = None
    error: str | None = None


class NLPlanRequest(BaseModel):
    text: str = Field(min_length=1, max_length=2000)


class NLPlanResponse(BaseModel):
    """Command plan proposed for a natural-language request.

    ``cmd`` is None when no safe plan could be produced; ``safety_flags``
    explains why.
    """

    cmd: str | None = None
    args: dict[str, Any] = Field(default_factory=dict)
    explanation: str = ""
    requires_confirm: bool = False
    safety_flags: list[str] = Field(default_factory=list)


class NLExecuteRequest(BaseModel):
    cmd: str = Field(min_length=1, max_length=64)
    args: dict[str, Any] = Field(default_factory=dict)
    confirm: bool = False


class AccessRequestResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    attorney_id: str
    attorney_email: str | None = None
    client_id: str
    reason: str | None = None
    status: AccessRequestStatus
    decided_by: str | None = None
    decided_at: datetime | None = None
    created_at: datetime


class AccessRequestListResponse(BaseModel):
    data: list[AccessRequestResponse]
    count: int


class AccessGrantRequest(BaseModel):
    attorney_id: str = Field(min_length=1, max_length=255)
    client_id: str


class InviteReactivateRequest(BaseModel):
    ttl_days: int | None = Field(default=None, ge=1, le=365)
