# This project was developed with assistance from AI tools.
"""Client invite and invite-portal schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from .client import ClientResponse
from .policy import PolicyResponse


class InviteResponse(BaseModel):
    """Invite as seen by staff. Includes the portal link."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    client_id: str
    token: str
    email: str
    expires_at: datetime
    used_at: datetime | None = None
    revoked_at: datetime | None = None
    created_at: datetime
    invite_url: str | None = None


class InvitePortalResponse(BaseModel):
    """What the invitee sees when opening their link."""

    client: ClientResponse
    policies: list[PolicyResponse]
    expires_at: datetime
    is_update: bool
