# This project was developed with assistance from AI tools.
"""Client invites: single link per client for first registration and later updates.

An invite stays usable for updates after it has been accepted. It is refused
once revoked, or once more than ``INVITE_GRACE_DAYS`` have passed since it
expired.
"""

import logging
import secrets
from datetime import UTC, datetime, timedelta

from db import ClientInvite
from db.enums import AuditAction
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..core.config import settings
from ..schemas.auth import UserContext
from .audit import write_audit_log
from .client import get_client
from .email import portal_url, send_client_invite

logger = logging.getLogger(__name__)


class InviteNotFoundError(LookupError):
    """Raised when a token does not match any invite."""


class InviteExpiredError(Exception):
    """Raised when an invite was revoked or is past its grace period."""


def generate_invite_token() -> str:
    return secrets.token_urlsafe(32)


def _as_utc(value: datetime) -> datetime:
    return value.replace(tzinfo=UTC) if value.tzinfo is None else value


def is_invite_usable(invite: ClientInvite, now: datetime | None = None) -> bool:
    """True unless revoked or more than the grace period past expiry."""
    if invite.revoked_at is not None:
        return False
    now = now or datetime.now(UTC)
    cutoff = _as_utc(invite.expires_at) + timedelta(days=settings.INVITE_GRACE_DAYS)
    return now <= cutoff


async def create_invite(
    session: AsyncSession,
    user: UserContext,
    client_id: str,
    *,
    send_email: bool = True,
) -> ClientInvite | None:
    """Issue a new invite for a visible client. Returns None when out of scope.

    The invite email is best-effort; a delivery failure is logged only.
    """
    client = await get_client(session, user, client_id)
    if client is None:
        return None

    invite = ClientInvite(
        client_id=client.id,
        token=generate_invite_token(),
        email=client.email,
        expires_at=datetime.now(UTC) + timedelta(days=settings.INVITE_TTL_DAYS),
        invited_by_user_id=user.user_id,
    )
    session.add(invite)
    await session.flush()
    await write_audit_log(
        session,
        AuditAction.INVITE_CREATED,
        f"Invite created for {client.email}",
        user_id=user.user_id,
        client_id=client.id,
    )
    await session.commit()
    await session.refresh(invite)

    if send_email:
        await send_client_invite(
            to=client.email,
            client_name=f"{client.first_name} {client.last_name}",
            token=invite.token,
        )
    return invite


async def list_client_invites(
    session: AsyncSession,
    user: UserContext,
    client_id: str,
) -> list[ClientInvite] | None:
    if await get_client(session, user, client_id) is None:
        return None
    stmt = (
        select(ClientInvite)
        .where(ClientInvite.client_id == client_id)
        .order_by(ClientInvite.created_at.desc())
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def lookup_invite(session: AsyncSession, token: str) -> ClientInvite:
    """Resolve a portal token to its invite, with the client loaded.

    Raises:
        InviteNotFoundError: unknown token.
        InviteExpiredError: revoked, or beyond the grace period.
    """
    if not token:
        raise InviteNotFoundError("Invite token is required")
    stmt = (
        select(ClientInvite)
        .options(selectinload(ClientInvite.client))
        .where(ClientInvite.token == token)
    )
    invite = (await session.execute(stmt)).scalar_one_or_none()
    if invite is None:
        raise InviteNotFoundError("Invite not found")
    if not is_invite_usable(invite):
        logger.info("Refused stale invite %s for client %s", invite.id, invite.client_id)
        raise InviteExpiredError("This invitation has expired. Ask your attorney for a new link.")
    return invite


async def reactivate_invite(
    session: AsyncSession,
    admin: UserContext,
    invite_id: str,
    *,
    ttl_days: int | None = None,
) -> ClientInvite | None:
    """Give an invite a fresh expiry and clear any revocation (admin)."""
    invite = (
        await session.execute(select(ClientInvite).where(ClientInvite.id == invite_id))
    ).scalar_one_or_none()
    if invite is None:
        return None

    invite.expires_at = datetime.now(UTC) + timedelta(days=ttl_days or settings.INVITE_TTL_DAYS)
    invite.revoked_at = None
    await write_audit_log(
        session,
        AuditAction.INVITE_REACTIVATED,
        f"Invite reactivated until {invite.expires_at.date().isoformat()}",
        user_id=admin.user_id,
        client_id=invite.client_id,
    )
    await session.commit()
    await session.refresh(invite)
    return invite


def invite_url(invite: ClientInvite) -> str:
    return portal_url(invite.token)
