# This project was developed with assistance from AI tools.
"""Attorney-client access grants and access requests.

Access requests are persisted rows (status PENDING -> APPROVED / DENIED);
approving one grants access in the same transaction.
"""

import logging
from datetime import UTC, datetime

from db import AccessRequest, AttorneyClientAccess, Client
from db.enums import AccessRequestStatus, AuditAction
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..schemas.auth import UserContext
from .audit import write_audit_log

logger = logging.getLogger(__name__)


class AccessRequestStateError(ValueError):
    """Raised when deciding an access request that is no longer pending."""


async def _get_grant(
    session: AsyncSession, attorney_id: str, client_id: str
) -> AttorneyClientAccess | None:
    stmt = select(AttorneyClientAccess).where(
        AttorneyClientAccess.attorney_id == attorney_id,
        AttorneyClientAccess.client_id == client_id,
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def attorney_can_access(session: AsyncSession, attorney_id: str, client_id: str) -> bool:
    grant = await _get_grant(session, attorney_id, client_id)
    return grant is not None and grant.is_active


async def grant_access(
    session: AsyncSession,
    *,
    attorney_id: str,
    client_id: str,
    granted_by: UserContext | None = None,
) -> AttorneyClientAccess:
    """Grant (or re-activate) an attorney's access to a client. Does not commit."""
    grant = await _get_grant(session, attorney_id, client_id)
    if grant is None:
        grant = AttorneyClientAccess(attorney_id=attorney_id, client_id=client_id, is_active=True)
        session.add(grant)
    elif not grant.is_active:
        grant.is_active = True
        grant.revoked_at = None
    else:
        return grant

    await session.flush()
    await write_audit_log(
        session,
        AuditAction.ACCESS_GRANTED,
        f"Access granted to attorney {attorney_id}",
        user_id=granted_by.user_id if granted_by else None,
        client_id=client_id,
    )
    return grant


async def revoke_access(
    session: AsyncSession,
    *,
    attorney_id: str,
    client_id: str,
    revoked_by: UserContext | None = None,
) -> AttorneyClientAccess | None:
    """Deactivate a grant. Returns None when no active grant exists. Does not commit."""
    grant = await _get_grant(session, attorney_id, client_id)
    if grant is None or not grant.is_active:
        return None

    grant.is_active = False
    grant.revoked_at = datetime.now(UTC)
    await session.flush()
    await write_audit_log(
        session,
        AuditAction.ACCESS_REVOKED,
        f"Access revoked for attorney {attorney_id}",
        user_id=revoked_by.user_id if revoked_by else None,
        client_id=client_id,
    )
    return grant


async def request_access(
    session: AsyncSession,
    user: UserContext,
    client_id: str,
    reason: str | None = None,
) -> AccessRequest | None:
    """File an access request for an existing client.

    Returns None if the client does not exist. An already-pending request
    from the same attorney is returned as-is.
    """
    client = (
        await session.execute(select(Client.id).where(Client.id == client_id))
    ).scalar_one_or_none()
    if client is None:
        return None

    stmt = select(AccessRequest).where(
        AccessRequest.attorney_id == user.user_id,
        AccessRequest.client_id == client_id,
        AccessRequest.status == AccessRequestStatus.PENDING,
    )
    existing = (await session.execute(stmt)).scalar_one_or_none()
    if existing is not None:
        return existing

    access_request = AccessRequest(
        attorney_id=user.user_id,
        attorney_email=user.email,
        client_id=client_id,
        reason=reason,
        status=AccessRequestStatus.PENDING,
    )
    session.add(access_request)
    await session.flush()
    await write_audit_log(
        session,
        AuditAction.ACCESS_REQUESTED,
        f"Access requested by attorney {user.user_id}",
        user_id=user.user_id,
        client_id=client_id,
    )
    await session.commit()
    return access_request


async def list_access_requests(
    session: AsyncSession,
    status: AccessRequestStatus | None = AccessRequestStatus.PENDING,
    limit: int = 100,
) -> list[AccessRequest]:
    stmt = select(AccessRequest)
    if status is not None:
        stmt = stmt.where(AccessRequest.status == status)
    stmt = stmt.order_by(AccessRequest.created_at.desc()).limit(limit)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def decide_access_request(
    session: AsyncSession,
    admin: UserContext,
    request_id: str,
    *,
    approve: bool,
) -> AccessRequest | None:
    """Approve or deny a pending request. Returns None if it does not exist.

    Raises:
        AccessRequestStateError: the request was already decided.
    """
    access_request = (
        await session.execute(select(AccessRequest).where(AccessRequest.id == request_id))
    ).scalar_one_or_none()
    if access_request is None:
        return None
    if access_request.status != AccessRequestStatus.PENDING:
        raise AccessRequestStateError(
            f"Access request {request_id} already {access_request.status.value}"
        )

    access_request.status = AccessRequestStatus.APPROVED if approve else AccessRequestStatus.DENIED
    access_request.decided_by = admin.user_id
    access_request.decided_at = datetime.now(UTC)
    if approve:
        await grant_access(
            session,
            attorney_id=access_request.attorney_id,
            client_id=access_request.client_id,
            granted_by=admin,
        )
    await session.commit()
    logger.info(
        "Access request %s %s by %s",
        request_id,
        access_request.status.value,
        admin.user_id,
    )
    return access_request
