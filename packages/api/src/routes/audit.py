# This project was developed with assistance from AI tools.
"""Audit trail query endpoints."""

from db import get_db
from db.enums import AuditAction, UserRole
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import CurrentUser, require_roles
from ..schemas.audit import AuditByClientResponse, AuditLogItem, AuditSearchResponse
from ..services.audit import get_client_audit_trail, search_audit_logs
from ..services.client import get_client

router = APIRouter()


@router.get(
    "/client/{client_id}",
    response_model=AuditByClientResponse,
    dependencies=[Depends(require_roles(UserRole.ADMIN, UserRole.ATTORNEY, UserRole.STAFF))],
)
async def audit_by_client(
    client_id: str,
    user: CurrentUser,
    limit: int = Query(default=1000, ge=1, le=1000),
    session: AsyncSession = Depends(get_db),
) -> AuditByClientResponse:
    """Audit trail for one client, newest first."""
    if await get_client(session, user, client_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Client not found")
    entries = await get_client_audit_trail(session, client_id, limit=limit)
    return AuditByClientResponse(
        client_id=client_id,
        count=len(entries),
        events=[AuditLogItem.model_validate(e) for e in entries],
    )


@router.get(
    "/search",
    response_model=AuditSearchResponse,
    dependencies=[Depends(require_roles(UserRole.ADMIN))],
)
async def search_audit(
    action: AuditAction | None = None,
    user_id: str | None = Query(default=None, max_length=255),
    days: int | None = Query(default=None, ge=1, le=3650),
    limit: int = Query(default=500, ge=1, le=1000),
    session: AsyncSession = Depends(get_db),
) -> AuditSearchResponse:
    """Search audit entries across all clients (admin)."""
    entries = await search_audit_logs(
        session, action=action, user_id=user_id, days=days, limit=limit
    )
    return AuditSearchResponse(
        count=len(entries),
        events=[AuditLogItem.model_validate(e) for e in entries],
    )
