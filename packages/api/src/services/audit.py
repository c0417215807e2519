# This project was developed with assistance from AI tools.
"""Audit log service.

Appends entries to the ``audit_logs`` table (append-only, enforced by the
``audit_logs_prevent_mutation`` trigger) and provides the read-side
queries over it.

Writes are best-effort: each insert runs inside a SAVEPOINT so a failed audit
write rolls back only itself and never the operation it accompanies.
"""

import hashlib
import json
import logging
from datetime import datetime, timedelta, timezone

from db import AuditLog
from db.enums import AuditAction
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from .receipt_hash import format_receipt_timestamp

logger = logging.getLogger(__name__)

CLIENT_TRAIL_LIMIT = 1000


def compute_audit_entry_hash(entry: AuditLog) -> str:
    """Compute the SHA-256 hash of an audit entry's key fields."""
    action = entry.action.value if isinstance(entry.action, AuditAction) else entry.action
    payload = {
        "id": entry.id,
        "action": action,
        "message": entry.message,
        "user_id": entry.user_id,
        "client_id": entry.client_id,
        "policy_id": entry.policy_id,
        "created_at": format_receipt_timestamp(entry.created_at) if entry.created_at else None,
    }
    return hashlib.sha256(json.dumps(payload, sort_keys=True).encode()).hexdigest()


async def write_audit_log(
    session: AsyncSession,
    action: AuditAction,
    message: str,
    *,
    user_id: str | None = None,
    client_id: str | None = None,
    policy_id: str | None = None,
) -> AuditLog | None:
    """Append a single audit entry.

    Args:
        session: Database session (the caller owns commit/rollback).
        action: Closed action kind.
        message: Human-readable description.
        user_id: Identity-provider subject that performed the action.
        client_id: Related client, if any.
        policy_id: Related policy, if any.

    Returns:
        The flushed AuditLog row, or None when the write failed. Failures are
        logged and never propagate to the caller.
    """
    entry = AuditLog(
        action=action,
        message=message,
        user_id=user_id,
        client_id=client_id,
        policy_id=policy_id,
    )
    try:
        async with session.begin_nested():
            session.add(entry)
            await session.flush()
    except SQLAlchemyError:
        logger.exception(
            "Audit write failed (non-fatal): action=%s client=%s", action.value, client_id
        )
        return None
    return entry


async def get_client_audit_trail(
    session: AsyncSession,
    client_id: str,
    limit: int = CLIENT_TRAIL_LIMIT,
) -> list[AuditLog]:
    """Return a client's audit entries, newest first."""
    stmt = (
        select(AuditLog)
        .where(AuditLog.client_id == client_id)
        .order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
        .limit(limit)
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def get_client_audit_span(
    session: AsyncSession, client_id: str
) -> tuple[int, datetime | None, datetime | None]:
    """Entry count plus oldest and newest timestamps over the whole trail."""
    stmt = select(
        func.count(AuditLog.id), func.min(AuditLog.created_at), func.max(AuditLog.created_at)
    ).where(AuditLog.client_id == client_id)
    result = await session.execute(stmt)
    total, first_at, last_at = result.one()
    return total, first_at, last_at


async def get_recent_audit_logs(session: AsyncSession, limit: int = 50) -> list[AuditLog]:
    """Return the most recent audit entries across all clients."""
    stmt = select(AuditLog).order_by(AuditLog.created_at.desc(), AuditLog.id.desc()).limit(limit)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def search_audit_logs(
    session: AsyncSession,
    *,
    action: AuditAction | None = None,
    user_id: str | None = None,
    days: int | None = None,
    limit: int = 500,
) -> list[AuditLog]:
    """Search audit entries by action, actor, and/or recency."""
    stmt = select(AuditLog)
    if action is not None:
        stmt = stmt.where(AuditLog.action == action)
    if user_id is not None:
        stmt = stmt.where(AuditLog.user_id == user_id)
    if days is not None:
        cutoff = datetime.now(timezone.utc) - timedelta(days=days)
        stmt = stmt.where(AuditLog.created_at >= cutoff)
    stmt = stmt.order_by(AuditLog.created_at.desc(), AuditLog.id.desc()).limit(limit)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def count_audit_logs(session: AsyncSession, client_id: str | None = None) -> int:
    """Return the number of audit entries, optionally for one client."""
    stmt = select(func.count(AuditLog.id))
    if client_id is not None:
        stmt = stmt.where(AuditLog.client_id == client_id)
    result = await session.execute(stmt)
    return result.scalar_one()
