# This project was developed with assistance from AI tools.
"""Policy service with role-based data scope filtering."""

import logging
from datetime import UTC, date, datetime

from db import Client, Policy
from db.enums import AuditAction, PolicyVerificationStatus
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..schemas.auth import UserContext
from ..schemas.policy import PolicyCreate, PolicyUpdate
from .audit import write_audit_log
from .client import get_client
from .insurer import find_insurer_by_name, get_insurer
from .scope import apply_data_scope

logger = logging.getLogger(__name__)


class UnknownInsurerError(ValueError):
    """Raised when an explicit insurer id does not exist."""


async def resolve_carrier(
    session: AsyncSession,
    *,
    insurer_id: str | None = None,
    insurer_name: str | None = None,
) -> tuple[str | None, str | None]:
    """Resolve a carrier to ``(insurer_id, carrier_name_raw)``.

    An explicit id must exist. A free-text name is matched case-insensitively
    against the directory and otherwise kept verbatim as the raw carrier name.
    """
    if insurer_id:
        if await get_insurer(session, insurer_id) is None:
            raise UnknownInsurerError(f"Unknown insurer: {insurer_id}")
        return insurer_id, None

    insurer = await find_insurer_by_name(session, insurer_name)
    if insurer is not None:
        return insurer.id, None
    raw = insurer_name.strip() if insurer_name and insurer_name.strip() else None
    return None, raw


def _policy_query():
    return select(Policy).options(selectinload(Policy.insurer))


async def create_policy(
    session: AsyncSession,
    user: UserContext,
    client_id: str,
    data: PolicyCreate,
) -> Policy | None:
    """Register a policy for a visible client. Returns None when out of scope."""
    client = await get_client(session, user, client_id)
    if client is None:
        return None

    insurer_id, carrier_raw = await resolve_carrier(
        session, insurer_id=data.insurer_id, insurer_name=data.insurer_name
    )
    policy = Policy(
        client_id=client.id,
        insurer_id=insurer_id,
        carrier_name_raw=carrier_raw,
        policy_number=data.policy_number,
        policy_type=data.policy_type,
        verification_status=PolicyVerificationStatus.PENDING,
    )
    session.add(policy)
    await session.flush()
    await write_audit_log(
        session,
        AuditAction.POLICY_CREATED,
        f"Policy created: {data.policy_number or 'no number'}",
        user_id=user.user_id,
        client_id=client.id,
        policy_id=policy.id,
    )
    await session.commit()
    return await get_policy(session, user, policy.id)


async def list_client_policies(
    session: AsyncSession,
    user: UserContext,
    client_id: str,
) -> list[Policy] | None:
    """Return a visible client's policies oldest first, or None when out of scope."""
    if await get_client(session, user, client_id) is None:
        return None
    stmt = (
        _policy_query()
        .where(Policy.client_id == client_id)
        .order_by(Policy.created_at.asc(), Policy.id.asc())
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def get_policy(
    session: AsyncSession,
    user: UserContext,
    policy_id: str,
) -> Policy | None:
    stmt = _policy_query().where(Policy.id == policy_id)
    stmt = apply_data_scope(stmt, user.data_scope, client_column=Policy.client_id)
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def search_policies(
    session: AsyncSession,
    user: UserContext,
    query: str,
    *,
    limit: int = 50,
) -> list[Policy]:
    """Search visible policies by number, carrier, or insured's name."""
    pattern = f"%{query.strip()}%"
    stmt = (
        _policy_query()
        .join(Client, Client.id == Policy.client_id)
        .where(
            or_(
                Policy.policy_number.ilike(pattern),
                Policy.carrier_name_raw.ilike(pattern),
                Client.first_name.ilike(pattern),
                Client.last_name.ilike(pattern),
            )
        )
        .order_by(Policy.created_at.desc())
        .limit(limit)
    )
    stmt = apply_data_scope(stmt, user.data_scope, client_column=Policy.client_id)
    result = await session.execute(stmt)
    policies = list(result.scalars().all())

    await write_audit_log(
        session,
        AuditAction.POLICY_SEARCH_PERFORMED,
        f"Policy search for '{query.strip()}' returned {len(policies)} results",
        user_id=user.user_id,
    )
    await session.commit()
    return policies


async def locate_policies(
    session: AsyncSession,
    user: UserContext,
    *,
    first_name: str,
    last_name: str,
    date_of_birth: date | None = None,
    policy_number: str | None = None,
    limit: int = 100,
) -> list[Policy]:
    """Find the registered policies of a (typically deceased) person.

    First and last name are required partial, case-insensitive matches; date
    of birth must match exactly when given, and policy number is a partial
    match. Only clients inside the caller's scope are searched. Every search
    is audited with its criteria and result count.
    """
    first_name, last_name = first_name.strip(), last_name.strip()
    if not first_name or not last_name:
        raise ValueError("First name and last name are required")

    stmt = (
        _policy_query()
        .options(selectinload(Policy.client))
        .join(Client, Client.id == Policy.client_id)
        .where(
            Client.first_name.ilike(f"%{first_name}%"),
            Client.last_name.ilike(f"%{last_name}%"),
        )
    )
    if date_of_birth is not None:
        stmt = stmt.where(Client.date_of_birth == date_of_birth)
    if policy_number and policy_number.strip():
        stmt = stmt.where(Policy.policy_number.ilike(f"%{policy_number.strip()}%"))
    stmt = stmt.order_by(
        Client.last_name.asc(), Client.first_name.asc(), Policy.created_at.asc(), Policy.id.asc()
    ).limit(limit)
    stmt = apply_data_scope(stmt, user.data_scope, client_column=Policy.client_id)
    result = await session.execute(stmt)
    policies = list(result.scalars().all())

    criteria = f"{first_name} {last_name}"
    if date_of_birth is not None:
        criteria += f" (DOB: {date_of_birth.isoformat()})"
    if policy_number and policy_number.strip():
        criteria += f" | Policy #: {policy_number.strip()}"
    await write_audit_log(
        session,
        AuditAction.POLICY_SEARCH_PERFORMED,
        f"Policy locator: {criteria} | Results: {len(policies)}",
        user_id=user.user_id,
    )
    await session.commit()
    return policies


async def update_policy(
    session: AsyncSession,
    user: UserContext,
    policy_id: str,
    data: PolicyUpdate,
) -> Policy | None:
    """Apply edits to a policy.

    Editing a policy number changes what existing receipts for the client
    hash to; those receipts will subsequently fail verification.
    """
    policy = await get_policy(session, user, policy_id)
    if policy is None:
        return None

    changes = data.model_dump(exclude_unset=True)
    if "insurer_id" in changes or "insurer_name" in changes:
        policy.insurer_id, policy.carrier_name_raw = await resolve_carrier(
            session,
            insurer_id=changes.pop("insurer_id", None),
            insurer_name=changes.pop("insurer_name", None),
        )
    for field, value in changes.items():
        setattr(policy, field, value)

    await write_audit_log(
        session,
        AuditAction.POLICY_UPDATED,
        f"Policy {policy.policy_number or policy.id} updated",
        user_id=user.user_id,
        client_id=policy.client_id,
        policy_id=policy.id,
    )
    await session.commit()
    return await get_policy(session, user, policy_id)


async def verify_policy(
    session: AsyncSession,
    user: UserContext,
    policy_id: str,
    status: PolicyVerificationStatus,
    notes: str | None = None,
) -> Policy | None:
    """Record a verification decision on a policy."""
    policy = await get_policy(session, user, policy_id)
    if policy is None:
        return None

    policy.verification_status = status
    policy.verification_notes = notes
    policy.verified_at = datetime.now(UTC)
    policy.verified_by_user_id = user.user_id
    await write_audit_log(
        session,
        AuditAction.POLICY_UPDATED,
        f"Policy verification set to {status.value}",
        user_id=user.user_id,
        client_id=policy.client_id,
        policy_id=policy.id,
    )
    await session.commit()
    return await get_policy(session, user, policy_id)


async def resolve_policy_insurer(
    session: AsyncSession,
    user: UserContext,
    policy_id: str,
    insurer_id: str,
) -> Policy | None:
    """Attach an unresolved policy to a directory insurer (admin)."""
    policy = await get_policy(session, user, policy_id)
    if policy is None:
        return None
    if await get_insurer(session, insurer_id) is None:
        raise UnknownInsurerError(f"Unknown insurer: {insurer_id}")

    previous = policy.carrier_name_raw
    policy.insurer_id = insurer_id
    policy.carrier_name_raw = None
    await write_audit_log(
        session,
        AuditAction.POLICY_UPDATED,
        f"Carrier '{previous or 'unknown'}' resolved to insurer {insurer_id}",
        user_id=user.user_id,
        client_id=policy.client_id,
        policy_id=policy.id,
    )
    await session.commit()
    return await get_policy(session, user, policy_id)


async def load_client_policies(session: AsyncSession, client_id: str) -> list[Policy]:
    """All of a client's policies with insurers loaded, oldest first (unscoped).

    Used by the invite portal, where the invite token is the authorization.
    """
    stmt = (
        _policy_query()
        .where(Policy.client_id == client_id)
        .order_by(Policy.created_at.asc(), Policy.id.asc())
        .execution_options(populate_existing=True)
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())
