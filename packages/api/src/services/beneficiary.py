# This project was developed with assistance from AI tools.
"""Beneficiary service. Every lookup is scoped through the owning client."""

import logging

from db import Beneficiary, Policy, PolicyBeneficiary
from db.enums import AuditAction
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..schemas.auth import UserContext
from ..schemas.beneficiary import BeneficiaryCreate, BeneficiaryUpdate
from .audit import write_audit_log
from .client import get_client
from .scope import apply_data_scope

logger = logging.getLogger(__name__)


class BeneficiaryPolicyError(ValueError):
    """Raised when attaching a beneficiary to a policy of a different client."""


async def _client_policy(session: AsyncSession, client_id: str, policy_id: str) -> Policy:
    result = await session.execute(select(Policy).where(Policy.id == policy_id))
    policy = result.scalar_one_or_none()
    if policy is None or policy.client_id != client_id:
        raise BeneficiaryPolicyError(f"Policy {policy_id} does not belong to client {client_id}")
    return policy


async def create_beneficiary(
    session: AsyncSession,
    user: UserContext,
    client_id: str,
    data: BeneficiaryCreate,
) -> Beneficiary | None:
    client = await get_client(session, user, client_id)
    if client is None:
        return None

    fields = data.model_dump(exclude={"policy_ids"})
    beneficiary = Beneficiary(client_id=client.id, **fields)
    session.add(beneficiary)
    await session.flush()

    for policy_id in data.policy_ids:
        await _client_policy(session, client.id, policy_id)
        session.add(PolicyBeneficiary(policy_id=policy_id, beneficiary_id=beneficiary.id))

    await write_audit_log(
        session,
        AuditAction.BENEFICIARY_CREATED,
        f"Beneficiary added: {beneficiary.first_name} {beneficiary.last_name}",
        user_id=user.user_id,
        client_id=client.id,
    )
    await session.commit()
    await session.refresh(beneficiary)
    return beneficiary


async def list_beneficiaries(
    session: AsyncSession,
    user: UserContext,
    client_id: str,
) -> list[Beneficiary] | None:
    if await get_client(session, user, client_id) is None:
        return None
    stmt = (
        select(Beneficiary)
        .where(Beneficiary.client_id == client_id)
        .order_by(Beneficiary.created_at.asc())
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def get_beneficiary(
    session: AsyncSession,
    user: UserContext,
    beneficiary_id: str,
) -> Beneficiary | None:
    stmt = select(Beneficiary).where(Beneficiary.id == beneficiary_id)
    stmt = apply_data_scope(stmt, user.data_scope, client_column=Beneficiary.client_id)
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def update_beneficiary(
    session: AsyncSession,
    user: UserContext,
    beneficiary_id: str,
    data: BeneficiaryUpdate,
) -> Beneficiary | None:
    beneficiary = await get_beneficiary(session, user, beneficiary_id)
    if beneficiary is None:
        return None

    changed = []
    for field, value in data.model_dump(exclude_unset=True).items():
        if getattr(beneficiary, field) != value:
            setattr(beneficiary, field, value)
            changed.append(field)

    if changed:
        await write_audit_log(
            session,
            AuditAction.BENEFICIARY_UPDATED,
            f"Beneficiary updated: {', '.join(sorted(changed))}",
            user_id=user.user_id,
            client_id=beneficiary.client_id,
        )
        await session.commit()
        await session.refresh(beneficiary)
    return beneficiary


async def attach_beneficiary(
    session: AsyncSession,
    user: UserContext,
    beneficiary_id: str,
    policy_id: str,
) -> Beneficiary | None:
    """Link a beneficiary to one of the same client's policies.

    Raises:
        BeneficiaryPolicyError: the policy belongs to another client.
    """
    beneficiary = await get_beneficiary(session, user, beneficiary_id)
    if beneficiary is None:
        return None
    await _client_policy(session, beneficiary.client_id, policy_id)

    stmt = select(PolicyBeneficiary).where(
        PolicyBeneficiary.policy_id == policy_id,
        PolicyBeneficiary.beneficiary_id == beneficiary.id,
    )
    if (await session.execute(stmt)).scalar_one_or_none() is not None:
        return beneficiary

    session.add(PolicyBeneficiary(policy_id=policy_id, beneficiary_id=beneficiary.id))
    await write_audit_log(
        session,
        AuditAction.BENEFICIARY_UPDATED,
        f"Beneficiary {beneficiary.first_name} {beneficiary.last_name} attached to policy",
        user_id=user.user_id,
        client_id=beneficiary.client_id,
        policy_id=policy_id,
    )
    await session.commit()
    return beneficiary
