# This project was developed with assistance from AI tools.
"""Client registry summary: everything on file for one client, for probate."""

from dataclasses import dataclass, field

from db import Beneficiary, Client, Policy, PolicyBeneficiary
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..schemas.auth import UserContext
from .client import get_client


@dataclass
class ClientSummary:
    client: Client
    policies: list[Policy] = field(default_factory=list)
    beneficiaries: list[Beneficiary] = field(default_factory=list)


async def load_client_summary(
    session: AsyncSession,
    user: UserContext,
    client_id: str,
) -> ClientSummary | None:
    """Client with policies (insurer and beneficiaries loaded) and beneficiaries.

    Returns None when the client is outside the user's scope.
    """
    client = await get_client(session, user, client_id)
    if client is None:
        return None

    policies = await session.execute(
        select(Policy)
        .options(
            selectinload(Policy.insurer),
            selectinload(Policy.policy_beneficiaries).selectinload(PolicyBeneficiary.beneficiary),
        )
        .where(Policy.client_id == client_id)
        .order_by(Policy.created_at.asc(), Policy.id.asc())
    )
    beneficiaries = await session.execute(
        select(Beneficiary)
        .where(Beneficiary.client_id == client_id)
        .order_by(Beneficiary.last_name.asc(), Beneficiary.first_name.asc())
    )
    return ClientSummary(
        client=client,
        policies=list(policies.scalars().all()),
        beneficiaries=list(beneficiaries.scalars().all()),
    )
