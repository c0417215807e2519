# This project was developed with assistance from AI tools.
"""Client registry with role-based data scope filtering.

Attorneys see only clients they hold an active access grant for; admin and
staff see all. Out-of-scope lookups return None so routes answer 404 without
leaking existence.
"""

import hashlib
import logging
from datetime import date

from db import AttorneyClientAccess, Client
from db.enums import AuditAction, UserRole
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..schemas.auth import UserContext
from ..schemas.client import ClientCreate, ClientUpdate
from .access import grant_access
from .audit import write_audit_log
from .scope import apply_data_scope

logger = logging.getLogger(__name__)


class DuplicateClientError(ValueError):
    """Raised when a client with the same email or fingerprint already exists."""

    def __init__(self, existing_id: str):
        self.existing_id = existing_id
        super().__init__(f"Client already exists: {existing_id}")


def generate_client_fingerprint(
    *,
    email: str,
    first_name: str,
    last_name: str,
    date_of_birth: date | str | None = None,
    ssn_last_4: str | None = None,
    passport_number: str | None = None,
    drivers_license: str | None = None,
) -> str:
    """Identity fingerprint used to catch duplicate client records.

    Combines the normalized email with whichever strong identifiers are
    present. Parts are sorted before hashing so field order never matters.
    """
    parts = [f"email:{email.strip().lower()}"]
    if date_of_birth:
        dob = date_of_birth.isoformat() if isinstance(date_of_birth, date) else str(date_of_birth)
        dob = dob.split("T")[0]
        name = f"{first_name.strip().lower()}_{last_name.strip().lower()}"
        parts.append(f"name_dob:{name}_{dob}")
    if ssn_last_4:
        parts.append(f"ssn:{ssn_last_4.strip()}")
    if passport_number:
        parts.append(f"passport:{passport_number.strip().upper()}")
    if drivers_license:
        parts.append(f"dl:{drivers_license.strip().upper()}")
    return hashlib.sha256("|".join(sorted(parts)).encode()).hexdigest()


def fingerprint_for(client: Client) -> str:
    return generate_client_fingerprint(
        email=client.email,
        first_name=client.first_name,
        last_name=client.last_name,
        date_of_birth=client.date_of_birth,
        ssn_last_4=client.ssn_last_4,
        passport_number=client.passport_number,
        drivers_license=client.drivers_license,
    )


async def find_client_by_fingerprint(session: AsyncSession, fingerprint: str) -> Client | None:
    result = await session.execute(
        select(Client).where(Client.client_fingerprint == fingerprint).limit(1)
    )
    return result.scalar_one_or_none()


async def create_client(
    session: AsyncSession,
    user: UserContext,
    data: ClientCreate,
) -> Client:
    """Register a client and grant the creating attorney access to it.

    Raises:
        DuplicateClientError: email or identity fingerprint already registered.
    """
    fields = data.model_dump()
    fingerprint = generate_client_fingerprint(**{
        k: fields[k]
        for k in (
            "email", "first_name", "last_name", "date_of_birth",
            "ssn_last_4", "passport_number", "drivers_license",
        )
    })

    stmt = select(Client.id).where(
        or_(
            func.lower(Client.email) == data.email.lower(),
            Client.client_fingerprint == fingerprint,
        )
    ).limit(1)
    existing = (await session.execute(stmt)).scalar_one_or_none()
    if existing is not None:
        raise DuplicateClientError(existing)

    client = Client(**fields, client_fingerprint=fingerprint)
    session.add(client)
    await session.flush()

    await write_audit_log(
        session,
        AuditAction.CLIENT_CREATED,
        f"Client created: {client.first_name} {client.last_name}",
        user_id=user.user_id,
        client_id=client.id,
    )
    if user.role == UserRole.ATTORNEY:
        await grant_access(session, attorney_id=user.user_id, client_id=client.id, granted_by=user)

    await session.commit()
    await session.refresh(client)
    logger.info("Client %s created by %s", client.id, user.user_id)
    return client


async def list_clients(
    session: AsyncSession,
    user: UserContext,
    *,
    search: str | None = None,
    offset: int = 0,
    limit: int = 20,
) -> tuple[list[Client], int]:
    """Return clients visible to the current user, newest first."""
    count_stmt = apply_data_scope(select(func.count(Client.id)), user.data_scope)
    stmt = apply_data_scope(select(Client), user.data_scope)

    if search:
        pattern = f"%{search.strip()}%"
        condition = or_(
            Client.first_name.ilike(pattern),
            Client.last_name.ilike(pattern),
            Client.email.ilike(pattern),
        )
        count_stmt = count_stmt.where(condition)
        stmt = stmt.where(condition)

    total = (await session.execute(count_stmt)).scalar() or 0
    stmt = stmt.order_by(Client.created_at.desc()).offset(offset).limit(limit)
    result = await session.execute(stmt)
    return list(result.scalars().all()), total


async def get_client(
    session: AsyncSession,
    user: UserContext,
    client_id: str,
    *,
    record_view: bool = False,
) -> Client | None:
    """Return a single client if visible to the current user.

    Returns None (which the route maps to 404) for out-of-scope clients.
    """
    stmt = (
        select(Client)
        .options(selectinload(Client.policies))
        .where(Client.id == client_id)
    )
    stmt = apply_data_scope(stmt, user.data_scope)
    result = await session.execute(stmt)
    client = result.unique().scalar_one_or_none()

    if client is not None and record_view:
        await write_audit_log(
            session,
            AuditAction.CLIENT_VIEWED,
            f"Client viewed by {user.name or user.user_id}",
            user_id=user.user_id,
            client_id=client.id,
        )
        await session.commit()
    return client


def apply_client_changes(client: Client, changes: dict) -> list[str]:
    """Apply non-null changes to a client and refresh its fingerprint.

    Returns the names of the fields that actually changed.
    """
    changed = []
    for field, value in changes.items():
        if value is None or getattr(client, field) == value:
            continue
        setattr(client, field, value)
        changed.append(field)
    if changed:
        client.client_fingerprint = fingerprint_for(client)
    return changed


async def update_client(
    session: AsyncSession,
    user: UserContext,
    client_id: str,
    data: ClientUpdate,
) -> Client | None:
    client = await get_client(session, user, client_id)
    if client is None:
        return None

    changed = apply_client_changes(client, data.model_dump(exclude_unset=True))
    if changed:
        await write_audit_log(
            session,
            AuditAction.CLIENT_UPDATED,
            f"Client updated: {', '.join(sorted(changed))}",
            user_id=user.user_id,
            client_id=client.id,
        )
        await session.commit()
        await session.refresh(client)
    return client


async def attorneys_for_client(session: AsyncSession, client_id: str) -> list[str]:
    """Return identity-provider ids of attorneys actively assigned to a client."""
    stmt = select(AttorneyClientAccess.attorney_id).where(
        AttorneyClientAccess.client_id == client_id,
        AttorneyClientAccess.is_active.is_(True),
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())
