# This project was developed with assistance from AI tools.
"""Insurer directory. Insurers are created explicitly, never from free text."""

from db import Insurer
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession


class DuplicateInsurerError(ValueError):
    """Raised when an insurer with the same name (case-insensitive) exists."""


async def list_insurers(
    session: AsyncSession,
    *,
    search: str | None = None,
    limit: int = 100,
) -> list[Insurer]:
    stmt = select(Insurer)
    if search:
        stmt = stmt.where(Insurer.name.ilike(f"%{search.strip()}%"))
    stmt = stmt.order_by(Insurer.name.asc()).limit(limit)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def find_insurer_by_name(session: AsyncSession, name: str | None) -> Insurer | None:
    """Case-insensitive exact name match."""
    if not name or not name.strip():
        return None
    stmt = select(Insurer).where(func.lower(Insurer.name) == name.strip().lower()).limit(1)
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def get_insurer(session: AsyncSession, insurer_id: str) -> Insurer | None:
    result = await session.execute(select(Insurer).where(Insurer.id == insurer_id))
    return result.scalar_one_or_none()


async def create_insurer(
    session: AsyncSession,
    *,
    name: str,
    contact_phone: str | None = None,
    contact_email: str | None = None,
    website: str | None = None,
) -> Insurer:
    if await find_insurer_by_name(session, name) is not None:
        raise DuplicateInsurerError(f"Insurer already exists: {name}")

    insurer = Insurer(
        name=name.strip(),
        contact_phone=contact_phone,
        contact_email=contact_email,
        website=website,
    )
    session.add(insurer)
    await session.commit()
    await session.refresh(insurer)
    return insurer
