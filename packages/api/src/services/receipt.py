# This project was developed with assistance from AI tools.
"""Receipt creation and verification.

A receipt's hash covers every policy of its client created at or before the
receipt's *persisted* ``created_at``. Creation therefore runs in a strict
order: insert the row, read the database-assigned timestamp back, query the
policy snapshot bounded by that timestamp, then hash. Verification repeats
the same snapshot query against the stored timestamp.

Known fragility: the database clock is the only source of truth for
"creation time". PostgreSQL ``now()`` is the transaction start time, so a
policy inserted earlier in the receipt's own transaction shares the
receipt's timestamp and is included (the window is ``<=``). A policy for the
same client committed by a concurrent transaction that started earlier but
commits later can carry a timestamp inside the window without being visible
at creation time; such a receipt will later fail verification.
"""

import hmac
import logging
import re
import time
from dataclasses import dataclass
from datetime import datetime

from db import Policy, Receipt
from db.enums import AuditAction
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .audit import (
    compute_audit_entry_hash,
    get_client_audit_span,
    get_client_audit_trail,
    write_audit_log,
)
from .receipt_hash import (
    MalformedReceiptInput,
    PolicySnapshot,
    format_receipt_timestamp,
    generate_receipt_hash,
)

logger = logging.getLogger(__name__)

_HEX_DIGEST = re.compile(r"[0-9a-f]{64}")


class ReceiptNotFoundError(LookupError):
    """Raised when a receipt id does not resolve to a stored receipt."""


@dataclass(frozen=True)
class ReceiptVerification:
    """Outcome of recomputing a receipt's hash."""

    receipt_id: str
    receipt_number: str
    client_id: str
    created_at: datetime
    matches: bool
    expected_hash: str | None
    recomputed_hash: str
    policies_hashed: int


class ReceiptIntegrityError(Exception):
    """Raised when a receipt exists but its recomputed hash differs.

    Indicates tampering with (or drift in) the policy rows covered by the
    receipt. Carries the full verification so callers can report both digests.
    """

    def __init__(self, verification: ReceiptVerification):
        self.verification = verification
        super().__init__(
            f"Receipt {verification.receipt_id} hash mismatch: "
            f"expected={verification.expected_hash} recomputed={verification.recomputed_hash}"
        )


def generate_receipt_number(client_id: str) -> str:
    """Human-readable receipt number: REC-<first 8 of client id>-<epoch ms>."""
    prefix = client_id.replace("-", "")[:8].upper()
    return f"REC-{prefix}-{int(time.time() * 1000)}"


async def load_policy_snapshot(
    session: AsyncSession,
    client_id: str,
    cutoff: datetime,
) -> list[PolicySnapshot]:
    """Return the client's policies created at or before ``cutoff``."""
    stmt = (
        select(Policy.id, Policy.policy_number, Policy.created_at)
        .where(Policy.client_id == client_id, Policy.created_at <= cutoff)
        .order_by(Policy.created_at.asc(), Policy.id.asc())
    )
    result = await session.execute(stmt)
    return [
        PolicySnapshot(id=row.id, policy_number=row.policy_number, created_at=row.created_at)
        for row in result.all()
    ]


async def create_receipt(
    session: AsyncSession,
    *,
    client_id: str,
    submission_id: str | None = None,
    invite_id: str | None = None,
    user_id: str | None = None,
) -> Receipt:
    """Insert a receipt and bind its hash to the client's current policies.

    Pending policy rows in ``session`` are flushed with the receipt and are
    therefore part of the snapshot. The caller owns the commit.
    """
    if not client_id:
        raise MalformedReceiptInput("client id is required to create a receipt")

    receipt = Receipt(
        client_id=client_id,
        submission_id=submission_id,
        invite_id=invite_id,
        receipt_number=generate_receipt_number(client_id),
    )
    session.add(receipt)
    await session.flush()

    # Read back the database-assigned timestamp; never use the app clock here.
    await session.refresh(receipt)

    policies = await load_policy_snapshot(session, client_id, receipt.created_at)
    receipt.receipt_hash = generate_receipt_hash(
        receipt.id, receipt.client_id, receipt.created_at, policies
    )
    await session.flush()

    logger.info(
        "Receipt %s created for client %s covering %d policies",
        receipt.receipt_number,
        client_id,
        len(policies),
    )
    await write_audit_log(
        session,
        AuditAction.RECEIPT_CREATED,
        f"Receipt {receipt.receipt_number} created covering {len(policies)} policies",
        user_id=user_id,
        client_id=client_id,
    )
    return receipt


async def get_receipt(session: AsyncSession, receipt_id: str) -> Receipt | None:
    result = await session.execute(select(Receipt).where(Receipt.id == receipt_id))
    return result.scalar_one_or_none()


async def get_receipt_by_number(session: AsyncSession, receipt_number: str) -> Receipt | None:
    result = await session.execute(
        select(Receipt).where(Receipt.receipt_number == receipt_number)
    )
    return result.scalar_one_or_none()


async def list_client_receipts(session: AsyncSession, client_id: str) -> list[Receipt]:
    stmt = (
        select(Receipt)
        .where(Receipt.client_id == client_id)
        .order_by(Receipt.created_at.desc(), Receipt.id.desc())
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def recompute_receipt_hash(
    session: AsyncSession,
    receipt_id: str,
) -> tuple[Receipt, str, int]:
    """Recompute a stored receipt's hash from its persisted inputs.

    Returns:
        (receipt, recomputed digest, number of policies hashed)

    Raises:
        MalformedReceiptInput: ``receipt_id`` is empty.
        ReceiptNotFoundError: no receipt has this id.
    """
    if not receipt_id or not receipt_id.strip():
        raise MalformedReceiptInput("receipt id is required for verification")

    receipt = await get_receipt(session, receipt_id)
    if receipt is None:
        raise ReceiptNotFoundError(receipt_id)

    policies = await load_policy_snapshot(session, receipt.client_id, receipt.created_at)
    digest = generate_receipt_hash(receipt.id, receipt.client_id, receipt.created_at, policies)
    return receipt, digest, len(policies)


async def verify_receipt(
    session: AsyncSession,
    receipt_id: str,
    expected_hash: str | None = None,
) -> ReceiptVerification:
    """Verify a receipt against its stored hash or a caller-supplied one.

    Raises:
        MalformedReceiptInput: ``receipt_id`` is empty.
        ReceiptNotFoundError: the receipt does not exist.
        ReceiptIntegrityError: the receipt exists but the digests differ. A
            receipt with no stored hash and no supplied hash cannot be
            verified and is reported the same way.
    """
    receipt, recomputed, count = await recompute_receipt_hash(session, receipt_id)

    expected = receipt.receipt_hash
    if expected_hash is not None:
        expected = expected_hash.strip().lower()
        if not _HEX_DIGEST.fullmatch(expected):
            raise MalformedReceiptInput("expected hash must be 64 hexadecimal characters")
    matches = expected is not None and hmac.compare_digest(expected, recomputed)

    verification = ReceiptVerification(
        receipt_id=receipt.id,
        receipt_number=receipt.receipt_number,
        client_id=receipt.client_id,
        created_at=receipt.created_at,
        matches=matches,
        expected_hash=expected,
        recomputed_hash=recomputed,
        policies_hashed=count,
    )
    if not matches:
        raise ReceiptIntegrityError(verification)
    return verification


async def get_receipts_audit(session: AsyncSession, client_id: str) -> dict:
    """Build the receipts-and-audit-trail report for a client.

    Every receipt is re-hashed against its own timestamp window, and every
    audit entry (newest first, capped) carries its own entry hash. The
    summary counts and dates cover the full trail, not just the returned page.
    """
    receipts = await list_client_receipts(session, client_id)
    receipt_rows = []
    for receipt in receipts:
        policies = await load_policy_snapshot(session, client_id, receipt.created_at)
        recomputed = generate_receipt_hash(
            receipt.id, receipt.client_id, receipt.created_at, policies
        )
        receipt_rows.append(
            {
                "id": receipt.id,
                "receipt_number": receipt.receipt_number,
                "created_at": format_receipt_timestamp(receipt.created_at),
                "email_sent": receipt.email_sent,
                "stored_hash": receipt.receipt_hash,
                "recomputed_hash": recomputed,
                "matches": receipt.receipt_hash is not None
                and hmac.compare_digest(receipt.receipt_hash, recomputed),
                "policies": [
                    {"id": p.id, "policy_number": p.policy_number} for p in policies
                ],
            }
        )

    entries = await get_client_audit_trail(session, client_id)
    audit_rows = [
        {
            "id": entry.id,
            "action": entry.action.value if isinstance(entry.action, AuditAction) else entry.action,
            "message": entry.message,
            "user_id": entry.user_id,
            "policy_id": entry.policy_id,
            "created_at": format_receipt_timestamp(entry.created_at),
            "hash": compute_audit_entry_hash(entry),
        }
        for entry in entries
    ]
    total_entries, first_at, last_at = await get_client_audit_span(session, client_id)

    return {
        "client_id": client_id,
        "receipts": receipt_rows,
        "audit_log": audit_rows,
        "summary": {
            "total_receipts": len(receipt_rows),
            "tampered_receipts": sum(1 for r in receipt_rows if not r["matches"]),
            "total_audit_entries": total_entries,
            "returned_audit_entries": len(audit_rows),
            "first_entry_at": format_receipt_timestamp(first_at) if first_at else None,
            "last_entry_at": format_receipt_timestamp(last_at) if last_at else None,
        },
    }


async def verify_and_record(
    session: AsyncSession,
    receipt_id: str,
    expected_hash: str | None = None,
    *,
    user_id: str | None = None,
) -> ReceiptVerification:
    """Verify a receipt and record the outcome in the audit log.

    A mismatch is a tamper signal: it is logged at WARNING, audited as
    ``RECEIPT_TAMPER_DETECTED`` and returned (``matches=False``) rather than
    raised. Not-found and malformed input still raise.
    """
    try:
        verification = await verify_receipt(session, receipt_id, expected_hash)
    except ReceiptIntegrityError as exc:
        verification = exc.verification
        logger.warning(
            "Receipt hash mismatch: receipt=%s expected=%s recomputed=%s",
            verification.receipt_id,
            verification.expected_hash,
            verification.recomputed_hash,
        )
        await write_audit_log(
            session,
            AuditAction.RECEIPT_TAMPER_DETECTED,
            f"Receipt {verification.receipt_number} failed verification",
            user_id=user_id,
            client_id=verification.client_id,
        )
    else:
        await write_audit_log(
            session,
            AuditAction.RECEIPT_VERIFIED,
            f"Receipt {verification.receipt_number} verified",
            user_id=user_id,
            client_id=verification.client_id,
        )
    await session.commit()
    return verification
