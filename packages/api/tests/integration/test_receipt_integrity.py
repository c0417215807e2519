# This project was developed with assistance from AI tools.
"""Receipt hashing against real rows: snapshot window, tamper detection."""

from datetime import UTC, datetime, timedelta

import pytest
from db.enums import AuditAction
from db.models import AuditLog, Policy
from sqlalchemy import select, text

from src.services.receipt import (
    ReceiptIntegrityError,
    create_receipt,
    get_receipts_audit,
    verify_and_record,
    verify_receipt,
)

pytestmark = pytest.mark.integration


async def test_receipt_hash_covers_existing_policies(db_session, seeded_client):
    client, policies = seeded_client

    receipt = await create_receipt(db_session, client_id=client.id)

    assert receipt.receipt_hash is not None
    assert len(receipt.receipt_hash) == 64
    assert receipt.receipt_number.startswith("REC-")
    verification = await verify_receipt(db_session, receipt.id)
    assert verification.matches is True
    assert verification.policies_hashed == len(policies)


async def test_later_policy_does_not_affect_receipt(db_session, seeded_client):
    client, _ = seeded_client
    receipt = await create_receipt(db_session, client_id=client.id)

    db_session.add(
        Policy(
            client_id=client.id,
            policy_number="POL-333333",
            created_at=datetime.now(UTC) + timedelta(days=1),
        )
    )
    await db_session.flush()

    verification = await verify_receipt(db_session, receipt.id)
    assert verification.matches is True
    assert verification.policies_hashed == 2


async def test_edited_policy_number_is_detected(db_session, seeded_client):
    client, policies = seeded_client
    receipt = await create_receipt(db_session, client_id=client.id)

    await db_session.execute(
        text("UPDATE policies SET policy_number = 'POL-999999' WHERE id = :id"),
        {"id": policies[0].id},
    )

    with pytest.raises(ReceiptIntegrityError) as exc_info:
        await verify_receipt(db_session, receipt.id)
    assert exc_info.value.verification.expected_hash == receipt.receipt_hash


async def test_tamper_is_audited(db_session, seeded_client):
    client, policies = seeded_client
    receipt = await create_receipt(db_session, client_id=client.id)
    await db_session.execute(
        text("DELETE FROM policies WHERE id = :id"), {"id": policies[1].id}
    )

    verification = await verify_and_record(db_session, receipt.id, user_id="staff-ortiz-003")

    assert verification.matches is False
    result = await db_session.execute(
        select(AuditLog).where(
            AuditLog.client_id == client.id,
            AuditLog.action == AuditAction.RECEIPT_TAMPER_DETECTED,
        )
    )
    assert result.scalar_one_or_none() is not None


async def test_caller_supplied_hash(db_session, seeded_client):
    client, _ = seeded_client
    receipt = await create_receipt(db_session, client_id=client.id)

    assert (await verify_receipt(db_session, receipt.id, receipt.receipt_hash.upper())).matches
    with pytest.raises(ReceiptIntegrityError):
        await verify_receipt(db_session, receipt.id, "0" * 64)


async def test_receipts_audit_report(db_session, seeded_client):
    client, policies = seeded_client
    await create_receipt(db_session, client_id=client.id)

    report = await get_receipts_audit(db_session, client.id)

    assert report["summary"]["total_receipts"] == 1
    assert report["summary"]["tampered_receipts"] == 0
    row = report["receipts"][0]
    assert row["matches"] is True
    assert [p["policy_number"] for p in row["policies"]] == [p.policy_number for p in policies]
    assert any(e["action"] == "RECEIPT_CREATED" for e in report["audit_log"])
