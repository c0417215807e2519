# This project was developed with assistance from AI tools.
"""Database guards on receipts and audit_logs.

The triggers reject mutation even for the application's own database user;
each attempt is logged to immutable_row_violations before the statement
fails (the log row is rolled back with it).
"""

import pytest
from db.enums import AuditAction
from sqlalchemy import text
from sqlalchemy.exc import DBAPIError

from src.services.audit import write_audit_log
from src.services.receipt import create_receipt

pytestmark = pytest.mark.integration


async def _attempt(session, sql: str, params: dict):
    async with session.begin_nested():
        await session.execute(text(sql), params)


async def test_audit_log_insert_allowed(db_session):
    entry = await write_audit_log(db_session, AuditAction.CLIENT_CREATED, "Client created")
    assert entry is not None
    assert entry.id is not None


async def test_audit_log_update_blocked(db_session):
    entry = await write_audit_log(db_session, AuditAction.CLIENT_CREATED, "Client created")

    with pytest.raises(DBAPIError, match="append-only"):
        await _attempt(
            db_session,
            "UPDATE audit_logs SET message = 'rewritten' WHERE id = :id",
            {"id": entry.id},
        )


async def test_audit_log_delete_blocked(db_session):
    entry = await write_audit_log(db_session, AuditAction.CLIENT_CREATED, "Client created")

    with pytest.raises(DBAPIError, match="append-only"):
        await _attempt(db_session, "DELETE FROM audit_logs WHERE id = :id", {"id": entry.id})


async def test_receipt_hash_cannot_be_rewritten(db_session, seeded_client):
    client, _ = seeded_client
    receipt = await create_receipt(db_session, client_id=client.id)

    with pytest.raises(DBAPIError, match="immutable"):
        await _attempt(
            db_session,
            "UPDATE receipts SET receipt_hash = :h WHERE id = :id",
            {"h": "0" * 64, "id": receipt.id},
        )


async def test_receipt_number_cannot_change(db_session, seeded_client):
    client, _ = seeded_client
    receipt = await create_receipt(db_session, client_id=client.id)

    with pytest.raises(DBAPIError, match="immutable"):
        await _attempt(
            db_session,
            "UPDATE receipts SET receipt_number = 'REC-FORGED' WHERE id = :id",
            {"id": receipt.id},
        )


async def test_receipt_delete_blocked(db_session, seeded_client):
    client, _ = seeded_client
    receipt = await create_receipt(db_session, client_id=client.id)

    with pytest.raises(DBAPIError, match="immutable"):
        await _attempt(db_session, "DELETE FROM receipts WHERE id = :id", {"id": receipt.id})


async def test_receipt_email_delivery_can_be_recorded(db_session, seeded_client):
    client, _ = seeded_client
    receipt = await create_receipt(db_session, client_id=client.id)

    await db_session.execute(
        text("UPDATE receipts SET email_sent = true, email_sent_at = now() WHERE id = :id"),
        {"id": receipt.id},
    )
    result = await db_session.execute(
        text("SELECT email_sent FROM receipts WHERE id = :id"), {"id": receipt.id}
    )
    assert result.scalar() is True
