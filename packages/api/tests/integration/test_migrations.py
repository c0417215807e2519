# This project was developed with assistance from AI tools.
"""Schema integrity tests after alembic upgrade head."""

import pytest
from sqlalchemy import text

pytestmark = pytest.mark.integration


async def test_all_public_tables_exist(db_session):
    result = await db_session.execute(
        text("SELECT tablename FROM pg_tables WHERE schemaname = 'public' ORDER BY tablename")
    )
    tables = {row[0] for row in result.fetchall()}
    expected = {
        "clients",
        "insurers",
        "policies",
        "beneficiaries",
        "policy_beneficiaries",
        "client_invites",
        "attorney_client_access",
        "access_requests",
        "submissions",
        "receipts",
        "documents",
        "audit_logs",
        "immutable_row_violations",
    }
    missing = expected - tables
    assert not missing, f"Missing tables: {missing}"


async def test_guard_triggers_installed(db_session):
    result = await db_session.execute(
        text(
            "SELECT tgname FROM pg_trigger "
            "WHERE tgrelid IN ('receipts'::regclass, 'audit_logs'::regclass) "
            "AND NOT tgisinternal"
        )
    )
    triggers = {row[0] for row in result.fetchall()}
    assert triggers == {
        "audit_logs_no_update",
        "audit_logs_no_delete",
        "receipts_guard_update",
        "receipts_no_delete",
    }


async def test_client_email_is_unique(db_session):
    result = await db_session.execute(
        text(
            "SELECT indexdef FROM pg_indexes "
            "WHERE tablename = 'clients' AND indexdef LIKE '%UNIQUE%' AND indexdef LIKE '%email%'"
        )
    )
    assert result.first() is not None
