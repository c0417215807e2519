# This project was developed with assistance from AI tools.
"""Tests for the admin console command dispatcher."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from db.enums import AuditAction

from src.services.console.commands import (
    COMMANDS,
    WRITE_COMMANDS,
    CommandError,
    execute_command,
    optional_int,
    require_string,
)
from src.services.receipt import ReceiptVerification

from tests.factories import make_mock_receipt
from tests.functional.personas import admin, staff

MODULE = "src.services.console.commands"


def _session():
    session = AsyncMock()
    session.add = MagicMock()
    return session


# ---------------------------------------------------------------------------
# Argument helpers
# ---------------------------------------------------------------------------


def test_require_string_strips_and_rejects_blank():
    assert require_string({"k": "  v "}, "k") == "v"
    with pytest.raises(CommandError, match="k"):
        require_string({"k": "  "}, "k")
    with pytest.raises(CommandError):
        require_string({"k": 5}, "k")


def test_optional_int_clamps():
    assert optional_int({}, "limit", 25, low=1, high=200) == 25
    assert optional_int({"limit": "500"}, "limit", 25, low=1, high=200) == 200
    assert optional_int({"limit": 0}, "limit", 25, low=1, high=200) == 1
    with pytest.raises(CommandError):
        optional_int({"limit": "many"}, "limit", 25, low=1, high=200)


def test_write_commands_are_flagged():
    assert WRITE_COMMANDS == {"access:grant", "access:revoke", "invites:reactivate"}


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_unknown_command():
    result = await execute_command(_session(), admin(), "shell:exec", {})
    assert result.ok is False
    assert "Unknown command" in result.error


@pytest.mark.asyncio
async def test_non_admin_is_refused():
    result = await execute_command(_session(), staff(), "help", {})
    assert result.ok is False
    assert result.error == "Insufficient permissions"


@pytest.mark.asyncio
async def test_help_lists_every_command():
    result = await execute_command(_session(), admin(), "help")
    assert result.ok is True
    assert {c["id"] for c in result.data} == set(COMMANDS)


@pytest.mark.asyncio
async def test_whoami():
    result = await execute_command(_session(), admin(), "auth:whoami")
    assert result.data["user_id"] == admin().user_id
    assert result.data["role"] == "admin"


@pytest.mark.asyncio
async def test_missing_argument_is_reported_not_raised():
    session = _session()
    result = await execute_command(session, admin(), "access:grant", {"client_id": "c1"})
    assert result.ok is False
    assert "attorney_id" in result.error
    session.commit.assert_not_called()


@pytest.mark.asyncio
async def test_write_command_is_audited_and_committed():
    session = _session()
    grant = AsyncMock(return_value=MagicMock(attorney_id="att-1", client_id="c1"))
    audit = AsyncMock()

    with (
        patch(f"{MODULE}._client_exists", AsyncMock(return_value=True)),
        patch(f"{MODULE}.grant_access", grant),
        patch(f"{MODULE}.write_audit_log", audit),
    ):
        result = await execute_command(
            session, admin(), "access:grant", {"attorney_id": "att-1", "client_id": "c1"}
        )

    assert result.ok is True
    assert result.data == {"attorney_id": "att-1", "client_id": "c1", "active": True}
    assert audit.await_args.args[1] == AuditAction.ADMIN_COMMAND_EXECUTED
    assert audit.await_args.kwargs["client_id"] == "c1"
    session.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_revoke_without_grant_fails():
    with patch(f"{MODULE}.revoke_access", AsyncMock(return_value=None)):
        result = await execute_command(
            _session(), admin(), "access:revoke", {"attorney_id": "att-1", "client_id": "c1"}
        )
    assert result.ok is False
    assert "No active access grant" in result.error


@pytest.mark.asyncio
async def test_verify_by_receipt_number():
    receipt = make_mock_receipt()
    verification = ReceiptVerification(
        receipt_id=receipt.id,
        receipt_number=receipt.receipt_number,
        client_id=receipt.client_id,
        created_at=receipt.created_at,
        matches=False,
        expected_hash="a" * 64,
        recomputed_hash="b" * 64,
        policies_hashed=2,
    )
    verify = AsyncMock(return_value=verification)

    with (
        patch(f"{MODULE}.get_receipt_by_number", AsyncMock(return_value=receipt)),
        patch(f"{MODULE}.verify_and_record", verify),
    ):
        result = await execute_command(
            _session(), admin(), "receipts:verify", {"receipt_number": receipt.receipt_number}
        )

    assert result.ok is True
    assert result.data["matches"] is False
    assert result.data["policies_hashed"] == 2
    assert verify.await_args.args[1] == receipt.id


@pytest.mark.asyncio
async def test_verify_unknown_receipt_number():
    with patch(f"{MODULE}.get_receipt_by_number", AsyncMock(return_value=None)):
        result = await execute_command(
            _session(), admin(), "receipts:verify", {"receipt_number": "REC-NOPE"}
        )
    assert result.ok is False
    assert result.error == "Receipt not found"
