# This project was developed with assistance from AI tools.
"""Tests for attorney access grants and access request decisions."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from db import AttorneyClientAccess
from db.enums import AccessRequestStatus, AuditAction

from src.services.access import (
    AccessRequestStateError,
    attorney_can_access,
    decide_access_request,
    grant_access,
    request_access,
    revoke_access,
)

from tests.functional.personas import admin, attorney

MODULE = "src.services.access"


def _result(value):
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    return result


def _session(*values):
    """Session whose successive execute() calls return the given scalars."""
    session = AsyncMock()
    session.add = MagicMock()
    session.execute = AsyncMock(side_effect=[_result(v) for v in values])
    return session


def _grant(is_active=True):
    return AttorneyClientAccess(attorney_id="att-1", client_id="c1", is_active=is_active)


def _access_request(status=AccessRequestStatus.PENDING):
    req = MagicMock()
    req.id = "req-1"
    req.attorney_id = "att-1"
    req.client_id = "c1"
    req.status = status
    return req


@pytest.mark.asyncio
async def test_attorney_can_access_requires_active_grant():
    assert await attorney_can_access(_session(_grant()), "att-1", "c1") is True
    assert await attorney_can_access(_session(_grant(is_active=False)), "att-1", "c1") is False
    assert await attorney_can_access(_session(None), "att-1", "c1") is False


@pytest.mark.asyncio
async def test_grant_creates_new_row_and_audits():
    session = _session(None)
    with patch(f"{MODULE}.write_audit_log", AsyncMock()) as audit:
        grant = await grant_access(session, attorney_id="att-1", client_id="c1", granted_by=admin())

    session.add.assert_called_once_with(grant)
    assert grant.is_active is True
    assert audit.await_args.args[1] == AuditAction.ACCESS_GRANTED


@pytest.mark.asyncio
async def test_grant_reactivates_revoked_row():
    existing = _grant(is_active=False)
    with patch(f"{MODULE}.write_audit_log", AsyncMock()):
        grant = await grant_access(_session(existing), attorney_id="att-1", client_id="c1")
    assert grant is existing
    assert grant.is_active is True
    assert grant.revoked_at is None


@pytest.mark.asyncio
async def test_grant_is_idempotent_for_active_row():
    existing = _grant()
    with patch(f"{MODULE}.write_audit_log", AsyncMock()) as audit:
        grant = await grant_access(_session(existing), attorney_id="att-1", client_id="c1")
    assert grant is existing
    audit.assert_not_called()


@pytest.mark.asyncio
async def test_revoke_without_active_grant_returns_none():
    assert await revoke_access(_session(None), attorney_id="att-1", client_id="c1") is None


@pytest.mark.asyncio
async def test_revoke_deactivates():
    existing = _grant()
    with patch(f"{MODULE}.write_audit_log", AsyncMock()) as audit:
        grant = await revoke_access(_session(existing), attorney_id="att-1", client_id="c1")
    assert grant.is_active is False
    assert grant.revoked_at is not None
    assert audit.await_args.args[1] == AuditAction.ACCESS_REVOKED


@pytest.mark.asyncio
async def test_request_access_for_missing_client():
    assert await request_access(_session(None), attorney(), "c404") is None


@pytest.mark.asyncio
async def test_request_access_reuses_pending_request():
    pending = _access_request()
    session = _session("c1", pending)
    assert await request_access(session, attorney(), "c1", "Estate matter") is pending
    session.add.assert_not_called()


@pytest.mark.asyncio
async def test_request_access_files_new_request():
    session = _session("c1", None)
    with patch(f"{MODULE}.write_audit_log", AsyncMock()):
        req = await request_access(session, attorney(), "c1", "Estate matter")

    assert req.status == AccessRequestStatus.PENDING
    assert req.attorney_email == attorney().email
    session.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_approve_grants_access():
    req = _access_request()
    grant = AsyncMock()
    with patch(f"{MODULE}.grant_access", grant):
        decided = await decide_access_request(_session(req), admin(), "req-1", approve=True)

    assert decided.status == AccessRequestStatus.APPROVED
    assert decided.decided_by == admin().user_id
    assert grant.await_args.kwargs == {
        "attorney_id": "att-1",
        "client_id": "c1",
        "granted_by": admin(),
    }


@pytest.mark.asyncio
async def test_deny_does_not_grant():
    grant = AsyncMock()
    with patch(f"{MODULE}.grant_access", grant):
        decided = await decide_access_request(
            _session(_access_request()), admin(), "req-1", approve=False
        )
    assert decided.status == AccessRequestStatus.DENIED
    grant.assert_not_called()


@pytest.mark.asyncio
async def test_deciding_twice_conflicts():
    with pytest.raises(AccessRequestStateError):
        await decide_access_request(
            _session(_access_request(AccessRequestStatus.DENIED)), admin(), "req-1", approve=True
        )
