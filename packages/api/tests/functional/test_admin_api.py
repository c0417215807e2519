# This project was developed with assistance from AI tools.
"""Functional tests for the admin console, NL planner, and access requests."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock, patch

from db.enums import AccessRequestStatus

from src.schemas.admin import NLPlanResponse
from src.services.access import AccessRequestStateError
from src.services.console.commands import ConsoleResult

from tests.factories import make_mock_invite

from .mock_db import make_mock_session
from .personas import admin

ROUTES = "src.routes.admin"


def _access_request(status=AccessRequestStatus.APPROVED):
    req = MagicMock()
    req.id = "req-1"
    req.attorney_id = "attorney-hale-001"
    req.attorney_email = "hale@hale-law.example"
    req.client_id = "client-1"
    req.reason = "Estate planning"
    req.status = status
    req.decided_by = "admin-user"
    req.decided_at = datetime(2026, 3, 2, tzinfo=UTC)
    req.created_at = datetime(2026, 3, 1, tzinfo=UTC)
    return req


def test_list_console_commands(make_client):
    client = make_client(admin(), make_mock_session())
    resp = client.get("/api/admin/console/commands")

    assert resp.status_code == 200
    ids = {c["id"] for c in resp.json()["commands"]}
    assert {"auth:whoami", "db:health", "receipts:verify", "access:grant"} <= ids


def test_console_failure_is_not_an_http_error(make_client):
    client = make_client(admin(), make_mock_session())
    result = ConsoleResult(ok=False, error="Unknown command: rm:rf")
    with patch(f"{ROUTES}.execute_command", AsyncMock(return_value=result)):
        resp = client.post("/api/admin/console", json={"cmd": "rm:rf"})

    assert resp.status_code == 200
    assert resp.json() == {
        "ok": False,
        "cmd": "rm:rf",
        "data": None,
        "error": "Unknown command: rm:rf",
    }


def test_nl_plan_does_not_execute(make_client):
    client = make_client(admin(), make_mock_session())
    plan = NLPlanResponse(
        cmd="access:grant",
        args={"attorney_id": "a-1", "client_id": "c-1"},
        requires_confirm=True,
        safety_flags=["write_command"],
    )
    execute = AsyncMock()
    with (
        patch(f"{ROUTES}.plan_from_text", AsyncMock(return_value=plan)),
        patch(f"{ROUTES}.execute_command", execute),
    ):
        resp = client.post("/api/admin/nl/plan", json={"text": "give a-1 access to c-1"})

    assert resp.status_code == 200
    assert resp.json()["requires_confirm"] is True
    execute.assert_not_called()


def test_nl_execute_write_requires_confirm(make_client):
    client = make_client(admin(), make_mock_session())
    execute = AsyncMock()
    with patch(f"{ROUTES}.execute_command", execute):
        resp = client.post(
            "/api/admin/nl/execute",
            json={"cmd": "access:revoke", "args": {"attorney_id": "a-1", "client_id": "c-1"}},
        )

    assert resp.status_code == 400
    assert "Confirmation required" in resp.json()["detail"]
    execute.assert_not_called()


def test_nl_execute_rejects_unknown_command(make_client):
    client = make_client(admin(), make_mock_session())
    resp = client.post("/api/admin/nl/execute", json={"cmd": "db:drop", "confirm": True})
    assert resp.status_code == 400


def test_nl_execute_confirmed_write(make_client):
    client = make_client(admin(), make_mock_session())
    result = ConsoleResult(ok=True, data={"revoked": True})
    with patch(f"{ROUTES}.execute_command", AsyncMock(return_value=result)) as execute:
        resp = client.post(
            "/api/admin/nl/execute",
            json={
                "cmd": "access:revoke",
                "args": {"attorney_id": "a-1", "client_id": "c-1"},
                "confirm": True,
            },
        )

    assert resp.status_code == 200
    assert resp.json()["data"] == {"revoked": True}
    assert execute.await_args.args[2] == "access:revoke"


def test_list_access_requests_defaults_to_pending(make_client):
    client = make_client(admin(), make_mock_session())
    listing = AsyncMock(return_value=[_access_request(AccessRequestStatus.PENDING)])
    with patch(f"{ROUTES}.list_access_requests", listing):
        resp = client.get("/api/admin/access-requests")

    assert resp.status_code == 200
    assert resp.json()["count"] == 1
    assert listing.await_args.kwargs["status"] == AccessRequestStatus.PENDING


def test_approve_access_request(make_client):
    client = make_client(admin(), make_mock_session())
    decide = AsyncMock(return_value=_access_request())
    with patch(f"{ROUTES}.decide_access_request", decide):
        resp = client.post("/api/admin/access-requests/req-1/approve")

    assert resp.status_code == 200
    assert resp.json()["status"] == "APPROVED"
    assert decide.await_args.kwargs["approve"] is True


def test_deciding_twice_conflicts(make_client):
    client = make_client(admin(), make_mock_session())
    with patch(
        f"{ROUTES}.decide_access_request",
        AsyncMock(side_effect=AccessRequestStateError("Access request already APPROVED")),
    ):
        resp = client.post("/api/admin/access-requests/req-1/deny")
    assert resp.status_code == 409


def test_unknown_access_request(make_client):
    client = make_client(admin(), make_mock_session())
    with patch(f"{ROUTES}.decide_access_request", AsyncMock(return_value=None)):
        resp = client.post("/api/admin/access-requests/missing/approve")
    assert resp.status_code == 404


def test_reactivate_invite(make_client):
    client = make_client(admin(), make_mock_session())
    reactivate = AsyncMock(return_value=make_mock_invite())
    with patch(f"{ROUTES}.reactivate_invite", reactivate):
        resp = client.post("/api/admin/invites/invite-1/reactivate", json={"ttl_days": 14})

    assert resp.status_code == 200
    body = resp.json()
    assert body["token"] == "tok-abc"
    assert body["invite_url"].endswith("/invite/tok-abc")
    assert reactivate.await_args.kwargs["ttl_days"] == 14
