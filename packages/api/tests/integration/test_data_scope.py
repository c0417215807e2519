# This project was developed with assistance from AI tools.
"""Data scope filtering through attorney_client_access -- SECURITY-CRITICAL."""

import pytest
from sqlalchemy import text

from tests.functional.personas import attorney, other_attorney, staff

pytestmark = pytest.mark.integration


async def test_attorney_with_grant_sees_client(client_factory, seeded_client):
    client_row, _ = seeded_client
    client = await client_factory(attorney())

    resp = await client.get(f"/api/clients/{client_row.id}")

    assert resp.status_code == 200
    assert resp.json()["email"] == "eleanor@example.com"
    await client.aclose()


async def test_attorney_without_grant_gets_404(client_factory, seeded_client):
    """No grant looks identical to no client (404, not 403)."""
    client_row, _ = seeded_client
    client = await client_factory(other_attorney())

    assert (await client.get(f"/api/clients/{client_row.id}")).status_code == 404
    assert (await client.get(f"/api/clients/{client_row.id}/policies")).status_code == 404
    listing = await client.get("/api/clients/")
    assert listing.json()["pagination"]["total"] == 0
    await client.aclose()


async def test_revoked_grant_hides_client(client_factory, db_session, seeded_client):
    client_row, _ = seeded_client
    await db_session.execute(
        text("UPDATE attorney_client_access SET is_active = false WHERE client_id = :id"),
        {"id": client_row.id},
    )
    client = await client_factory(attorney())

    resp = await client.get(f"/api/clients/{client_row.id}")

    assert resp.status_code == 404
    await client.aclose()


async def test_staff_sees_every_client(client_factory, seeded_client):
    client_row, policies = seeded_client
    client = await client_factory(staff())

    resp = await client.get(f"/api/clients/{client_row.id}/policies")

    assert resp.status_code == 200
    numbers = [p["policy_number"] for p in resp.json()["data"]]
    assert numbers == [p.policy_number for p in policies]
    await client.aclose()


async def test_policy_locator_respects_grants(client_factory, seeded_client):
    _, policies = seeded_client
    params = {"first_name": "elea", "last_name": "VANCE"}

    granted = await client_factory(attorney())
    found = (await granted.get("/api/policies/locator", params=params)).json()
    assert [r["policy_id"] for r in found["results"]] == [p.id for p in policies]
    assert found["results"][0]["insurer_name"] == "Acme Life"
    await granted.aclose()

    outsider = await client_factory(other_attorney())
    hidden = (await outsider.get("/api/policies/locator", params=params)).json()
    assert hidden["count"] == 0
    await outsider.aclose()


async def test_summary_pdf_only_for_granted_attorney(client_factory, seeded_client):
    client_row, _ = seeded_client

    outsider = await client_factory(other_attorney())
    assert (await outsider.get(f"/api/clients/{client_row.id}/summary-pdf")).status_code == 404
    await outsider.aclose()

    granted = await client_factory(attorney())
    resp = await granted.get(f"/api/clients/{client_row.id}/summary-pdf")
    assert resp.status_code == 200
    assert resp.content.startswith(b"%PDF")
    await granted.aclose()
