# This project was developed with assistance from AI tools.
"""
Domain model structure tests
"""


def test_client_relationships():
    """Client model should have all expected ORM relationships wired."""
    from db import Client

    rel_names = {r.key for r in Client.__mapper__.relationships}
    assert rel_names >= {"policies", "beneficiaries", "invites", "access_grants"}


def test_policy_links_client_and_insurer():
    from db import Policy

    rel_names = {r.key for r in Policy.__mapper__.relationships}
    assert {"client", "insurer", "policy_beneficiaries"} <= rel_names


def test_policy_insurer_is_optional():
    """Unresolved carriers are stored as free text with no insurer row."""
    from db import Policy

    assert Policy.__table__.c.insurer_id.nullable is True
    assert Policy.__table__.c.carrier_name_raw.nullable is True


def test_client_full_name():
    from db import Client

    assert Client(first_name="Eleanor", last_name="Vance").full_name == "Eleanor Vance"


def test_receipt_hash_column_is_sha256_hex_width():
    from db import Receipt

    assert Receipt.__table__.c.receipt_hash.type.length == 64
    assert Receipt.__table__.c.receipt_number.unique is True


def test_audit_log_has_no_update_timestamp():
    """Append-only rows never change, so there is nothing to track."""
    from db import AuditLog

    assert "updated_at" not in AuditLog.__table__.c
