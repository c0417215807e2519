# This project was developed with assistance from AI tools.
"""Shared test factory functions for creating mock ORM objects.

Keeps mock construction consistent across the unit and functional suites.
"""

from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock

DEFAULT_TS = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


def make_mock_client(
    id="client-1",
    first_name="Eleanor",
    last_name="Vance",
    email="eleanor@example.com",
    phone=None,
    date_of_birth=None,
    created_at=DEFAULT_TS,
    **extra,
):
    """Create a mock Client ORM object."""
    c = MagicMock()
    c.id = id
    c.first_name = first_name
    c.last_name = last_name
    c.full_name = f"{first_name} {last_name}"
    c.email = email
    c.phone = phone
    c.date_of_birth = date_of_birth
    c.ssn_last_4 = None
    c.maiden_name = None
    c.drivers_license = None
    c.passport_number = None
    c.address_line1 = None
    c.address_line2 = None
    c.city = None
    c.state = None
    c.postal_code = None
    c.country = None
    c.client_fingerprint = None
    c.created_at = created_at
    c.updated_at = created_at
    for key, value in extra.items():
        setattr(c, key, value)
    return c


def make_mock_insurer(id="ins-1", name="Acme Life", contact_phone=None, contact_email=None):
    i = MagicMock()
    i.id = id
    i.name = name
    i.contact_phone = contact_phone
    i.contact_email = contact_email
    i.website = None
    i.created_at = DEFAULT_TS
    i.updated_at = DEFAULT_TS
    return i


def make_mock_policy(
    id="policy-1",
    client_id="client-1",
    policy_number="POL-100",
    insurer=None,
    carrier_name_raw=None,
    policy_type="TERM",
    verification_status="PENDING",
    created_at=DEFAULT_TS,
):
    """Create a mock Policy ORM object.

    Args:
        insurer: Mock Insurer, or None for an unresolved carrier.
        carrier_name_raw: Free-text carrier used when ``insurer`` is None.
        verification_status: PolicyVerificationStatus value.

    Returns:
        MagicMock configured as a Policy model instance.
    """
    from db.enums import PolicyVerificationStatus

    p = MagicMock()
    p.id = id
    p.client_id = client_id
    p.policy_number = policy_number
    p.insurer = insurer
    p.insurer_id = insurer.id if insurer is not None else None
    p.carrier_name_raw = carrier_name_raw
    p.display_carrier = insurer.name if insurer is not None else carrier_name_raw
    p.policy_type = policy_type
    p.verification_status = PolicyVerificationStatus(verification_status)
    p.verified_at = None
    p.verified_by_user_id = None
    p.verification_notes = None
    p.document_hash = None
    p.policy_beneficiaries = []
    p.created_at = created_at
    p.updated_at = created_at
    return p


def make_mock_beneficiary(
    id="ben-1",
    client_id="client-1",
    first_name="Marcus",
    last_name="Vance",
    relationship_to_client="Son",
    email=None,
    phone=None,
):
    b = MagicMock()
    b.id = id
    b.client_id = client_id
    b.first_name = first_name
    b.last_name = last_name
    b.relationship_to_client = relationship_to_client
    b.email = email
    b.phone = phone
    b.date_of_birth = None
    b.created_at = DEFAULT_TS
    b.updated_at = DEFAULT_TS
    return b


def make_mock_receipt(
    id="receipt-1",
    client_id="client-1",
    receipt_number="REC-CLIENT1-1709294400000",
    receipt_hash="a" * 64,
    created_at=DEFAULT_TS,
    submission_id=None,
    email_sent=False,
):
    r = MagicMock()
    r.id = id
    r.client_id = client_id
    r.submission_id = submission_id
    r.invite_id = None
    r.receipt_number = receipt_number
    r.receipt_hash = receipt_hash
    r.email_sent = email_sent
    r.email_sent_at = None
    r.created_at = created_at
    return r


def make_mock_invite(
    id="invite-1",
    client_id="client-1",
    token="tok-abc",
    email="eleanor@example.com",
    expires_at=None,
    used_at=None,
    revoked_at=None,
    client=None,
):
    """Create a mock ClientInvite; expires a week from now unless given."""
    inv = MagicMock()
    inv.id = id
    inv.client_id = client_id
    inv.token = token
    inv.email = email
    inv.expires_at = expires_at or datetime.now(UTC) + timedelta(days=7)
    inv.used_at = used_at
    inv.revoked_at = revoked_at
    inv.invited_by_user_id = "attorney-1"
    inv.client = client or make_mock_client(id=client_id, email=email)
    inv.created_at = DEFAULT_TS
    return inv


def make_mock_audit_log(
    id="audit-1",
    action="CLIENT_CREATED",
    message="Client created",
    user_id="attorney-1",
    client_id="client-1",
    policy_id=None,
    created_at=DEFAULT_TS,
):
    from db.enums import AuditAction

    a = MagicMock()
    a.id = id
    a.action = AuditAction(action)
    a.message = message
    a.user_id = user_id
    a.client_id = client_id
    a.policy_id = policy_id
    a.created_at = created_at
    return a
