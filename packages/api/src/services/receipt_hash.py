# This project was developed with assistance from AI tools.
"""Receipt hash generator.

Binds a receipt's identity and database-assigned creation timestamp to the
exact set of policies the client had at that moment. Pure functions only:
callers are responsible for loading the policy snapshot.

Canonical preimage (UTF-8)::

    heirvault-receipt-v1
    <len>:<receipt id>
    <len>:<client id>
    <len>:<created_at, YYYY-MM-DDTHH:MM:SS.mmmZ>
    <len>:<policy count>
    <len>:<policy id>
    <len>:<policy number, empty when null>
    ...

Every field is prefixed with its byte length, so field contents (commas,
colons, newlines) can never shift a boundary between fields.
"""

import hashlib
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timezone

HASH_VERSION = "heirvault-receipt-v1"


class MalformedReceiptInput(ValueError):
    """Raised when a required hashing input is missing or empty."""


@dataclass(frozen=True)
class PolicySnapshot:
    """The policy fields that participate in a receipt hash."""

    id: str
    policy_number: str | None
    created_at: datetime


def _as_utc(ts: datetime) -> datetime:
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def format_receipt_timestamp(ts: datetime) -> str:
    """Render ``ts`` as ISO-8601 UTC with millisecond precision.

    Naive datetimes are taken to already be UTC. Sub-millisecond digits are
    truncated, never rounded.
    """
    ts = _as_utc(ts)
    return ts.strftime("%Y-%m-%dT%H:%M:%S.") + f"{ts.microsecond // 1000:03d}Z"


def _field(value: str) -> bytes:
    encoded = value.encode("utf-8")
    return str(len(encoded)).encode("ascii") + b":" + encoded + b"\n"


def _require(value: str | None, name: str) -> str:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise MalformedReceiptInput(f"{name} is required for receipt hashing")
    return str(value)


def sort_policies(policies: Iterable[PolicySnapshot]) -> list[PolicySnapshot]:
    """Order policies by creation time, then id for rows sharing a timestamp."""
    return sorted(policies, key=lambda p: (_as_utc(p.created_at), p.id))


def canonical_receipt_payload(
    receipt_id: str,
    client_id: str,
    created_at: datetime,
    policies: Iterable[PolicySnapshot],
) -> bytes:
    """Build the byte-exact hash preimage for a receipt."""
    receipt_id = _require(receipt_id, "receipt id")
    client_id = _require(client_id, "client id")
    if created_at is None:
        raise MalformedReceiptInput("receipt creation timestamp is required for receipt hashing")

    snapshot = list(policies)
    for policy in snapshot:
        _require(policy.id, "policy id")
        if policy.created_at is None:
            raise MalformedReceiptInput(f"policy {policy.id} has no creation timestamp")

    ordered = sort_policies(snapshot)

    parts = [
        HASH_VERSION.encode("ascii") + b"\n",
        _field(receipt_id),
        _field(client_id),
        _field(format_receipt_timestamp(created_at)),
        _field(str(len(ordered))),
    ]
    for policy in ordered:
        parts.append(_field(policy.id))
        parts.append(_field(policy.policy_number or ""))
    return b"".join(parts)


def generate_receipt_hash(
    receipt_id: str,
    client_id: str,
    created_at: datetime,
    policies: Iterable[PolicySnapshot],
) -> str:
    """Return the SHA-256 hex digest binding a receipt to its policy snapshot.

    Args:
        receipt_id: Receipt primary key.
        client_id: Owning client's id.
        created_at: The receipt's persisted creation timestamp.
        policies: Every policy of the client created at or before
            ``created_at``, in any order.

    Raises:
        MalformedReceiptInput: a required identifier or timestamp is missing.
    """
    payload = canonical_receipt_payload(receipt_id, client_id, created_at, policies)
    return hashlib.sha256(payload).hexdigest()
