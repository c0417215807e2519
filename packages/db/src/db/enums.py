# This project was developed with assistance from AI tools.
"""
Domain enums for the HeirVault policy registry.

Shared domain types used by both SQLAlchemy models (db package)
and Pydantic schemas (api package).
"""

import enum


class UserRole(str, enum.Enum):
    ADMIN = "admin"
    ATTORNEY = "attorney"
    STAFF = "staff"


class PolicyVerificationStatus(str, enum.Enum):
    PENDING = "PENDING"
    VERIFIED = "VERIFIED"
    DISCREPANCY = "DISCREPANCY"
    INCOMPLETE = "INCOMPLETE"
    REJECTED = "REJECTED"


class SubmissionStatus(str, enum.Enum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class SubmissionType(str, enum.Enum):
    INITIAL = "INITIAL"
    UPDATE = "UPDATE"
    POLICY_UPLOAD = "POLICY_UPLOAD"
    CHANGE_REQUEST = "CHANGE_REQUEST"


class AccessRequestStatus(str, enum.Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    DENIED = "DENIED"


class AuditAction(str, enum.Enum):
    """Closed set of actions recorded in the append-only audit log."""

    CLIENT_CREATED = "CLIENT_CREATED"
    CLIENT_UPDATED = "CLIENT_UPDATED"
    CLIENT_VIEWED = "CLIENT_VIEWED"
    CLIENT_SUMMARY_PDF_DOWNLOADED = "CLIENT_SUMMARY_PDF_DOWNLOADED"
    RECEIPTS_AUDIT_EXPORTED = "RECEIPTS_AUDIT_EXPORTED"
    POLICY_CREATED = "POLICY_CREATED"
    POLICY_UPDATED = "POLICY_UPDATED"
    POLICY_SEARCH_PERFORMED = "POLICY_SEARCH_PERFORMED"
    BENEFICIARY_CREATED = "BENEFICIARY_CREATED"
    BENEFICIARY_UPDATED = "BENEFICIARY_UPDATED"
    INVITE_CREATED = "INVITE_CREATED"
    INVITE_ACCEPTED = "INVITE_ACCEPTED"
    INVITE_REACTIVATED = "INVITE_REACTIVATED"
    DOCUMENT_UPLOADED = "DOCUMENT_UPLOADED"
    DOCUMENT_PROCESSED = "DOCUMENT_PROCESSED"
    RECEIPT_CREATED = "RECEIPT_CREATED"
    RECEIPT_VERIFIED = "RECEIPT_VERIFIED"
    RECEIPT_TAMPER_DETECTED = "RECEIPT_TAMPER_DETECTED"
    ACCESS_GRANTED = "ACCESS_GRANTED"
    ACCESS_REVOKED = "ACCESS_REVOKED"
    ACCESS_REQUESTED = "ACCESS_REQUESTED"
    ADMIN_COMMAND_EXECUTED = "ADMIN_COMMAND_EXECUTED"
