# This project was developed with assistance from AI tools.
"""
HeirVault -- domain models

Client, policy and beneficiary registry, invite-driven intake, immutable
receipts, and the append-only audit log.
"""

import uuid

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import relationship

from .database import Base
from .enums import (
    AccessRequestStatus,
    AuditAction,
    PolicyVerificationStatus,
    SubmissionStatus,
    SubmissionType,
)


def _uuid() -> str:
    return str(uuid.uuid4())


class Client(Base):
    """Deceased (or planning) client whose policies are registered."""

    __tablename__ = "clients"

    id = Column(String(36), primary_key=True, default=_uuid)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    phone = Column(String(50), nullable=True)
    date_of_birth = Column(Date, nullable=True)
    ssn_last_4 = Column(String(4), nullable=True)
    maiden_name = Column(String(100), nullable=True)
    drivers_license = Column(String(50), nullable=True)
    passport_number = Column(String(50), nullable=True)
    address_line1 = Column(String(255), nullable=True)
    address_line2 = Column(String(255), nullable=True)
    city = Column(String(100), nullable=True)
    state = Column(String(50), nullable=True)
    postal_code = Column(String(20), nullable=True)
    country = Column(String(50), nullable=True)
    client_fingerprint = Column(String(64), nullable=True, unique=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    policies = relationship("Policy", back_populates="client", cascade="all, delete-orphan")
    beneficiaries = relationship(
        "Beneficiary", back_populates="client", cascade="all, delete-orphan",
    )
    invites = relationship("ClientInvite", back_populates="client", cascade="all, delete-orphan")
    access_grants = relationship(
        "AttorneyClientAccess", back_populates="client", cascade="all, delete-orphan",
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self):
        return f"<Client(id={self.id}, name='{self.first_name} {self.last_name}')>"


class Insurer(Base):
    """Insurance carrier. Never auto-created from free text."""

    __tablename__ = "insurers"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(255), nullable=False, unique=True)
    contact_phone = Column(String(50), nullable=True)
    contact_email = Column(String(255), nullable=True)
    website = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    policies = relationship("Policy", back_populates="insurer")

    def __repr__(self):
        return f"<Insurer(id={self.id}, name='{self.name}')>"


class Policy(Base):
    """Life-insurance policy registered against a client."""

    __tablename__ = "policies"

    id = Column(String(36), primary_key=True, default=_uuid)
    client_id = Column(
        String(36), ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    insurer_id = Column(String(36), ForeignKey("insurers.id"), nullable=True, index=True)
    # Free-text carrier name kept when the insurer could not be resolved
    carrier_name_raw = Column(String(255), nullable=True)
    policy_number = Column(String(100), nullable=True)
    policy_type = Column(String(50), nullable=True)
    verification_status = Column(
        Enum(PolicyVerificationStatus, name="policy_verification_status", native_enum=False),
        nullable=False,
        default=PolicyVerificationStatus.PENDING,
    )
    verified_at = Column(DateTime(timezone=True), nullable=True)
    verified_by_user_id = Column(String(255), nullable=True)
    verification_notes = Column(Text, nullable=True)
    document_hash = Column(String(64), nullable=True)
    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False, index=True,
    )
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    client = relationship("Client", back_populates="policies")
    insurer = relationship("Insurer", back_populates="policies")
    policy_beneficiaries = relationship(
        "PolicyBeneficiary", back_populates="policy", cascade="all, delete-orphan",
    )

    @property
    def display_carrier(self) -> str | None:
        if self.insurer is not None:
            return self.insurer.name
        return self.carrier_name_raw

    def __repr__(self):
        return f"<Policy(id={self.id}, number='{self.policy_number}')>"


class Beneficiary(Base):
    """Named beneficiary of one or more of a client's policies."""

    __tablename__ = "beneficiaries"

    id = Column(String(36), primary_key=True, default=_uuid)
    client_id = Column(
        String(36), ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    relationship_to_client = Column("relationship", String(100), nullable=True)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    date_of_birth = Column(Date, nullable=True)
    address_line1 = Column(String(255), nullable=True)
    city = Column(String(100), nullable=True)
    state = Column(String(50), nullable=True)
    postal_code = Column(String(20), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    client = relationship("Client", back_populates="beneficiaries")
    policy_beneficiaries = relationship(
        "PolicyBeneficiary", back_populates="beneficiary", cascade="all, delete-orphan",
    )

    def __repr__(self):
        return f"<Beneficiary(id={self.id}, name='{self.first_name} {self.last_name}')>"


class PolicyBeneficiary(Base):
    """Junction table linking policies to beneficiaries."""

    __tablename__ = "policy_beneficiaries"
    __table_args__ = (
        UniqueConstraint("policy_id", "beneficiary_id", name="uq_policy_beneficiary"),
    )

    id = Column(String(36), primary_key=True, default=_uuid)
    policy_id = Column(
        String(36), ForeignKey("policies.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    beneficiary_id = Column(
        String(36), ForeignKey("beneficiaries.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    policy = relationship("Policy", back_populates="policy_beneficiaries")
    beneficiary = relationship("Beneficiary", back_populates="policy_beneficiaries")


class ClientInvite(Base):
    """Single-use intake link sent to a client by email or QR code."""

    __tablename__ = "client_invites"

    id = Column(String(36), primary_key=True, default=_uuid)
    client_id = Column(
        String(36), ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    token = Column(String(64), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    used_at = Column(DateTime(timezone=True), nullable=True)
    revoked_at = Column(DateTime(timezone=True), nullable=True)
    invited_by_user_id = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    client = relationship("Client", back_populates="invites")

    def __repr__(self):
        return f"<ClientInvite(id={self.id}, client_id={self.client_id})>"


class AttorneyClientAccess(Base):
    """Grants an attorney (identity-provider subject) access to a client."""

    __tablename__ = "attorney_client_access"
    __table_args__ = (
        UniqueConstraint("attorney_id", "client_id", name="uq_attorney_client"),
    )

    id = Column(String(36), primary_key=True, default=_uuid)
    attorney_id = Column(String(255), nullable=False, index=True)
    client_id = Column(
        String(36), ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    granted_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    revoked_at = Column(DateTime(timezone=True), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)

    client = relationship("Client", back_populates="access_grants")

    def __repr__(self):
        return (
            f"<AttorneyClientAccess(attorney_id='{self.attorney_id}', "
            f"client_id={self.client_id}, active={self.is_active})>"
        )


class AccessRequest(Base):
    """Attorney request for access to an existing client, decided by an admin."""

    __tablename__ = "access_requests"

    id = Column(String(36), primary_key=True, default=_uuid)
    attorney_id = Column(String(255), nullable=False, index=True)
    attorney_email = Column(String(255), nullable=True)
    client_id = Column(
        String(36), ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    reason = Column(Text, nullable=True)
    status = Column(
        Enum(AccessRequestStatus, name="access_request_status", native_enum=False),
        nullable=False,
        default=AccessRequestStatus.PENDING,
    )
    decided_by = Column(String(255), nullable=True)
    decided_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<AccessRequest(id={self.id}, status='{self.status}')>"


class Submission(Base):
    """One intake event (initial registration, update, upload, change request)."""

    __tablename__ = "submissions"

    id = Column(String(36), primary_key=True, default=_uuid)
    client_id = Column(
        String(36), ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    invite_id = Column(String(36), ForeignKey("client_invites.id"), nullable=True)
    status = Column(
        Enum(SubmissionStatus, name="submission_status", native_enum=False),
        nullable=False,
        default=SubmissionStatus.PENDING,
    )
    submission_type = Column(
        Enum(SubmissionType, name="submission_type", native_enum=False),
        nullable=False,
        default=SubmissionType.INITIAL,
    )
    submitted_data = Column(JSON, nullable=True)
    error_message = Column(Text, nullable=True)
    processed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<Submission(id={self.id}, type='{self.submission_type}', status='{self.status}')>"


class Receipt(Base):
    """Immutable proof of submission.

    ``created_at`` is assigned by the database and is the authoritative input
    to ``receipt_hash``. Identity columns never change and the hash is set
    once; the ``receipts_guard_mutation`` trigger enforces both.
    """

    __tablename__ = "receipts"

    id = Column(String(36), primary_key=True, default=_uuid)
    client_id = Column(String(36), ForeignKey("clients.id"), nullable=False, index=True)
    submission_id = Column(String(36), ForeignKey("submissions.id"), nullable=True, index=True)
    invite_id = Column(String(36), ForeignKey("client_invites.id"), nullable=True)
    receipt_number = Column(String(64), nullable=False, unique=True, index=True)
    receipt_hash = Column(String(64), nullable=True)
    email_sent = Column(Boolean, nullable=False, default=False)
    email_sent_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    client = relationship("Client")

    def __repr__(self):
        return f"<Receipt(id={self.id}, number='{self.receipt_number}')>"


class Document(Base):
    """Uploaded policy document with extraction results."""

    __tablename__ = "documents"

    id = Column(String(36), primary_key=True, default=_uuid)
    client_id = Column(
        String(36), ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    submission_id = Column(String(36), ForeignKey("submissions.id"), nullable=True)
    policy_id = Column(String(36), ForeignKey("policies.id"), nullable=True, index=True)
    file_name = Column(String(255), nullable=False)
    file_size = Column(Integer, nullable=False)
    file_path = Column(String(500), nullable=False)
    mime_type = Column(String(100), nullable=False)
    uploaded_via = Column(String(50), nullable=True)
    extracted_data = Column(JSON, nullable=True)
    ocr_confidence = Column(Float, nullable=True)
    document_hash = Column(String(64), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<Document(id={self.id}, file='{self.file_name}')>"


class AuditLog(Base):
    """Append-only audit trail. INSERT + SELECT only -- no UPDATE or DELETE."""

    __tablename__ = "audit_logs"

    id = Column(String(36), primary_key=True, default=_uuid)
    action = Column(
        Enum(AuditAction, name="audit_action", native_enum=False, length=64),
        nullable=False,
        index=True,
    )
    message = Column(Text, nullable=False)
    user_id = Column(String(255), nullable=True, index=True)
    client_id = Column(String(36), nullable=True, index=True)
    policy_id = Column(String(36), nullable=True)
    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False, index=True,
    )

    def __repr__(self):
        return f"<AuditLog(id={self.id}, action='{self.action}')>"


class ImmutableRowViolation(Base):
    """Records attempted UPDATE/DELETE on receipts or audit_logs (trigger-populated)."""

    __tablename__ = "immutable_row_violations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    timestamp = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    table_name = Column(String(64), nullable=False)
    attempted_operation = Column(String(10), nullable=False)
    db_user = Column(String(255), nullable=False)
    row_id = Column(String(36), nullable=True)
