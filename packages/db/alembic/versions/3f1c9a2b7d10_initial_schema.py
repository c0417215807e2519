# This project was developed with assistance from AI tools.
"""initial schema

Revision ID: 3f1c9a2b7d10
Revises:
Create Date: 2026-03-02 10:12:41.508113

"""

import sqlalchemy as sa
from alembic import op

revision = "3f1c9a2b7d10"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "clients",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("date_of_birth", sa.Date(), nullable=True),
        sa.Column("ssn_last_4", sa.String(4), nullable=True),
        sa.Column("maiden_name", sa.String(100), nullable=True),
        sa.Column("drivers_license", sa.String(50), nullable=True),
        sa.Column("passport_number", sa.String(50), nullable=True),
        sa.Column("address_line1", sa.String(255), nullable=True),
        sa.Column("address_line2", sa.String(255), nullable=True),
        sa.Column("city", sa.String(100), nullable=True),
        sa.Column("state", sa.String(50), nullable=True),
        sa.Column("postal_code", sa.String(20), nullable=True),
        sa.Column("country", sa.String(50), nullable=True),
        sa.Column("client_fingerprint", sa.String(64), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("client_fingerprint"),
    )
    op.create_index("ix_clients_email", "clients", ["email"], unique=True)

    op.create_table(
        "insurers",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("contact_phone", sa.String(50), nullable=True),
        sa.Column("contact_email", sa.String(255), nullable=True),
        sa.Column("website", sa.String(255), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )

    op.create_table(
        "policies",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("client_id", sa.String(36), nullable=False),
        sa.Column("insurer_id", sa.String(36), nullable=True),
        sa.Column("carrier_name_raw", sa.String(255), nullable=True),
        sa.Column("policy_number", sa.String(100), nullable=True),
        sa.Column("policy_type", sa.String(50), nullable=True),
        sa.Column(
            "verification_status", sa.String(20), nullable=False, server_default="PENDING"
        ),
        sa.Column("verified_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("verified_by_user_id", sa.String(255), nullable=True),
        sa.Column("verification_notes", sa.Text(), nullable=True),
        sa.Column("document_hash", sa.String(64), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["client_id"], ["clients.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["insurer_id"], ["insurers.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_policies_client_id", "policies", ["client_id"])
    op.create_index("ix_policies_insurer_id", "policies", ["insurer_id"])
    op.create_index("ix_policies_created_at", "policies", ["created_at"])

    op.create_table(
        "beneficiaries",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("client_id", sa.String(36), nullable=False),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("relationship", sa.String(100), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("date_of_birth", sa.Date(), nullable=True),
        sa.Column("address_line1", sa.String(255), nullable=True),
        sa.Column("city", sa.String(100), nullable=True),
        sa.Column("state", sa.String(50), nullable=True),
        sa.Column("postal_code", sa.String(20), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["client_id"], ["clients.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_beneficiaries_client_id", "beneficiaries", ["client_id"])

    op.create_table(
        "policy_beneficiaries",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("policy_id", sa.String(36), nullable=False),
        sa.Column("beneficiary_id", sa.String(36), nullable=False),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
        ),
        sa.ForeignKeyConstraint(["policy_id"], ["policies.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["beneficiary_id"], ["beneficiaries.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("policy_id", "beneficiary_id", name="uq_policy_beneficiary"),
    )
    op.create_index("ix_policy_beneficiaries_policy_id", "policy_beneficiaries", ["policy_id"])
    op.create_index(
        "ix_policy_beneficiaries_beneficiary_id", "policy_beneficiaries", ["beneficiary_id"]
    )

    op.create_table(
        "client_invites",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("client_id", sa.String(36), nullable=False),
        sa.Column("token", sa.String(64), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("used_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("revoked_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("invited_by_user_id", sa.String(255), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["client_id"], ["clients.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_client_invites_client_id", "client_invites", ["client_id"])
    op.create_index("ix_client_invites_token", "client_invites", ["token"], unique=True)

    op.create_table(
        "attorney_client_access",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("attorney_id", sa.String(255), nullable=False),
        sa.Column("client_id", sa.String(36), nullable=False),
        sa.Column(
            "granted_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
        ),
        sa.Column("revoked_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.ForeignKeyConstraint(["client_id"], ["clients.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("attorney_id", "client_id", name="uq_attorney_client"),
    )
    op.create_index(
        "ix_attorney_client_access_attorney_id", "attorney_client_access", ["attorney_id"]
    )
    op.create_index(
        "ix_attorney_client_access_client_id", "attorney_client_access", ["client_id"]
    )

    op.create_table(
        "access_requests",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("attorney_id", sa.String(255), nullable=False),
        sa.Column("attorney_email", sa.String(255), nullable=True),
        sa.Column("client_id", sa.String(36), nullable=False),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="PENDING"),
        sa.Column("decided_by", sa.String(255), nullable=True),
        sa.Column("decided_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
        ),
        sa.ForeignKeyConstraint(["client_id"], ["clients.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_access_requests_attorney_id", "access_requests", ["attorney_id"])
    op.create_index("ix_access_requests_client_id", "access_requests", ["client_id"])

    op.create_table(
        "submissions",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("client_id", sa.String(36), nullable=False),
        sa.Column("invite_id", sa.String(36), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="PENDING"),
        sa.Column("submission_type", sa.String(20), nullable=False, server_default="INITIAL"),
        sa.Column("submitted_data", sa.JSON(), nullable=True),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("processed_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["client_id"], ["clients.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["invite_id"], ["client_invites.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_submissions_client_id", "submissions", ["client_id"])

    op.create_table(
        "receipts",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("client_id", sa.String(36), nullable=False),
        sa.Column("submission_id", sa.String(36), nullable=True),
        sa.Column("invite_id", sa.String(36), nullable=True),
        sa.Column("receipt_number", sa.String(64), nullable=False),
        sa.Column("receipt_hash", sa.String(64), nullable=True),
        sa.Column("email_sent", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("email_sent_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
        ),
        sa.ForeignKeyConstraint(["client_id"], ["clients.id"]),
        sa.ForeignKeyConstraint(["submission_id"], ["submissions.id"]),
        sa.ForeignKeyConstraint(["invite_id"], ["client_invites.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_receipts_client_id", "receipts", ["client_id"])
    op.create_index("ix_receipts_submission_id", "receipts", ["submission_id"])
    op.create_index("ix_receipts_receipt_number", "receipts", ["receipt_number"], unique=True)

    op.create_table(
        "documents",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("client_id", sa.String(36), nullable=False),
        sa.Column("submission_id", sa.String(36), nullable=True),
        sa.Column("policy_id", sa.String(36), nullable=True),
        sa.Column("file_name", sa.String(255), nullable=False),
        sa.Column("file_size", sa.Integer(), nullable=False),
        sa.Column("file_path", sa.String(500), nullable=False),
        sa.Column("mime_type", sa.String(100), nullable=False),
        sa.Column("uploaded_via", sa.String(50), nullable=True),
        sa.Column("extracted_data", sa.JSON(), nullable=True),
        sa.Column("ocr_confidence", sa.Float(), nullable=True),
        sa.Column("document_hash", sa.String(64), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["client_id"], ["clients.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["submission_id"], ["submissions.id"]),
        sa.ForeignKeyConstraint(["policy_id"], ["policies.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_documents_client_id", "documents", ["client_id"])
    op.create_index("ix_documents_policy_id", "documents", ["policy_id"])
    op.create_index("ix_documents_document_hash", "documents", ["document_hash"])

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("action", sa.String(64), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("user_id", sa.String(255), nullable=True),
        sa.Column("client_id", sa.String(36), nullable=True),
        sa.Column("policy_id", sa.String(36), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_audit_logs_action", "audit_logs", ["action"])
    op.create_index("ix_audit_logs_user_id", "audit_logs", ["user_id"])
    op.create_index("ix_audit_logs_client_id", "audit_logs", ["client_id"])
    op.create_index("ix_audit_logs_created_at", "audit_logs", ["created_at"])


def downgrade() -> None:
    op.drop_table("audit_logs")
    op.drop_table("documents")
    op.drop_table("receipts")
    op.drop_table("submissions")
    op.drop_table("access_requests")
    op.drop_table("attorney_client_access")
    op.drop_table("client_invites")
    op.drop_table("policy_beneficiaries")
    op.drop_table("beneficiaries")
    op.drop_table("policies")
    op.drop_table("insurers")
    op.drop_table("clients")
