# This project was developed with assistance from AI tools.
"""add immutable_row_violations table and guard triggers on receipts/audit_logs

Revision ID: 7a4e2c8d5b31
Revises: 3f1c9a2b7d10
Create Date: 2026-03-02
"""

from alembic import op
import sqlalchemy as sa

revision = "7a4e2c8d5b31"
down_revision = "3f1c9a2b7d10"
branch_labels = None
depends_on = None

AUDIT_LOGS_FUNCTION = """
CREATE OR REPLACE FUNCTION audit_logs_prevent_mutation()
RETURNS TRIGGER AS $$
BEGIN
    INSERT INTO immutable_row_violations (table_name, attempted_operation, db_user, row_id)
    VALUES (TG_TABLE_NAME, TG_OP, current_user, OLD.id);

    RAISE EXCEPTION 'audit_logs is append-only: % denied for row %', TG_OP, OLD.id;
    RETURN NULL;
END;
$$ LANGUAGE plpgsql;
"""

# Receipts allow exactly two kinds of UPDATE: setting receipt_hash while it
# is still NULL, and the email delivery columns. Everything else is rejected.
RECEIPTS_FUNCTION = """
CREATE OR REPLACE FUNCTION receipts_guard_mutation()
RETURNS TRIGGER AS $$
BEGIN
    IF TG_OP = 'UPDATE'
        AND NEW.id = OLD.id
        AND NEW.client_id = OLD.client_id
        AND NEW.submission_id IS NOT DISTINCT FROM OLD.submission_id
        AND NEW.invite_id IS NOT DISTINCT FROM OLD.invite_id
        AND NEW.receipt_number = OLD.receipt_number
        AND NEW.created_at = OLD.created_at
        AND (OLD.receipt_hash IS NULL OR NEW.receipt_hash = OLD.receipt_hash)
    THEN
        RETURN NEW;
    END IF;

    INSERT INTO immutable_row_violations (table_name, attempted_operation, db_user, row_id)
    VALUES (TG_TABLE_NAME, TG_OP, current_user, OLD.id);

    RAISE EXCEPTION 'receipts are immutable: % denied for row %', TG_OP, OLD.id;
    RETURN NULL;
END;
$$ LANGUAGE plpgsql;
"""

TRIGGERS = [
    """
    CREATE TRIGGER audit_logs_no_update
        BEFORE UPDATE ON audit_logs
        FOR EACH ROW
        EXECUTE FUNCTION audit_logs_prevent_mutation();
    """,
    """
    CREATE TRIGGER audit_logs_no_delete
        BEFORE DELETE ON audit_logs
        FOR EACH ROW
        EXECUTE FUNCTION audit_logs_prevent_mutation();
    """,
    """
    CREATE TRIGGER receipts_guard_update
        BEFORE UPDATE ON receipts
        FOR EACH ROW
        EXECUTE FUNCTION receipts_guard_mutation();
    """,
    """
    CREATE TRIGGER receipts_no_delete
        BEFORE DELETE ON receipts
        FOR EACH ROW
        EXECUTE FUNCTION receipts_guard_mutation();
    """,
]


def upgrade() -> None:
    op.create_table(
        "immutable_row_violations",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "timestamp",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column("table_name", sa.String(64), nullable=False),
        sa.Column("attempted_operation", sa.String(10), nullable=False),
        sa.Column("db_user", sa.String(255), nullable=False),
        sa.Column("row_id", sa.String(36), nullable=True),
    )

    op.execute(AUDIT_LOGS_FUNCTION)
    op.execute(RECEIPTS_FUNCTION)
    for trigger in TRIGGERS:
        op.execute(trigger)


def downgrade() -> None:
    op.execute("DROP TRIGGER IF EXISTS receipts_no_delete ON receipts")
    op.execute("DROP TRIGGER IF EXISTS receipts_guard_update ON receipts")
    op.execute("DROP TRIGGER IF EXISTS audit_logs_no_delete ON audit_logs")
    op.execute("DROP TRIGGER IF EXISTS audit_logs_no_update ON audit_logs")
    op.execute("DROP FUNCTION IF EXISTS receipts_guard_mutation()")
    op.execute("DROP FUNCTION IF EXISTS audit_logs_prevent_mutation()")
    op.drop_table("immutable_row_violations")
