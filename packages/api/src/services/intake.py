# This project was developed with assistance from AI tools.
"""Invite-portal intake: one client submission becomes one receipt.

A submission may carry a policy document, explicit policy fields, client
detail changes, or a free-text change request. Everything the submission
writes (document row, policy, client changes, submission record, receipt)
commits in a single transaction; the receipt hash is computed inside that
transaction so it covers the policy just registered.

Emails go out after the commit and are best-effort: a failure while
preparing or sending them never fails the submission.
"""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime

from db import ClientInvite, Document, Policy, Receipt, Submission
from db.enums import AuditAction, PolicyVerificationStatus, SubmissionStatus, SubmissionType
from fpdf.errors import FPDFException
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..schemas.client import ClientUpdate
from ..schemas.policy import PolicyCreate
from .audit import write_audit_log
from .client import apply_client_changes
from .document import archive_document
from .email import portal_url, send_attorney_notification, send_client_receipt
from .ocr import ExtractedPolicyData
from .pdf import render_receipt_pdf
from .policy import load_client_policies, resolve_carrier
from .receipt import create_receipt

logger = logging.getLogger(__name__)

UPLOAD_CHANNEL = "invite_portal"

# Client fields an invitee may change; email stays attorney-managed.
_CLIENT_EXCLUDE = {"email"}


class EmptySubmissionError(ValueError):
    """Raised when a submission carries nothing to record."""


@dataclass(frozen=True)
class IntakeUpload:
    filename: str
    content_type: str
    data: bytes


@dataclass
class IntakeResult:
    submission: Submission
    receipt: Receipt
    policy: Policy | None = None
    document: Document | None = None
    duplicate_document: bool = False
    ocr_error: str | None = None
    email_sent: bool = False


def submission_type_for(
    invite: ClientInvite, *, has_file: bool, change_request: str | None
) -> SubmissionType:
    if change_request:
        return SubmissionType.CHANGE_REQUEST
    if invite.used_at is None:
        return SubmissionType.INITIAL
    return SubmissionType.POLICY_UPLOAD if has_file else SubmissionType.UPDATE


def merge_policy_fields(
    extracted: ExtractedPolicyData | None,
    explicit: PolicyCreate | None,
) -> PolicyCreate:
    """Combine OCR guesses with form input. Explicit values always win."""
    merged = {}
    if extracted is not None:
        merged = {
            "policy_number": extracted.policy_number,
            "policy_type": extracted.policy_type,
            "insurer_name": extracted.insurer_name,
        }
    if explicit is not None:
        for field, value in explicit.model_dump().items():
            if value is not None and (not isinstance(value, str) or value.strip()):
                merged[field] = value
    return PolicyCreate(**merged)


async def _find_identical_policy(
    session: AsyncSession,
    client_id: str,
    policy_number: str | None,
    insurer_id: str | None,
    carrier_raw: str | None,
) -> Policy | None:
    if not policy_number:
        return None
    stmt = select(Policy).where(
        Policy.client_id == client_id,
        Policy.policy_number == policy_number,
    )
    if insurer_id is not None:
        stmt = stmt.where(Policy.insurer_id == insurer_id)
    else:
        stmt = stmt.where(Policy.insurer_id.is_(None), Policy.carrier_name_raw == carrier_raw)
    result = await session.execute(stmt.limit(1))
    return result.scalar_one_or_none()


async def _register_policy(
    session: AsyncSession,
    client_id: str,
    fields: PolicyCreate,
    document_hash: str | None,
) -> Policy | None:
    if not (fields.policy_number or fields.insurer_id or fields.insurer_name or document_hash):
        return None

    insurer_id, carrier_raw = await resolve_carrier(
        session, insurer_id=fields.insurer_id, insurer_name=fields.insurer_name
    )
    existing = await _find_identical_policy(
        session, client_id, fields.policy_number, insurer_id, carrier_raw
    )
    if existing is not None:
        logger.info("Reusing existing policy %s for client %s", existing.id, client_id)
        return existing

    policy = Policy(
        client_id=client_id,
        insurer_id=insurer_id,
        carrier_name_raw=carrier_raw,
        policy_number=fields.policy_number,
        policy_type=fields.policy_type,
        verification_status=PolicyVerificationStatus.PENDING,
        document_hash=document_hash,
    )
    session.add(policy)
    await session.flush()
    await write_audit_log(
        session,
        AuditAction.POLICY_CREATED,
        f"Policy registered via invite: {fields.policy_number or 'no number'}",
        client_id=client_id,
        policy_id=policy.id,
    )
    return policy


async def submit_intake(
    session: AsyncSession,
    invite: ClientInvite,
    *,
    upload: IntakeUpload | None = None,
    policy_data: PolicyCreate | None = None,
    client_data: ClientUpdate | None = None,
    change_request: str | None = None,
) -> IntakeResult:
    """Record one invite-portal submission and issue its receipt.

    ``invite`` must come from ``lookup_invite`` (client loaded, still usable).

    Raises:
        EmptySubmissionError: no file, policy fields, client changes, or
            change request.
        DocumentUploadError: the file failed validation.
        UnknownInsurerError: an explicit insurer id does not exist.
    """
    change_request = change_request.strip() if change_request else None
    client_changes = (
        client_data.model_dump(exclude_unset=True, exclude=_CLIENT_EXCLUDE) if client_data else {}
    )
    if upload is None and policy_data is None and not client_changes and not change_request:
        raise EmptySubmissionError("Nothing to submit")

    client = invite.client
    submission = Submission(
        client_id=client.id,
        invite_id=invite.id,
        status=SubmissionStatus.PROCESSING,
        submission_type=submission_type_for(
            invite, has_file=upload is not None, change_request=change_request
        ),
        submitted_data={
            "policy": policy_data.model_dump(mode="json") if policy_data else None,
            "client": {k: str(v) for k, v in client_changes.items()} or None,
            "change_request": change_request,
            "file_name": upload.filename if upload else None,
        },
    )
    session.add(submission)
    await session.flush()

    archived = None
    if upload is not None:
        archived = await archive_document(
            session,
            client_id=client.id,
            filename=upload.filename,
            content_type=upload.content_type,
            file_data=upload.data,
            uploaded_via=UPLOAD_CHANNEL,
            submission_id=submission.id,
        )

    policy = None
    if archived is not None and archived.duplicate and policy_data is None:
        # Same bytes as an earlier upload: the policy it produced stands.
        if archived.document.policy_id:
            policy = await session.get(Policy, archived.document.policy_id)
    elif not change_request:
        fields = merge_policy_fields(archived.extracted if archived else None, policy_data)
        document_hash = archived.document.document_hash if archived else None
        policy = await _register_policy(session, client.id, fields, document_hash)

    if archived is not None and not archived.duplicate:
        if policy is not None:
            archived.document.policy_id = policy.id
        await write_audit_log(
            session,
            AuditAction.DOCUMENT_PROCESSED,
            f"Document processed: {archived.document.file_name}"
            + (f" (OCR: {archived.ocr_error})" if archived.ocr_error else ""),
            client_id=client.id,
            policy_id=policy.id if policy else None,
        )

    changed = apply_client_changes(client, client_changes)
    if changed:
        await write_audit_log(
            session,
            AuditAction.CLIENT_UPDATED,
            f"Client updated via invite: {', '.join(sorted(changed))}",
            client_id=client.id,
        )

    if change_request:
        await write_audit_log(
            session,
            AuditAction.CLIENT_UPDATED,
            f"Change request submitted: {change_request[:500]}",
            client_id=client.id,
        )
    elif invite.used_at is None:
        invite.used_at = datetime.now(UTC)
        await write_audit_log(
            session,
            AuditAction.INVITE_ACCEPTED,
            f"Invite accepted by {invite.email}",
            client_id=client.id,
        )

    submission.status = SubmissionStatus.COMPLETED
    submission.processed_at = datetime.now(UTC)
    receipt = await create_receipt(
        session,
        client_id=client.id,
        submission_id=submission.id,
        invite_id=invite.id,
    )
    await session.commit()

    result = IntakeResult(
        submission=submission,
        receipt=receipt,
        policy=policy,
        document=archived.document if archived else None,
        duplicate_document=archived.duplicate if archived else False,
        ocr_error=archived.ocr_error if archived else None,
    )
    result.email_sent = await send_submission_emails(session, invite, receipt, submission.submission_type)
    return result


async def send_submission_emails(
    session: AsyncSession,
    invite: ClientInvite,
    receipt: Receipt,
    submission_type: SubmissionType,
) -> bool:
    """Mail the receipt to the client and notify the firm. Never raises.

    Runs after the receipt is committed, so a failure here is logged and the
    submission still succeeds. Returns True when the client receipt email
    was delivered.
    """
    client = invite.client
    update_url = portal_url(invite.token)
    try:
        policies = await load_client_policies(session, client.id)
        pdf = render_receipt_pdf(receipt, client, policies, update_url=update_url)
    except (SQLAlchemyError, FPDFException):
        logger.exception("Receipt %s email not prepared", receipt.receipt_number)
        return False

    summary = [
        f"{p.display_carrier or 'Unknown carrier'}: {p.policy_number or 'number not provided'}"
        for p in policies
    ]
    sent = await send_client_receipt(
        to=client.email,
        client_name=client.full_name,
        receipt_number=receipt.receipt_number,
        summary_lines=summary,
        receipt_pdf=pdf,
        update_url=update_url,
    )
    if sent:
        receipt.email_sent = True
        receipt.email_sent_at = datetime.now(UTC)
        try:
            await session.commit()
        except SQLAlchemyError:
            logger.exception(
                "Receipt %s was emailed but the sent flag was not saved", receipt.receipt_number
            )

    await send_attorney_notification(
        client_name=client.full_name,
        action=submission_type.value.replace("_", " ").title(),
        details={
            "Receipt": receipt.receipt_number,
            "Policies on file": str(len(policies)),
        },
    )
    return sent
