# This project was developed with assistance from AI tools.
"""Public invite portal. The invite token is the only credential."""

import logging

from db import Receipt, get_db
from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from fastapi.responses import Response
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from ..schemas.client import ClientResponse, ClientUpdate
from ..schemas.document import DocumentResponse, IntakeResponse
from ..schemas.invite import InvitePortalResponse
from ..schemas.policy import PolicyCreate, PolicyResponse
from ..schemas.receipt import ReceiptResponse
from ..services.document import DocumentTooLargeError, DocumentUploadError
from ..services.intake import EmptySubmissionError, IntakeUpload, submit_intake
from ..services.invite import InviteExpiredError, InviteNotFoundError, invite_url, lookup_invite
from ..services.pdf import render_receipt_pdf
from ..services.policy import UnknownInsurerError, load_client_policies
from ..services.receipt import get_receipt

logger = logging.getLogger(__name__)

router = APIRouter()


async def _resolve_invite(session: AsyncSession, token: str):
    try:
        return await lookup_invite(session, token)
    except InviteNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invite not found") from exc
    except InviteExpiredError as exc:
        raise HTTPException(status_code=status.HTTP_410_GONE, detail=str(exc)) from exc


def _parse_form_json(model, raw: str | None, field: str):
    if raw is None or not raw.strip():
        return None
    try:
        return model.model_validate_json(raw)
    except ValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Invalid {field}: {exc.errors(include_url=False)}",
        ) from exc


async def _invite_receipt(session: AsyncSession, client_id: str, receipt_id: str) -> Receipt:
    receipt = await get_receipt(session, receipt_id)
    if receipt is None or receipt.client_id != client_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Receipt not found")
    return receipt


@router.get("/{token}", response_model=InvitePortalResponse)
async def open_invite(
    token: str,
    session: AsyncSession = Depends(get_db),
) -> InvitePortalResponse:
    """Client details and registered policies for the invitee."""
    invite = await _resolve_invite(session, token)
    policies = await load_client_policies(session, invite.client_id)
    return InvitePortalResponse(
        client=ClientResponse.model_validate(invite.client),
        policies=[PolicyResponse.model_validate(p) for p in policies],
        expires_at=invite.expires_at,
        is_update=invite.used_at is not None,
    )


@router.post(
    "/{token}/upload-policy",
    response_model=IntakeResponse,
    status_code=status.HTTP_201_CREATED,
)
async def upload_policy(
    token: str,
    file: UploadFile | None = File(default=None),
    policy_data: str | None = Form(default=None),
    client_data: str | None = Form(default=None),
    change_request: str | None = Form(default=None, max_length=5000),
    session: AsyncSession = Depends(get_db),
) -> IntakeResponse:
    """Submit a policy document and/or details; always issues a new receipt.

    ``policy_data`` and ``client_data`` are JSON strings so they can travel
    alongside the file in one multipart request.
    """
    invite = await _resolve_invite(session, token)
    policy = _parse_form_json(PolicyCreate, policy_data, "policy_data")
    client_changes = _parse_form_json(ClientUpdate, client_data, "client_data")

    upload = None
    if file is not None and file.filename:
        upload = IntakeUpload(
            filename=file.filename,
            content_type=file.content_type or "",
            data=await file.read(),
        )

    try:
        result = await submit_intake(
            session,
            invite,
            upload=upload,
            policy_data=policy,
            client_data=client_changes,
            change_request=change_request,
        )
    except DocumentTooLargeError as exc:
        raise HTTPException(status_code=413, detail=str(exc)) from exc
    except (DocumentUploadError, EmptySubmissionError, UnknownInsurerError) as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc

    logger.info(
        "Invite submission %s for client %s issued receipt %s",
        result.submission.id,
        invite.client_id,
        result.receipt.receipt_number,
    )
    return IntakeResponse(
        submission_id=result.submission.id,
        receipt=ReceiptResponse.model_validate(result.receipt),
        policy=PolicyResponse.model_validate(result.policy) if result.policy else None,
        document=DocumentResponse.model_validate(result.document) if result.document else None,
        duplicate_document=result.duplicate_document,
        ocr_error=result.ocr_error,
        email_sent=result.email_sent,
    )


@router.get("/{token}/receipt/{receipt_id}", response_model=ReceiptResponse)
async def get_invite_receipt(
    token: str,
    receipt_id: str,
    session: AsyncSession = Depends(get_db),
) -> ReceiptResponse:
    invite = await _resolve_invite(session, token)
    return ReceiptResponse.model_validate(
        await _invite_receipt(session, invite.client_id, receipt_id)
    )


@router.get("/{token}/receipt/{receipt_id}/pdf")
async def download_invite_receipt(
    token: str,
    receipt_id: str,
    session: AsyncSession = Depends(get_db),
) -> Response:
    """Receipt PDF for the invitee, listing the policies the receipt covers."""
    invite = await _resolve_invite(session, token)
    receipt = await _invite_receipt(session, invite.client_id, receipt_id)
    policies = [
        p
        for p in await load_client_policies(session, invite.client_id)
        if p.created_at <= receipt.created_at
    ]
    pdf = render_receipt_pdf(receipt, invite.client, policies, update_url=invite_url(invite))
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="receipt-{receipt.receipt_number}.pdf"',
        },
    )
