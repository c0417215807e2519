# This project was developed with assistance from AI tools.
"""Receipt lookup, verification, and the receipts & audit trail report."""

import logging

from db import Receipt, get_db
from db.enums import AuditAction, UserRole
from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import CurrentUser, require_roles
from ..schemas.auth import UserContext
from ..schemas.receipt import (
    ReceiptListResponse,
    ReceiptResponse,
    ReceiptsAuditResponse,
    ReceiptVerificationResponse,
)
from ..services import receipt as receipt_service
from ..services.audit import write_audit_log
from ..services.client import get_client
from ..services.pdf import render_audit_trail_pdf
from ..services.receipt import ReceiptNotFoundError
from ..services.receipt_hash import MalformedReceiptInput

logger = logging.getLogger(__name__)

router = APIRouter()

_ALL_STAFF = (UserRole.ADMIN, UserRole.ATTORNEY, UserRole.STAFF)


def _receipt_not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Receipt not found")


async def _visible_receipt(
    session: AsyncSession, user: UserContext, receipt: Receipt | None
) -> Receipt:
    # Receipts inherit the visibility of their client
    if receipt is None or await get_client(session, user, receipt.client_id) is None:
        raise _receipt_not_found()
    return receipt


@router.get(
    "/receipts/{receipt_id}/verify",
    response_model=ReceiptVerificationResponse,
    dependencies=[Depends(require_roles(*_ALL_STAFF))],
)
async def verify_receipt(
    receipt_id: str,
    user: CurrentUser,
    expected_hash: str | None = Query(default=None, max_length=128),
    session: AsyncSession = Depends(get_db),
) -> ReceiptVerificationResponse:
    """Recompute a receipt's hash and compare it.

    Compares against ``expected_hash`` when given, else the stored hash. A
    mismatch is reported with ``matches=false`` and recorded as a tamper
    event.
    """
    await _visible_receipt(session, user, await receipt_service.get_receipt(session, receipt_id))
    try:
        verification = await receipt_service.verify_and_record(
            session, receipt_id, expected_hash, user_id=user.user_id
        )
    except ReceiptNotFoundError as exc:
        raise _receipt_not_found() from exc
    except MalformedReceiptInput as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return ReceiptVerificationResponse.model_validate(verification)


@router.get(
    "/receipts/lookup/{receipt_number}",
    response_model=ReceiptResponse,
    dependencies=[Depends(require_roles(*_ALL_STAFF))],
)
async def lookup_receipt(
    receipt_number: str,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> ReceiptResponse:
    receipt = await receipt_service.get_receipt_by_number(session, receipt_number)
    return ReceiptResponse.model_validate(await _visible_receipt(session, user, receipt))


@router.get(
    "/clients/{client_id}/receipts",
    response_model=ReceiptListResponse,
    dependencies=[Depends(require_roles(*_ALL_STAFF))],
)
async def list_client_receipts(
    client_id: str,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> ReceiptListResponse:
    if await get_client(session, user, client_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Client not found")
    receipts = await receipt_service.list_client_receipts(session, client_id)
    return ReceiptListResponse(
        data=[ReceiptResponse.model_validate(r) for r in receipts], count=len(receipts)
    )


@router.get(
    "/clients/{client_id}/receipts-audit",
    response_model=ReceiptsAuditResponse,
    dependencies=[Depends(require_roles(*_ALL_STAFF))],
)
async def receipts_audit(
    client_id: str,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> ReceiptsAuditResponse:
    """Every receipt re-verified, plus the client's hashed audit trail."""
    if await get_client(session, user, client_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Client not found")
    report = await receipt_service.get_receipts_audit(session, client_id)
    return ReceiptsAuditResponse.model_validate(report)


@router.get(
    "/clients/{client_id}/receipts-audit/export",
    dependencies=[Depends(require_roles(*_ALL_STAFF))],
)
async def export_receipts_audit(
    client_id: str,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> Response:
    """Download the receipts & audit trail report as a PDF."""
    client = await get_client(session, user, client_id)
    if client is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Client not found")

    report = await receipt_service.get_receipts_audit(session, client_id)
    pdf = render_audit_trail_pdf(client, report)
    await write_audit_log(
        session,
        AuditAction.RECEIPTS_AUDIT_EXPORTED,
        "Receipts & audit trail report exported",
        user_id=user.user_id,
        client_id=client_id,
    )
    await session.commit()
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="audit-trail-{client_id}.pdf"',
        },
    )
