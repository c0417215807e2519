# This project was developed with assistance from AI tools.
"""Client registry routes with RBAC and data scope enforcement."""

import logging
import re

from db import get_db
from db.enums import AuditAction, UserRole
from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import CurrentUser, require_roles
from ..schemas import Pagination
from ..schemas.admin import AccessRequestResponse
from ..schemas.beneficiary import BeneficiaryCreate, BeneficiaryListResponse, BeneficiaryResponse
from ..schemas.client import (
    AccessRequestCreate,
    ClientCreate,
    ClientListResponse,
    ClientResponse,
    ClientUpdate,
)
from ..schemas.invite import InviteResponse
from ..schemas.policy import PolicyCreate, PolicyListResponse, PolicyResponse
from ..services import beneficiary as beneficiary_service
from ..services import client as client_service
from ..services import invite as invite_service
from ..services import policy as policy_service
from ..services.access import request_access
from ..services.audit import write_audit_log
from ..services.beneficiary import BeneficiaryPolicyError
from ..services.client import DuplicateClientError
from ..services.pdf import render_client_summary_pdf
from ..services.policy import UnknownInsurerError
from ..services.summary import load_client_summary

logger = logging.getLogger(__name__)

router = APIRouter()

_ALL_STAFF = (UserRole.ADMIN, UserRole.ATTORNEY, UserRole.STAFF)


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Client not found")


def _slug(text: str) -> str:
    return re.sub(r"[^A-Za-z0-9_-]+", "-", text).strip("-").lower() or "client"


def _invite_response(invite) -> InviteResponse:
    response = InviteResponse.model_validate(invite)
    response.invite_url = invite_service.invite_url(invite)
    return response


@router.post(
    "/",
    response_model=ClientResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(*_ALL_STAFF))],
)
async def create_client(
    body: ClientCreate,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> ClientResponse:
    """Register a client. The creating attorney is granted access."""
    try:
        client = await client_service.create_client(session, user, body)
    except DuplicateClientError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"A client with this identity already exists (id={exc.existing_id})",
        ) from exc
    return ClientResponse.model_validate(client)


@router.get(
    "/",
    response_model=ClientListResponse,
    dependencies=[Depends(require_roles(*_ALL_STAFF))],
)
async def list_clients(
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
    search: str | None = Query(default=None, max_length=100),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=20, ge=1, le=100),
) -> ClientListResponse:
    """List clients visible to the current user."""
    clients, total = await client_service.list_clients(
        session, user, search=search, offset=offset, limit=limit
    )
    return ClientListResponse(
        data=[ClientResponse.model_validate(c) for c in clients],
        pagination=Pagination(
            total=total,
            offset=offset,
            limit=limit,
            has_more=(offset + limit) < total,
        ),
    )


@router.get(
    "/{client_id}",
    response_model=ClientResponse,
    dependencies=[Depends(require_roles(*_ALL_STAFF))],
)
async def get_client(
    client_id: str,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> ClientResponse:
    client = await client_service.get_client(session, user, client_id, record_view=True)
    if client is None:
        raise _not_found()
    return ClientResponse.model_validate(client)


@router.patch(
    "/{client_id}",
    response_model=ClientResponse,
    dependencies=[Depends(require_roles(*_ALL_STAFF))],
)
async def update_client(
    client_id: str,
    body: ClientUpdate,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> ClientResponse:
    client = await client_service.update_client(session, user, client_id, body)
    if client is None:
        raise _not_found()
    return ClientResponse.model_validate(client)


@router.get(
    "/{client_id}/summary-pdf",
    dependencies=[Depends(require_roles(*_ALL_STAFF))],
)
async def download_summary_pdf(
    client_id: str,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> Response:
    """Registry summary PDF: client details, policies and beneficiaries."""
    summary = await load_client_summary(session, user, client_id)
    if summary is None:
        raise _not_found()

    client = summary.client
    pdf = render_client_summary_pdf(client, summary.policies, summary.beneficiaries)
    await write_audit_log(
        session,
        AuditAction.CLIENT_SUMMARY_PDF_DOWNLOADED,
        f"Summary PDF downloaded for {client.first_name} {client.last_name}",
        user_id=user.user_id,
        client_id=client.id,
    )
    await session.commit()
    filename = _slug(f"heirvault-{client.last_name}-{client.first_name}")
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}.pdf"'},
    )


# -- Policies --


@router.get(
    "/{client_id}/policies",
    response_model=PolicyListResponse,
    dependencies=[Depends(require_roles(*_ALL_STAFF))],
)
async def list_client_policies(
    client_id: str,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> PolicyListResponse:
    policies = await policy_service.list_client_policies(session, user, client_id)
    if policies is None:
        raise _not_found()
    return PolicyListResponse(
        data=[PolicyResponse.model_validate(p) for p in policies], count=len(policies)
    )


@router.post(
    "/{client_id}/policies",
    response_model=PolicyResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(*_ALL_STAFF))],
)
async def create_policy(
    client_id: str,
    body: PolicyCreate,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> PolicyResponse:
    try:
        policy = await policy_service.create_policy(session, user, client_id, body)
    except UnknownInsurerError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    if policy is None:
        raise _not_found()
    return PolicyResponse.model_validate(policy)


# -- Beneficiaries --


@router.get(
    "/{client_id}/beneficiaries",
    response_model=BeneficiaryListResponse,
    dependencies=[Depends(require_roles(*_ALL_STAFF))],
)
async def list_beneficiaries(
    client_id: str,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> BeneficiaryListResponse:
    beneficiaries = await beneficiary_service.list_beneficiaries(session, user, client_id)
    if beneficiaries is None:
        raise _not_found()
    return BeneficiaryListResponse(
        data=[BeneficiaryResponse.model_validate(b) for b in beneficiaries],
        count=len(beneficiaries),
    )


@router.post(
    "/{client_id}/beneficiaries",
    response_model=BeneficiaryResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(*_ALL_STAFF))],
)
async def create_beneficiary(
    client_id: str,
    body: BeneficiaryCreate,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> BeneficiaryResponse:
    try:
        beneficiary = await beneficiary_service.create_beneficiary(session, user, client_id, body)
    except BeneficiaryPolicyError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    if beneficiary is None:
        raise _not_found()
    return BeneficiaryResponse.model_validate(beneficiary)


# -- Invites --


@router.post(
    "/{client_id}/invites",
    response_model=InviteResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(*_ALL_STAFF))],
)
async def create_invite(
    client_id: str,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
    send_email: bool = Query(default=True),
) -> InviteResponse:
    """Issue a portal invite for the client and email it (best-effort)."""
    invite = await invite_service.create_invite(session, user, client_id, send_email=send_email)
    if invite is None:
        raise _not_found()
    return _invite_response(invite)


@router.get(
    "/{client_id}/invites",
    response_model=list[InviteResponse],
    dependencies=[Depends(require_roles(*_ALL_STAFF))],
)
async def list_invites(
    client_id: str,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> list[InviteResponse]:
    invites = await invite_service.list_client_invites(session, user, client_id)
    if invites is None:
        raise _not_found()
    return [_invite_response(i) for i in invites]


# -- Access requests --


@router.post(
    "/{client_id}/access-requests",
    response_model=AccessRequestResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(UserRole.ATTORNEY))],
)
async def create_access_request(
    client_id: str,
    body: AccessRequestCreate,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> AccessRequestResponse:
    """Ask an admin for access to a client the attorney cannot see yet."""
    access_request = await request_access(session, user, client_id, body.reason)
    if access_request is None:
        raise _not_found()
    return AccessRequestResponse.model_validate(access_request)
