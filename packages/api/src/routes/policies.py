# This project was developed with assistance from AI tools.
"""Policy routes. Creation lives under /clients/{client_id}/policies."""

from datetime import date

from db import get_db
from db.enums import UserRole
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import CurrentUser, require_roles
from ..schemas.policy import (
    PolicyListResponse,
    PolicyLocatorResponse,
    PolicyLocatorResult,
    PolicyResolveInsurerRequest,
    PolicyResponse,
    PolicyUpdate,
    PolicyVerifyRequest,
)
from ..services import policy as policy_service
from ..services.policy import UnknownInsurerError

router = APIRouter()

_ALL_STAFF = (UserRole.ADMIN, UserRole.ATTORNEY, UserRole.STAFF)


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Policy not found")


@router.get(
    "/search",
    response_model=PolicyListResponse,
    dependencies=[Depends(require_roles(*_ALL_STAFF))],
)
async def search_policies(
    user: CurrentUser,
    q: str = Query(..., min_length=2, max_length=100),
    session: AsyncSession = Depends(get_db),
) -> PolicyListResponse:
    """Search visible policies by number, carrier, or insured's name."""
    policies = await policy_service.search_policies(session, user, q)
    return PolicyListResponse(
        data=[PolicyResponse.model_validate(p) for p in policies], count=len(policies)
    )


@router.get(
    "/locator",
    response_model=PolicyLocatorResponse,
    dependencies=[Depends(require_roles(*_ALL_STAFF))],
)
async def locate_policies(
    user: CurrentUser,
    first_name: str = Query(..., min_length=1, max_length=100),
    last_name: str = Query(..., min_length=1, max_length=100),
    date_of_birth: date | None = Query(default=None),
    policy_number: str | None = Query(default=None, max_length=100),
    session: AsyncSession = Depends(get_db),
) -> PolicyLocatorResponse:
    """Look up a person's registered policies by name, DOB and policy number."""
    try:
        policies = await policy_service.locate_policies(
            session,
            user,
            first_name=first_name,
            last_name=last_name,
            date_of_birth=date_of_birth,
            policy_number=policy_number,
        )
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)
        ) from exc
    results = [
        PolicyLocatorResult(
            client_id=p.client_id,
            client_name=p.client.full_name,
            date_of_birth=p.client.date_of_birth,
            policy_id=p.id,
            policy_number=p.policy_number,
            policy_type=p.policy_type,
            insurer_name=p.display_carrier,
            verification_status=p.verification_status,
        )
        for p in policies
    ]
    return PolicyLocatorResponse(results=results, count=len(results))


@router.get(
    "/{policy_id}",
    response_model=PolicyResponse,
    dependencies=[Depends(require_roles(*_ALL_STAFF))],
)
async def get_policy(
    policy_id: str,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> PolicyResponse:
    policy = await policy_service.get_policy(session, user, policy_id)
    if policy is None:
        raise _not_found()
    return PolicyResponse.model_validate(policy)


@router.patch(
    "/{policy_id}",
    response_model=PolicyResponse,
    dependencies=[Depends(require_roles(*_ALL_STAFF))],
)
async def update_policy(
    policy_id: str,
    body: PolicyUpdate,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> PolicyResponse:
    try:
        policy = await policy_service.update_policy(session, user, policy_id, body)
    except UnknownInsurerError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    if policy is None:
        raise _not_found()
    return PolicyResponse.model_validate(policy)


@router.post(
    "/{policy_id}/verify",
    response_model=PolicyResponse,
    dependencies=[Depends(require_roles(UserRole.ADMIN, UserRole.ATTORNEY))],
)
async def verify_policy(
    policy_id: str,
    body: PolicyVerifyRequest,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> PolicyResponse:
    """Record the outcome of checking a policy with its carrier."""
    policy = await policy_service.verify_policy(session, user, policy_id, body.status, body.notes)
    if policy is None:
        raise _not_found()
    return PolicyResponse.model_validate(policy)


@router.post(
    "/{policy_id}/resolve-insurer",
    response_model=PolicyResponse,
    dependencies=[Depends(require_roles(UserRole.ADMIN))],
)
async def resolve_insurer(
    policy_id: str,
    body: PolicyResolveInsurerRequest,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> PolicyResponse:
    """Attach a free-text carrier to a directory insurer."""
    try:
        policy = await policy_service.resolve_policy_insurer(
            session, user, policy_id, body.insurer_id
        )
    except UnknownInsurerError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    if policy is None:
        raise _not_found()
    return PolicyResponse.model_validate(policy)
