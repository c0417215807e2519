# This project was developed with assistance from AI tools.
"""Beneficiary routes. Creation and listing live under /clients/{client_id}."""

from db import get_db
from db.enums import UserRole
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import CurrentUser, require_roles
from ..schemas.beneficiary import BeneficiaryAttachRequest, BeneficiaryResponse, BeneficiaryUpdate
from ..services import beneficiary as beneficiary_service
from ..services.beneficiary import BeneficiaryPolicyError

router = APIRouter()

_ALL_STAFF = (UserRole.ADMIN, UserRole.ATTORNEY, UserRole.STAFF)


@router.patch(
    "/{beneficiary_id}",
    response_model=BeneficiaryResponse,
    dependencies=[Depends(require_roles(*_ALL_STAFF))],
)
async def update_beneficiary(
    beneficiary_id: str,
    body: BeneficiaryUpdate,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> BeneficiaryResponse:
    beneficiary = await beneficiary_service.update_beneficiary(session, user, beneficiary_id, body)
    if beneficiary is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Beneficiary not found")
    return BeneficiaryResponse.model_validate(beneficiary)


@router.post(
    "/{beneficiary_id}/policies",
    response_model=BeneficiaryResponse,
    dependencies=[Depends(require_roles(*_ALL_STAFF))],
)
async def attach_to_policy(
    beneficiary_id: str,
    body: BeneficiaryAttachRequest,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> BeneficiaryResponse:
    try:
        beneficiary = await beneficiary_service.attach_beneficiary(
            session, user, beneficiary_id, body.policy_id
        )
    except BeneficiaryPolicyError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    if beneficiary is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Beneficiary not found")
    return BeneficiaryResponse.model_validate(beneficiary)
