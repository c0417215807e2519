# This project was developed with assistance from AI tools.
"""Insurer directory routes."""

from db import get_db
from db.enums import UserRole
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import require_roles
from ..schemas.insurer import InsurerCreate, InsurerListResponse, InsurerResponse
from ..services import insurer as insurer_service
from ..services.insurer import DuplicateInsurerError

router = APIRouter()


@router.get(
    "/",
    response_model=InsurerListResponse,
    dependencies=[Depends(require_roles(UserRole.ADMIN, UserRole.ATTORNEY, UserRole.STAFF))],
)
async def list_insurers(
    session: AsyncSession = Depends(get_db),
    search: str | None = Query(default=None, max_length=100),
    limit: int = Query(default=100, ge=1, le=500),
) -> InsurerListResponse:
    insurers = await insurer_service.list_insurers(session, search=search, limit=limit)
    return InsurerListResponse(
        data=[InsurerResponse.model_validate(i) for i in insurers], count=len(insurers)
    )


@router.post(
    "/",
    response_model=InsurerResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(UserRole.ADMIN, UserRole.STAFF))],
)
async def create_insurer(
    body: InsurerCreate,
    session: AsyncSession = Depends(get_db),
) -> InsurerResponse:
    try:
        insurer = await insurer_service.create_insurer(session, **body.model_dump())
    except DuplicateInsurerError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    return InsurerResponse.model_validate(insurer)
