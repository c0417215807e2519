# This project was developed with assistance from AI tools.
"""Admin endpoints: console, natural-language planning, access requests, invites."""

import logging

from db import get_db
from db.enums import AccessRequestStatus, UserRole
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import CurrentUser, require_roles
from ..schemas.admin import (
    AccessRequestListResponse,
    AccessRequestResponse,
    ConsoleCommandInfo,
    ConsoleCommandsResponse,
    ConsoleRequest,
    ConsoleResponse,
    InviteReactivateRequest,
    NLExecuteRequest,
    NLPlanRequest,
    NLPlanResponse,
)
from ..schemas.invite import InviteResponse
from ..services.access import AccessRequestStateError, decide_access_request, list_access_requests
from ..services.console.commands import COMMANDS, WRITE_COMMANDS, command_info, execute_command
from ..services.console.planner import plan_from_text
from ..services.invite import invite_url, reactivate_invite

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/console/commands",
    response_model=ConsoleCommandsResponse,
    dependencies=[Depends(require_roles(UserRole.ADMIN))],
)
async def list_console_commands() -> ConsoleCommandsResponse:
    return ConsoleCommandsResponse(
        commands=[ConsoleCommandInfo(**command_info(c)) for c in COMMANDS.values()]
    )


@router.post(
    "/console",
    response_model=ConsoleResponse,
    dependencies=[Depends(require_roles(UserRole.ADMIN))],
)
async def run_console_command(
    body: ConsoleRequest,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> ConsoleResponse:
    """Run a whitelisted command. Failures come back with ``ok=false``."""
    result = await execute_command(session, user, body.cmd, body.args)
    return ConsoleResponse(ok=result.ok, cmd=body.cmd, data=result.data, error=result.error)


@router.post(
    "/nl/plan",
    response_model=NLPlanResponse,
    dependencies=[Depends(require_roles(UserRole.ADMIN))],
)
async def plan_natural_language(body: NLPlanRequest, user: CurrentUser) -> NLPlanResponse:
    """Translate free text into a command plan. Nothing is executed."""
    plan = await plan_from_text(body.text)
    logger.info(
        "NL plan for %s: cmd=%s flags=%s", user.user_id, plan.cmd, ",".join(plan.safety_flags)
    )
    return plan


@router.post(
    "/nl/execute",
    response_model=ConsoleResponse,
    dependencies=[Depends(require_roles(UserRole.ADMIN))],
)
async def execute_natural_language(
    body: NLExecuteRequest,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> ConsoleResponse:
    """Execute a previously planned command. Write commands need ``confirm``."""
    if body.cmd not in COMMANDS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Command is not whitelisted: {body.cmd}",
        )
    if body.cmd in WRITE_COMMANDS and not body.confirm:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Confirmation required for write commands",
        )
    result = await execute_command(session, user, body.cmd, body.args)
    return ConsoleResponse(ok=result.ok, cmd=body.cmd, data=result.data, error=result.error)


@router.get(
    "/access-requests",
    response_model=AccessRequestListResponse,
    dependencies=[Depends(require_roles(UserRole.ADMIN))],
)
async def get_access_requests(
    request_status: AccessRequestStatus | None = Query(
        default=AccessRequestStatus.PENDING, alias="status"
    ),
    limit: int = Query(default=100, ge=1, le=500),
    session: AsyncSession = Depends(get_db),
) -> AccessRequestListResponse:
    requests = await list_access_requests(session, status=request_status, limit=limit)
    return AccessRequestListResponse(
        data=[AccessRequestResponse.model_validate(r) for r in requests],
        count=len(requests),
    )


async def _decide(session: AsyncSession, user, request_id: str, approve: bool):
    try:
        decided = await decide_access_request(session, user, request_id, approve=approve)
    except AccessRequestStateError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    if decided is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Access request not found"
        )
    return AccessRequestResponse.model_validate(decided)


@router.post(
    "/access-requests/{request_id}/approve",
    response_model=AccessRequestResponse,
    dependencies=[Depends(require_roles(UserRole.ADMIN))],
)
async def approve_access_request(
    request_id: str,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> AccessRequestResponse:
    """Approve a pending request and grant the attorney access."""
    return await _decide(session, user, request_id, approve=True)


@router.post(
    "/access-requests/{request_id}/deny",
    response_model=AccessRequestResponse,
    dependencies=[Depends(require_roles(UserRole.ADMIN))],
)
async def deny_access_request(
    request_id: str,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> AccessRequestResponse:
    return await _decide(session, user, request_id, approve=False)


@router.post(
    "/invites/{invite_id}/reactivate",
    response_model=InviteResponse,
    dependencies=[Depends(require_roles(UserRole.ADMIN))],
)
async def reactivate_client_invite(
    invite_id: str,
    user: CurrentUser,
    body: InviteReactivateRequest | None = None,
    session: AsyncSession = Depends(get_db),
) -> InviteResponse:
    invite = await reactivate_invite(
        session, user, invite_id, ttl_days=body.ttl_days if body else None
    )
    if invite is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invite not found")
    response = InviteResponse.model_validate(invite)
    response.invite_url = invite_url(invite)
    return response
