# This project was developed with assistance from AI tools.
"""Admin console command dispatcher.

Commands form a closed whitelist: no raw SQL, no shell, no environment
dumps. Every command takes a JSON object of arguments. Commands that change
state are flagged ``writes`` and are recorded in the audit log.
"""

import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from db import AuditLog, Client, Receipt
from db.enums import AccessRequestStatus, AuditAction, UserRole
from sqlalchemy import func, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ...schemas.auth import UserContext
from ..access import grant_access, list_access_requests, revoke_access
from ..audit import get_recent_audit_logs, write_audit_log
from ..invite import reactivate_invite
from ..receipt import ReceiptNotFoundError, get_receipt_by_number, verify_and_record
from ..receipt_hash import MalformedReceiptInput

logger = logging.getLogger(__name__)

MAX_LOG_LIMIT = 200


class CommandError(ValueError):
    """Raised by a handler for missing or invalid arguments."""


@dataclass(frozen=True)
class ConsoleResult:
    ok: bool
    data: Any = None
    error: str | None = None


Handler = Callable[[AsyncSession, UserContext, dict[str, Any]], Awaitable[Any]]


@dataclass(frozen=True)
class CommandDef:
    id: str
    title: str
    description: str
    usage: str
    handler: Handler
    writes: bool = False
    roles: tuple[UserRole, ...] = field(default=(UserRole.ADMIN,))


def require_string(args: dict[str, Any], key: str) -> str:
    value = args.get(key)
    if not isinstance(value, str) or not value.strip():
        raise CommandError(f"Missing/invalid argument: {key}")
    return value.strip()


def optional_int(args: dict[str, Any], key: str, default: int, *, low: int, high: int) -> int:
    value = args.get(key)
    if value is None:
        return default
    try:
        number = int(value)
    except (TypeError, ValueError) as exc:
        raise CommandError(f"Missing/invalid argument: {key}") from exc
    return min(max(number, low), high)


async def _client_exists(session: AsyncSession, client_id: str) -> bool:
    result = await session.execute(select(Client.id).where(Client.id == client_id))
    return result.scalar_one_or_none() is not None


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


async def _help(_session, _user, _args):
    return [command_info(c) for c in COMMANDS.values()]


async def _whoami(_session, user, _args):
    return {
        "user_id": user.user_id,
        "email": user.email,
        "name": user.name,
        "role": user.role.value,
    }


async def _db_health(session, _user, _args):
    started = time.perf_counter()
    try:
        version = (await session.execute(text("SELECT version()"))).scalar()
        counts = {
            "clients": (await session.execute(select(func.count(Client.id)))).scalar_one(),
            "receipts": (await session.execute(select(func.count(Receipt.id)))).scalar_one(),
            "audit_logs": (await session.execute(select(func.count(AuditLog.id)))).scalar_one(),
        }
    except SQLAlchemyError as exc:
        raise CommandError(f"Database health check failed: {exc.__class__.__name__}") from exc
    return {
        "status": "ok",
        "version": version,
        "latency_ms": round((time.perf_counter() - started) * 1000, 1),
        "counts": counts,
    }


async def _logs_recent(session, _user, args):
    limit = optional_int(args, "limit", 25, low=1, high=MAX_LOG_LIMIT)
    entries = await get_recent_audit_logs(session, limit=limit)
    return [
        {
            "id": e.id,
            "action": e.action.value if isinstance(e.action, AuditAction) else e.action,
            "message": e.message,
            "user_id": e.user_id,
            "client_id": e.client_id,
            "created_at": e.created_at.isoformat() if e.created_at else None,
        }
        for e in entries
    ]


async def _receipts_verify(session, user, args):
    receipt_id = args.get("receipt_id")
    if not receipt_id and args.get("receipt_number"):
        receipt = await get_receipt_by_number(session, require_string(args, "receipt_number"))
        if receipt is None:
            raise CommandError("Receipt not found")
        receipt_id = receipt.id
    if not isinstance(receipt_id, str) or not receipt_id.strip():
        raise CommandError("Missing/invalid argument: receipt_id or receipt_number")

    try:
        verification = await verify_and_record(
            session, receipt_id.strip(), args.get("expected_hash"), user_id=user.user_id
        )
    except ReceiptNotFoundError as exc:
        raise CommandError("Receipt not found") from exc
    except MalformedReceiptInput as exc:
        raise CommandError(str(exc)) from exc
    return {
        "receipt_id": verification.receipt_id,
        "receipt_number": verification.receipt_number,
        "matches": verification.matches,
        "expected_hash": verification.expected_hash,
        "recomputed_hash": verification.recomputed_hash,
        "policies_hashed": verification.policies_hashed,
    }


async def _access_grant(session, user, args):
    attorney_id = require_string(args, "attorney_id")
    client_id = require_string(args, "client_id")
    if not await _client_exists(session, client_id):
        raise CommandError("Client not found")
    grant = await grant_access(
        session, attorney_id=attorney_id, client_id=client_id, granted_by=user
    )
    return {"attorney_id": grant.attorney_id, "client_id": grant.client_id, "active": True}


async def _access_revoke(session, user, args):
    attorney_id = require_string(args, "attorney_id")
    client_id = require_string(args, "client_id")
    grant = await revoke_access(
        session, attorney_id=attorney_id, client_id=client_id, revoked_by=user
    )
    if grant is None:
        raise CommandError("No active access grant for that attorney and client")
    return {"attorney_id": attorney_id, "client_id": client_id, "active": False}


async def _access_requests_list(session, _user, args):
    raw_status = args.get("status", AccessRequestStatus.PENDING.value)
    status = None
    if raw_status not in (None, "ALL", "all"):
        try:
            status = AccessRequestStatus(str(raw_status).upper())
        except ValueError as exc:
            raise CommandError(f"Unknown status: {raw_status}") from exc
    requests = await list_access_requests(session, status=status)
    return [
        {
            "id": r.id,
            "attorney_id": r.attorney_id,
            "attorney_email": r.attorney_email,
            "client_id": r.client_id,
            "status": r.status.value,
            "reason": r.reason,
            "created_at": r.created_at.isoformat() if r.created_at else None,
        }
        for r in requests
    ]


async def _invites_reactivate(session, user, args):
    invite_id = require_string(args, "invite_id")
    ttl_days = optional_int(args, "ttl_days", 0, low=0, high=365) or None
    invite = await reactivate_invite(session, user, invite_id, ttl_days=ttl_days)
    if invite is None:
        raise CommandError("Invite not found")
    return {"invite_id": invite.id, "expires_at": invite.expires_at.isoformat()}


_DEFINITIONS = [
    CommandDef("help", "Help", "List available commands and usage.", "help", _help),
    CommandDef(
        "auth:whoami", "Who am I", "Show the current authenticated admin.", "auth:whoami", _whoami
    ),
    CommandDef(
        "db:health",
        "DB health",
        "Check database connectivity with a few lightweight reads.",
        "db:health",
        _db_health,
    ),
    CommandDef(
        "logs:recent",
        "Recent audit log",
        "Show the most recent audit entries.",
        "logs:recent { limit?: number }",
        _logs_recent,
    ),
    CommandDef(
        "receipts:verify",
        "Verify receipt",
        "Recompute a receipt's hash and compare it to the stored or supplied digest.",
        "receipts:verify { receipt_id?: string, receipt_number?: string, expected_hash?: string }",
        _receipts_verify,
    ),
    CommandDef(
        "access:grant",
        "Grant access",
        "Give an attorney access to a client.",
        "access:grant { attorney_id: string, client_id: string }",
        _access_grant,
        writes=True,
    ),
    CommandDef(
        "access:revoke",
        "Revoke access",
        "Remove an attorney's access to a client.",
        "access:revoke { attorney_id: string, client_id: string }",
        _access_revoke,
        writes=True,
    ),
    CommandDef(
        "access-requests:list",
        "Access requests",
        "List attorney access requests (default: pending).",
        "access-requests:list { status?: PENDING|APPROVED|DENIED|ALL }",
        _access_requests_list,
    ),
    CommandDef(
        "invites:reactivate",
        "Reactivate invite",
        "Give a client invite a fresh expiry and clear any revocation.",
        "invites:reactivate { invite_id: string, ttl_days?: number }",
        _invites_reactivate,
        writes=True,
    ),
]

COMMANDS: dict[str, CommandDef] = {c.id: c for c in _DEFINITIONS}
WRITE_COMMANDS = frozenset(c.id for c in _DEFINITIONS if c.writes)


def command_info(command: CommandDef) -> dict[str, Any]:
    return {
        "id": command.id,
        "title": command.title,
        "description": command.description,
        "usage": command.usage,
        "writes": command.writes,
    }


async def execute_command(
    session: AsyncSession,
    user: UserContext,
    cmd: str,
    args: dict[str, Any] | None = None,
) -> ConsoleResult:
    """Run one whitelisted command.

    Unknown commands, role denials and argument errors come back as
    ``ok=False`` results rather than exceptions.
    """
    command = COMMANDS.get(cmd)
    if command is None:
        return ConsoleResult(ok=False, error=f"Unknown command: {cmd}")
    if user.role not in command.roles:
        logger.warning("Console denied: user=%s role=%s cmd=%s", user.user_id, user.role.value, cmd)
        return ConsoleResult(ok=False, error="Insufficient permissions")

    args = args or {}
    try:
        data = await command.handler(session, user, args)
    except CommandError as exc:
        logger.info("Console command %s failed: %s", cmd, exc)
        return ConsoleResult(ok=False, error=str(exc))

    if command.writes:
        await write_audit_log(
            session,
            AuditAction.ADMIN_COMMAND_EXECUTED,
            f"Console command {cmd} executed with args {sorted(args)}",
            user_id=user.user_id,
            client_id=args.get("client_id") if isinstance(args.get("client_id"), str) else None,
        )
        await session.commit()

    logger.info("Console command %s executed by %s", cmd, user.user_id)
    return ConsoleResult(ok=True, data=data)
