# This project was developed with assistance from AI tools.
"""
Keycloak bearer-token authentication.

Tokens are verified against the realm's JWKS (cached, refreshed on unknown
``kid`` for key rotation). The effective role comes from
``realm_access.roles``; the data scope for that role comes from
``core.auth.build_data_scope``.

Set AUTH_DISABLED=true to skip verification for local runs without Keycloak.
"""

import logging
import time
from typing import Annotated

import httpx
import jwt
from db.enums import UserRole
from fastapi import Depends, HTTPException, Request, status

from ..core.auth import build_data_scope
from ..core.config import settings
from ..schemas.auth import DataScope, TokenPayload, UserContext

logger = logging.getLogger(__name__)


def _realm_url() -> str:
    return f"{settings.KEYCLOAK_URL.rstrip('/')}/realms/{settings.KEYCLOAK_REALM}"


class JwksCache:
    """Realm signing keys, re-fetched after ``ttl`` seconds or on a miss."""

    def __init__(self, ttl: int):
        self.ttl = ttl
        self._keys: dict[str, jwt.PyJWK] = {}
        self._fetched_at = 0.0

    def _refresh(self) -> None:
        response = httpx.get(f"{_realm_url()}/protocol/openid-connect/certs", timeout=5)
        response.raise_for_status()
        jwk_set = jwt.PyJWKSet.from_dict(response.json())
        self._keys = {key.key_id: key for key in jwk_set.keys if key.key_id}
        self._fetched_at = time.monotonic()

    def _stale(self) -> bool:
        return not self._keys or (time.monotonic() - self._fetched_at) > self.ttl

    def get(self, kid: str | None) -> jwt.PyJWK:
        if self._stale():
            self._refresh()
        key = self._keys.get(kid)
        if key is None:
            # Unknown kid usually means the realm rotated keys
            self._refresh()
            key = self._keys.get(kid)
        if key is None:
            raise jwt.InvalidTokenError(f"No signing key for kid={kid}")
        return key

    def clear(self) -> None:
        self._keys = {}
        self._fetched_at = 0.0


_jwks = JwksCache(ttl=settings.JWKS_CACHE_TTL)


def _bearer_token(request: Request) -> str | None:
    scheme, _, credentials = request.headers.get("Authorization", "").partition(" ")
    if scheme.lower() != "bearer" or not credentials:
        return None
    return credentials.strip()


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _decode_token(token: str) -> TokenPayload:
    """Verify signature, issuer and (when configured) audience."""
    kid = jwt.get_unverified_header(token).get("kid")
    try:
        signing_key = _jwks.get(kid)
    except httpx.HTTPError as exc:
        logger.error("JWKS fetch from %s failed: %s", _realm_url(), exc)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Authentication service unavailable",
        ) from exc

    claims = jwt.decode(
        token,
        signing_key.key,
        algorithms=["RS256"],
        issuer=_realm_url(),
        audience=settings.KEYCLOAK_AUDIENCE,
        options={"verify_aud": settings.KEYCLOAK_AUDIENCE is not None},
    )
    return TokenPayload.model_validate(claims)


# Most privileged first; a user holding several roles acts as the first match.
_ROLE_PRECEDENCE = (UserRole.ADMIN, UserRole.STAFF, UserRole.ATTORNEY)


def _resolve_role(token_payload: TokenPayload) -> UserRole:
    granted = set(token_payload.realm_access.get("roles", []))
    # Keycloak built-ins (offline_access, uma_authorization, ...) never match
    for role in _ROLE_PRECEDENCE:
        if role.value in granted:
            return role
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="No recognized role assigned",
    )


_DISABLED_USER = UserContext(
    user_id="dev-user",
    role=UserRole.ADMIN,
    email="dev@heirvault.local",
    name="Local Admin",
    data_scope=DataScope(full_access=True),
)


async def get_current_user(request: Request) -> UserContext:
    """Authenticated caller for the request.

    With AUTH_DISABLED every request acts as a local admin.
    """
    if settings.AUTH_DISABLED:
        return _DISABLED_USER

    token = _bearer_token(request)
    if token is None:
        raise _unauthorized("Missing authentication token")

    try:
        claims = _decode_token(token)
    except jwt.ExpiredSignatureError as exc:
        raise _unauthorized("Token has expired") from exc
    except jwt.InvalidTokenError as exc:
        raise _unauthorized("Invalid token") from exc

    role = _resolve_role(claims)
    return UserContext(
        user_id=claims.sub,
        role=role,
        email=claims.email,
        name=claims.name or claims.preferred_username,
        data_scope=build_data_scope(role, claims.sub),
    )


CurrentUser = Annotated[UserContext, Depends(get_current_user)]


def require_roles(*allowed_roles: UserRole):
    """Route dependency rejecting callers outside ``allowed_roles`` with 403."""
    allowed = frozenset(allowed_roles)

    async def _check(user: CurrentUser) -> UserContext:
        if user.role in allowed:
            return user
        logger.warning(
            "Denied %s (%s): route needs one of %s",
            user.user_id,
            user.role.value,
            sorted(r.value for r in allowed),
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Insufficient permissions",
        )

    return _check
