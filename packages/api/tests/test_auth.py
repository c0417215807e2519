# This project was developed with assistance from AI tools.
"""Tests for JWT authentication middleware."""

import pytest
from db.enums import UserRole
from fastapi import Depends, FastAPI, HTTPException
from fastapi.testclient import TestClient

from src.core.config import settings
from src.middleware.auth import CurrentUser, _bearer_token, _resolve_role, require_roles
from src.schemas.auth import TokenPayload

# ---------------------------------------------------------------------------
# AUTH_DISABLED bypass
# ---------------------------------------------------------------------------


def test_auth_disabled_returns_dev_admin(monkeypatch):
    """When AUTH_DISABLED=true, any request gets a dev admin user."""
    monkeypatch.setattr(settings, "AUTH_DISABLED", True)

    app = FastAPI()

    @app.get("/me")
    async def me(user: CurrentUser):
        return {"user_id": user.user_id, "role": user.role.value}

    test_client = TestClient(app)
    resp = test_client.get("/me")
    assert resp.status_code == 200
    body = resp.json()
    assert body["user_id"] == "dev-user"
    assert body["role"] == "admin"


# ---------------------------------------------------------------------------
# Missing / malformed token
# ---------------------------------------------------------------------------


def test_missing_token_returns_401(monkeypatch):
    """A request with no Authorization header should get 401."""
    monkeypatch.setattr(settings, "AUTH_DISABLED", False)

    app = FastAPI()

    @app.get("/me")
    async def me(user: CurrentUser):
        return {}

    test_client = TestClient(app)
    resp = test_client.get("/me")
    assert resp.status_code == 401
    assert "Missing authentication token" in resp.json()["detail"]


def test_bearer_token_requires_bearer_scheme():
    class _Req:
        def __init__(self, value):
            self.headers = {"Authorization": value} if value else {}

    assert _bearer_token(_Req("Bearer abc.def")) == "abc.def"
    assert _bearer_token(_Req("Basic dXNlcg==")) is None
    assert _bearer_token(_Req(None)) is None
    assert _bearer_token(_Req("Bearer ")) is None


# ---------------------------------------------------------------------------
# Role resolution
# ---------------------------------------------------------------------------


def test_resolve_role_ignores_keycloak_builtins():
    payload = TokenPayload(
        sub="user-1",
        realm_access={"roles": ["offline_access", "attorney", "uma_authorization"]},
    )
    assert _resolve_role(payload) == UserRole.ATTORNEY


@pytest.mark.parametrize(
    "roles,expected",
    [
        (["attorney", "admin"], UserRole.ADMIN),
        (["attorney", "staff"], UserRole.STAFF),
        (["staff", "admin", "attorney"], UserRole.ADMIN),
    ],
)
def test_resolve_role_prefers_most_privileged(roles, expected):
    """Multiple roles resolve admin > staff > attorney regardless of order."""
    payload = TokenPayload(sub="user-1", realm_access={"roles": roles})
    assert _resolve_role(payload) == expected


def test_resolve_role_no_known_role_is_forbidden():
    payload = TokenPayload(
        sub="user-1",
        realm_access={"roles": ["offline_access", "uma_authorization"]},
    )

    with pytest.raises(HTTPException) as exc_info:
        _resolve_role(payload)
    assert exc_info.value.status_code == 403
    assert exc_info.value.detail == "No recognized role assigned"


# ---------------------------------------------------------------------------
# require_roles dependency
# ---------------------------------------------------------------------------


def test_require_roles_rejects_wrong_role(monkeypatch):
    """require_roles returns 403 when user's role is not in allowed set."""
    monkeypatch.setattr(settings, "AUTH_DISABLED", True)

    app = FastAPI()

    check_attorney = require_roles(UserRole.ATTORNEY)

    @app.get("/attorney-only", dependencies=[Depends(check_attorney)])
    async def attorney_only(user: CurrentUser):
        return {"ok": True}

    test_client = TestClient(app)
    # dev-user is admin, not attorney
    resp = test_client.get("/attorney-only")
    assert resp.status_code == 403
    assert "Insufficient permissions" in resp.json()["detail"]


def test_require_roles_allows_listed_role(monkeypatch):
    monkeypatch.setattr(settings, "AUTH_DISABLED", True)

    app = FastAPI()

    @app.get("/staff", dependencies=[Depends(require_roles(UserRole.ADMIN, UserRole.STAFF))])
    async def staff_route():
        return {"ok": True}

    resp = TestClient(app).get("/staff")
    assert resp.status_code == 200


# ---------------------------------------------------------------------------
# Signed tokens against a stubbed JWKS endpoint
# ---------------------------------------------------------------------------


@pytest.fixture(scope="module")
def rsa_key():
    from cryptography.hazmat.primitives.asymmetric import rsa

    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture
def jwks_endpoint(rsa_key, monkeypatch):
    """Serve the test key as the realm JWKS; yields the fetch counter."""
    import json

    import httpx
    from jwt.algorithms import RSAAlgorithm

    from src.middleware import auth as auth_mod

    jwk = json.loads(RSAAlgorithm.to_jwk(rsa_key.public_key()))
    jwk.update({"kid": "test-kid", "use": "sig", "alg": "RS256"})
    calls = []

    def fake_get(url, timeout):
        calls.append(url)
        return httpx.Response(200, json={"keys": [jwk]}, request=httpx.Request("GET", url))

    monkeypatch.setattr(settings, "AUTH_DISABLED", False)
    monkeypatch.setattr(auth_mod.httpx, "get", fake_get)
    auth_mod._jwks.clear()
    yield calls
    auth_mod._jwks.clear()


def _token(rsa_key, roles, kid="test-kid", **claims):
    import jwt

    payload = {
        "sub": "attorney-hale-001",
        "email": "hale@hale-law.example",
        "name": "Margaret Hale",
        "iss": f"{settings.KEYCLOAK_URL}/realms/{settings.KEYCLOAK_REALM}",
        "realm_access": {"roles": roles},
        **claims,
    }
    return jwt.encode(payload, rsa_key, algorithm="RS256", headers={"kid": kid})


def _whoami_client() -> TestClient:
    app = FastAPI()

    @app.get("/me")
    async def me(user: CurrentUser):
        return {
            "user_id": user.user_id,
            "role": user.role.value,
            "attorney_id": user.data_scope.attorney_id,
            "full_access": user.data_scope.full_access,
        }

    return TestClient(app)


def test_valid_token_builds_attorney_context(rsa_key, jwks_endpoint):
    token = _token(rsa_key, ["attorney", "offline_access"])

    resp = _whoami_client().get("/me", headers={"Authorization": f"Bearer {token}"})

    assert resp.status_code == 200
    assert resp.json() == {
        "user_id": "attorney-hale-001",
        "role": "attorney",
        "attorney_id": "attorney-hale-001",
        "full_access": False,
    }


def test_jwks_is_cached_between_requests(rsa_key, jwks_endpoint):
    client = _whoami_client()
    token = _token(rsa_key, ["staff"])
    for _ in range(3):
        assert client.get("/me", headers={"Authorization": f"Bearer {token}"}).status_code == 200
    assert len(jwks_endpoint) == 1


def test_unknown_kid_refetches_then_rejects(rsa_key, jwks_endpoint):
    token = _token(rsa_key, ["staff"], kid="rotated-away")

    resp = _whoami_client().get("/me", headers={"Authorization": f"Bearer {token}"})

    assert resp.status_code == 401
    assert len(jwks_endpoint) == 2


def test_wrong_issuer_rejected(rsa_key, jwks_endpoint):
    token = _token(rsa_key, ["admin"], iss="https://evil.example/realms/heirvault")
    resp = _whoami_client().get("/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401


def test_expired_token_rejected(rsa_key, jwks_endpoint):
    token = _token(rsa_key, ["admin"], exp=1)
    resp = _whoami_client().get("/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Token has expired"


def test_garbage_token_rejected(jwks_endpoint):
    resp = _whoami_client().get("/me", headers={"Authorization": "Bearer not.a.jwt"})
    assert resp.status_code == 401
