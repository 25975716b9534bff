"""
Tests for authentication.

Covers:
- Password hashing
- JWT creation, decoding, expiry and tampering
- Registration (found / join an organization) and login
- Bearer token resolution on protected endpoints
"""

from __future__ import annotations

import uuid
from datetime import timedelta

import jwt as pyjwt
import pytest
from httpx import AsyncClient

from okr_server.core.auth import create_jwt, decode_jwt, hash_password, verify_password

from conftest import PASSWORD


# ---------------------------------------------------------------------------
# Unit Tests: Password hashing
# ---------------------------------------------------------------------------

class TestPasswordHashing:
    """bcrypt hashing and verification."""

    def test_hash_and_verify(self):
        """A hashed password verifies against its plaintext."""
        password = "MySecureP@ssw0rd!"
        hashed = hash_password(password)
        assert hashed != password
        assert verify_password(password, hashed)

    def test_wrong_password_fails(self):
        """A different password does not verify."""
        hashed = hash_password("correct-password")
        assert not verify_password("wrong-password", hashed)

    def test_different_hashes_for_same_password(self):
        """bcrypt uses random salt, so hashes differ."""
        assert hash_password("same-password") != hash_password("same-password")


# ---------------------------------------------------------------------------
# Unit Tests: JWT
# ---------------------------------------------------------------------------

class TestJWT:
    """Session token creation and verification."""

    def test_create_and_decode(self):
        """The token carries user id, org, role and jti."""
        uid, org_id = uuid.uuid4(), uuid.uuid4()
        token, jti = create_jwt(uid, org_id, "team_lead")
        payload = decode_jwt(token)
        assert payload["sub"] == str(uid)
        assert payload["org"] == str(org_id)
        assert payload["role"] == "team_lead"
        assert payload["jti"] == jti

    def test_expired_jwt_raises(self):
        """An expired token is rejected on decode."""
        token, _ = create_jwt(
            uuid.uuid4(), uuid.uuid4(), "member", expires_delta=timedelta(seconds=-1)
        )
        with pytest.raises(pyjwt.ExpiredSignatureError):
            decode_jwt(token)

    def test_tampered_jwt_raises(self):
        """A token with a modified signature is rejected."""
        token, _ = create_jwt(uuid.uuid4(), uuid.uuid4(), "member")
        tampered = token[:-5] + "XXXXX"
        with pytest.raises(pyjwt.InvalidTokenError):
            decode_jwt(tampered)


# ---------------------------------------------------------------------------
# Integration Tests: Auth endpoints
# ---------------------------------------------------------------------------

def _registration(**overrides) -> dict:
    body = {
        "email": "Grace.Hopper@Example.com",
        "password": "long-enough-password",
        "first_name": "  Grace ",
        "last_name": "Hopper",
        "organization_name": "Navy Labs",
    }
    body.update(overrides)
    return body


class TestRegister:
    """POST /auth/register."""

    @pytest.mark.asyncio
    async def test_founding_an_organization_makes_admin(self, client: AsyncClient):
        """Registering with an organization name founds it with the user as admin."""
        resp = await client.post("/auth/register", json=_registration())
        assert resp.status_code == 201
        data = resp.json()
        assert data["token_type"] == "bearer"
        user = data["user"]
        assert user["email"] == "grace.hopper@example.com"
        assert user["first_name"] == "Grace"
        assert user["role"] == "admin"
        assert user["organization"]["name"] == "Navy Labs"

        me = await client.get(
            "/auth/me", headers={"Authorization": f"Bearer {data['access_token']}"}
        )
        assert me.status_code == 200
        assert me.json()["id"] == user["id"]

    @pytest.mark.asyncio
    async def test_joining_an_organization_makes_member(self, client: AsyncClient, world):
        """Registering with an organization id joins it as a member."""
        body = _registration(organization_name=None, organization_id=str(world.org.id))
        resp = await client.post("/auth/register", json=body)
        assert resp.status_code == 201
        user = resp.json()["user"]
        assert user["role"] == "member"
        assert user["organization"]["id"] == str(world.org.id)

    @pytest.mark.asyncio
    async def test_joining_unknown_organization(self, client: AsyncClient):
        """Joining an organization that does not exist is NOT_FOUND."""
        body = _registration(organization_name=None, organization_id=str(uuid.uuid4()))
        resp = await client.post("/auth/register", json=body)
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "NOT_FOUND"

    @pytest.mark.asyncio
    async def test_duplicate_email_conflicts(self, client: AsyncClient, world):
        """Emails are unique regardless of case."""
        resp = await client.post(
            "/auth/register", json=_registration(email="MO.MEMBER@acme.example.com")
        )
        assert resp.status_code == 409
        assert resp.json()["error"]["code"] == "CONFLICT"

    @pytest.mark.asyncio
    async def test_short_password_rejected(self, client: AsyncClient):
        """Passwords under 8 characters fail validation."""
        resp = await client.post("/auth/register", json=_registration(password="short"))
        assert resp.status_code == 422
        error = resp.json()["error"]
        assert error["code"] == "VALIDATION_FAILED"
        assert error["details"][0]["field"] == "password"

    @pytest.mark.asyncio
    async def test_both_organization_sources_rejected(self, client: AsyncClient):
        """Exactly one of organization_id or organization_name is required."""
        body = _registration(organization_id=str(uuid.uuid4()))
        resp = await client.post("/auth/register", json=body)
        assert resp.status_code == 422


class TestLogin:
    """POST /auth/login."""

    @pytest.mark.asyncio
    async def test_login_returns_token(self, client: AsyncClient, world):
        """Valid credentials return a token for that user."""
        resp = await client.post(
            "/auth/login", json={"email": "Mo.Member@acme.example.com", "password": PASSWORD}
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["user"]["id"] == str(world.member.id)
        assert decode_jwt(data["access_token"])["sub"] == str(world.member.id)

    @pytest.mark.asyncio
    async def test_wrong_password(self, client: AsyncClient, world):
        """A wrong password is UNAUTHENTICATED."""
        resp = await client.post(
            "/auth/login", json={"email": "mo.member@acme.example.com", "password": "nope-nope"}
        )
        assert resp.status_code == 401
        assert resp.json()["error"]["code"] == "UNAUTHENTICATED"

    @pytest.mark.asyncio
    async def test_unknown_email(self, client: AsyncClient, world):
        """An unknown email is UNAUTHENTICATED."""
        resp = await client.post(
            "/auth/login", json={"email": "nobody@example.com", "password": PASSWORD}
        )
        assert resp.status_code == 401


class TestBearerAuth:
    """Bearer token resolution on protected endpoints."""

    @pytest.mark.asyncio
    async def test_missing_token(self, client: AsyncClient):
        """No Authorization header is UNAUTHENTICATED."""
        resp = await client.get("/api/v1/okrs")
        assert resp.status_code == 401
        body = resp.json()["error"]
        assert body["code"] == "UNAUTHENTICATED"
        assert body["status"] == 401

    @pytest.mark.asyncio
    async def test_malformed_token(self, client: AsyncClient):
        """A token that is not a JWT is rejected."""
        resp = await client.get("/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
        assert resp.status_code == 401

    @pytest.mark.asyncio
    async def test_non_bearer_scheme(self, client: AsyncClient, world):
        """Only the Bearer scheme is accepted."""
        token = world.tokens[world.member.id]
        resp = await client.get("/auth/me", headers={"Authorization": f"Token {token}"})
        assert resp.status_code == 401

    @pytest.mark.asyncio
    async def test_token_for_unknown_user(self, client: AsyncClient, world):
        """A valid token for a user that does not exist is rejected."""
        token, _ = create_jwt(uuid.uuid4(), world.org.id, "admin")
        resp = await client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 401

    @pytest.mark.asyncio
    async def test_me(self, client: AsyncClient, world):
        """/auth/me returns the caller with team and department projections."""
        resp = await client.get("/auth/me", headers=world.headers(world.lead))
        assert resp.status_code == 200
        data = resp.json()
        assert data["role"] == "team_lead"
        assert data["team"]["name"] == "Platform"
        assert data["department"]["name"] == "Engineering"
