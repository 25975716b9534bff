"""
Integration tests for user listing and profile updates.
"""

from __future__ import annotations

import uuid

import pytest
from httpx import AsyncClient


class TestListUsers:
    """GET /api/v1/users."""

    @pytest.mark.asyncio
    async def test_lists_own_org_sorted_by_name(self, client: AsyncClient, world):
        """Users of the caller's organization, sorted by first name."""
        resp = await client.get("/api/v1/users", headers=world.headers(world.member))
        assert resp.status_code == 200
        names = [u["first_name"] for u in resp.json()["data"]]
        assert names == ["Ada", "Lee", "Mo", "Tia"]

    @pytest.mark.asyncio
    async def test_projections(self, client: AsyncClient, world):
        """Users carry organization and team projections and no password hash."""
        resp = await client.get("/api/v1/users", headers=world.headers(world.member))
        lead = next(u for u in resp.json()["data"] if u["id"] == str(world.lead.id))
        assert lead["role"] == "team_lead"
        assert lead["organization"] == {"id": str(world.org.id), "name": "Acme"}
        assert lead["team"] == {"id": str(world.team.id), "name": "Platform"}
        assert "password_hash" not in lead


class TestGetUser:
    """GET /api/v1/users/{id}."""

    @pytest.mark.asyncio
    async def test_get_same_org(self, client: AsyncClient, world):
        """Users of the same organization are readable."""
        resp = await client.get(f"/api/v1/users/{world.admin.id}", headers=world.headers(world.member))
        assert resp.status_code == 200
        assert resp.json()["email"] == "ada.admin@acme.example.com"

    @pytest.mark.asyncio
    async def test_get_other_org_forbidden(self, client: AsyncClient, world):
        """Users of another organization are FORBIDDEN."""
        resp = await client.get(
            f"/api/v1/users/{world.outsider.id}", headers=world.headers(world.admin)
        )
        assert resp.status_code == 403

    @pytest.mark.asyncio
    async def test_get_unknown(self, client: AsyncClient, world):
        """An unknown user is NOT_FOUND."""
        resp = await client.get(f"/api/v1/users/{uuid.uuid4()}", headers=world.headers(world.admin))
        assert resp.status_code == 404


class TestUpdateUser:
    """PUT /api/v1/users/{id}."""

    @pytest.mark.asyncio
    async def test_self_update(self, client: AsyncClient, world):
        """Users update their own profile; blank fields are left untouched."""
        resp = await client.put(
            f"/api/v1/users/{world.member.id}",
            json={"first_name": "Morgan", "last_name": "  "},
            headers=world.headers(world.member),
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["first_name"] == "Morgan"
        assert data["last_name"] == "Member"

    @pytest.mark.asyncio
    async def test_member_may_not_update_others(self, client: AsyncClient, world):
        """Members may not edit other profiles."""
        resp = await client.put(
            f"/api/v1/users/{world.teammate.id}",
            json={"first_name": "Hacked"},
            headers=world.headers(world.member),
        )
        assert resp.status_code == 403

    @pytest.mark.asyncio
    async def test_admin_moves_user_to_team(self, client: AsyncClient, world):
        """Admins may move a user to a team."""
        resp = await client.put(
            f"/api/v1/users/{world.admin.id}",
            json={"team_id": str(world.team.id)},
            headers=world.headers(world.admin),
        )
        assert resp.status_code == 200
        assert resp.json()["team"]["id"] == str(world.team.id)

    @pytest.mark.asyncio
    async def test_team_from_other_org_forbidden(self, client: AsyncClient, world):
        """A team from another organization is FORBIDDEN."""
        resp = await client.put(
            f"/api/v1/users/{world.member.id}",
            json={"team_id": str(world.other_team.id)},
            headers=world.headers(world.member),
        )
        assert resp.status_code == 403

    @pytest.mark.asyncio
    async def test_unknown_department(self, client: AsyncClient, world):
        """An unknown department is NOT_FOUND."""
        resp = await client.put(
            f"/api/v1/users/{world.member.id}",
            json={"department_id": str(uuid.uuid4())},
            headers=world.headers(world.member),
        )
        assert resp.status_code == 404

    @pytest.mark.asyncio
    async def test_admin_of_other_org_forbidden(self, client: AsyncClient, world):
        """Admin rights do not cross organizations."""
        resp = await client.put(
            f"/api/v1/users/{world.member.id}",
            json={"first_name": "X"},
            headers=world.headers(world.outsider),
        )
        assert resp.status_code == 403
