"""
Shared fixtures: an in-memory SQLite store, an HTTP client wired to it, and a
small world of two organizations with users of every role.
"""

from __future__ import annotations

import os

os.environ.setdefault("OKR_DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("OKR_SECRET_KEY", "test-secret-key-with-at-least-32-bytes!")
os.environ.setdefault("OKR_LOG_FORMAT", "text")

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from okr_server.core.auth import create_jwt, hash_password
from okr_server.core.database import get_session, init_db
from okr_server.main import app
from okr_server.models.department import Department
from okr_server.models.organization import Organization
from okr_server.models.team import Team
from okr_server.models.user import User

PASSWORD = "correct-horse-battery"
PASSWORD_HASH = hash_password(PASSWORD)


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    async def _get_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = _get_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# World
# ---------------------------------------------------------------------------


@dataclass
class World:
    org: Organization
    other_org: Organization
    department: Department
    team: Team
    admin: User
    lead: User
    member: User
    teammate: User
    outsider: User
    other_department: Department
    other_team: Team
    tokens: dict = field(default_factory=dict)

    def headers(self, user: User) -> dict:
        return {"Authorization": f"Bearer {self.tokens[user.id]}"}


def make_user(org: Organization, email: str, role: str = "member", **kwargs) -> User:
    first, _, last = email.split("@")[0].partition(".")
    return User(
        email=email,
        password_hash=PASSWORD_HASH,
        first_name=first.title(),
        last_name=(last or "user").title(),
        role=role,
        org_id=org.id,
        **kwargs,
    )


@pytest.fixture
async def world(session) -> World:
    org = Organization(name="Acme")
    other_org = Organization(name="Globex")
    session.add_all([org, other_org])
    await session.flush()

    department = Department(name="Engineering", org_id=org.id)
    other_department = Department(name="Sales", org_id=other_org.id)
    session.add_all([department, other_department])
    await session.flush()

    team = Team(name="Platform", org_id=org.id, department_id=department.id)
    other_team = Team(name="Outbound", org_id=other_org.id, department_id=other_department.id)
    session.add_all([team, other_team])
    await session.flush()

    admin = make_user(org, "ada.admin@acme.example.com", "admin", department_id=department.id)
    lead = make_user(
        org, "lee.lead@acme.example.com", "team_lead", department_id=department.id, team_id=team.id
    )
    member = make_user(
        org, "mo.member@acme.example.com", "member", department_id=department.id, team_id=team.id
    )
    teammate = make_user(org, "tia.mate@acme.example.com", "member", team_id=team.id)
    outsider = make_user(other_org, "olga.out@globex.example.com", "admin")
    session.add_all([admin, lead, member, teammate, outsider])
    await session.flush()

    team.team_lead_id = lead.id
    session.add(team)
    await session.commit()

    world = World(
        org=org,
        other_org=other_org,
        department=department,
        team=team,
        admin=admin,
        lead=lead,
        member=member,
        teammate=teammate,
        outsider=outsider,
        other_department=other_department,
        other_team=other_team,
    )
    for user in (admin, lead, member, teammate, outsider):
        world.tokens[user.id], _ = create_jwt(user.id, user.org_id, user.role)
    return world


def due_date(days: int = 30) -> str:
    return (datetime.now(timezone.utc) + timedelta(days=days)).isoformat()


def okr_payload(assignee: uuid.UUID, *, team: bool = False, **overrides) -> dict:
    payload = {
        "title": "Ship v2",
        "objective": "Launch the new platform",
        "key_results": [
            {"description": "Beta live", "target": "1 beta", "progress": 0},
            {"description": "Migrate users", "progress": 0},
        ],
        "assigned_to": {"type": "team", "team": str(assignee)}
        if team
        else {"type": "user", "user": str(assignee)},
        "due_date": due_date(),
    }
    payload.update(overrides)
    return payload
