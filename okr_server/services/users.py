"""
User service: listing, profile updates, registration and credential checks.
"""

from __future__ import annotations

import uuid
from typing import Sequence

import structlog
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from okr_server.core.auth import hash_password, verify_password
from okr_server.core.errors import Conflict, NotFound, Unauthenticated
from okr_server.core.policy import Action, Actor, enforce
from okr_server.models.department import Department
from okr_server.models.organization import Organization
from okr_server.models.team import Team
from okr_server.models.user import User
from okr_server.services.queries import (
    DEFAULT_PER_PAGE,
    get_or_404,
    list_statement,
    load_by_ids,
    named_ref,
)
from okr_shared.schemas.common import Role
from okr_shared.schemas.users import RegisterRequest, UserResponse, UserUpdateRequest

log = structlog.get_logger()


async def list_users(
    actor: Actor,
    session: AsyncSession,
    page: int = 1,
    per_page: int = DEFAULT_PER_PAGE,
) -> list[User]:
    """List active members of the actor's organization, by name."""
    result = await session.execute(
        list_statement(User, actor, page=page, per_page=per_page)
    )
    return list(result.scalars().all())


async def get_user(user_id: uuid.UUID, actor: Actor, session: AsyncSession) -> User:
    user = await get_or_404(session, User, user_id, "User")
    enforce(Action.READ, actor, user)
    return user


async def update_user(
    user_id: uuid.UUID,
    req: UserUpdateRequest,
    actor: Actor,
    session: AsyncSession,
) -> User:
    """Update a profile (self or admin). Empty fields are left untouched."""
    user = await get_or_404(session, User, user_id, "User")
    enforce(Action.UPDATE_PROFILE, actor, user)

    if req.team_id:
        team = await get_or_404(session, Team, req.team_id, "Team")
        enforce(Action.READ, actor, team)
    if req.department_id:
        department = await get_or_404(session, Department, req.department_id, "Department")
        enforce(Action.READ, actor, department)

    if req.first_name:
        user.first_name = req.first_name
    if req.last_name:
        user.last_name = req.last_name
    if req.team_id:
        user.team_id = req.team_id
    if req.department_id:
        user.department_id = req.department_id

    session.add(user)
    await session.flush()

    log.info("user.updated", user_id=str(user_id), org_id=str(user.org_id), by=str(actor.user_id))
    return user


# ---------------------------------------------------------------------------
# Registration & login
# ---------------------------------------------------------------------------


async def register_user(req: RegisterRequest, session: AsyncSession) -> User:
    """Create a user. Founding a new organization makes the user its admin."""
    email = req.email.lower()
    existing = await session.execute(select(User).where(User.email == email))
    if existing.scalar_one_or_none():
        raise Conflict("Email is already registered")

    if req.organization_id is not None:
        org = await session.get(Organization, req.organization_id)
        if org is None or not org.is_active:
            raise NotFound("Organization not found")
        role = Role.MEMBER
    else:
        org = Organization(name=req.organization_name)
        session.add(org)
        await session.flush()
        log.info("org.created", org_id=str(org.id), via="registration")
        role = Role.ADMIN

    user = User(
        email=email,
        password_hash=hash_password(req.password),
        first_name=req.first_name,
        last_name=req.last_name,
        role=role.value,
        org_id=org.id,
    )
    session.add(user)
    await session.flush()

    log.info("user.registered", user_id=str(user.id), org_id=str(org.id), role=role.value)
    return user


async def authenticate_user(email: str, password: str, session: AsyncSession) -> User:
    result = await session.execute(select(User).where(User.email == email.lower()))
    user = result.scalar_one_or_none()
    if not user or not user.is_active or not verify_password(password, user.password_hash):
        raise Unauthenticated("Invalid email or password")
    return user


# ---------------------------------------------------------------------------
# Enrichment
# ---------------------------------------------------------------------------


async def enrich_users(session: AsyncSession, users: Sequence[User]) -> list[UserResponse]:
    orgs = await load_by_ids(session, Organization, (u.org_id for u in users))
    departments = await load_by_ids(session, Department, (u.department_id for u in users))
    teams = await load_by_ids(session, Team, (u.team_id for u in users))
    return [
        UserResponse(
            id=u.id,
            email=u.email,
            first_name=u.first_name,
            last_name=u.last_name,
            role=u.role,
            organization=named_ref(orgs, u.org_id),
            department=named_ref(departments, u.department_id),
            team=named_ref(teams, u.team_id),
            is_active=u.is_active,
            created_at=u.created_at,
        )
        for u in users
    ]


async def enrich_user(session: AsyncSession, user: User) -> UserResponse:
    return (await enrich_users(session, [user]))[0]
