"""
Team service.

A team hangs off a department of the same organization and may name a team
lead from that organization.
"""

from __future__ import annotations

import uuid
from typing import Sequence

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

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
    user_ref,
)
from okr_shared.schemas.organizations import TeamCreate, TeamRead

log = structlog.get_logger()


async def list_teams(
    actor: Actor,
    session: AsyncSession,
    page: int = 1,
    per_page: int = DEFAULT_PER_PAGE,
) -> list[Team]:
    result = await session.execute(
        list_statement(Team, actor, page=page, per_page=per_page)
    )
    return list(result.scalars().all())


async def get_team(team_id: uuid.UUID, actor: Actor, session: AsyncSession) -> Team:
    team = await get_or_404(session, Team, team_id, "Team")
    enforce(Action.READ, actor, team)
    return team


async def create_team(req: TeamCreate, actor: Actor, session: AsyncSession) -> Team:
    enforce(Action.CREATE_TEAM, actor)

    department = await get_or_404(session, Department, req.department_id, "Department")
    enforce(Action.READ, actor, department)
    if req.team_lead_id is not None:
        lead = await get_or_404(session, User, req.team_lead_id, "Team lead")
        enforce(Action.READ, actor, lead)

    team = Team(
        name=req.name,
        description=req.description,
        department_id=department.id,
        org_id=actor.org_id,
        team_lead_id=req.team_lead_id,
    )
    session.add(team)
    await session.flush()

    log.info("team.created", team_id=str(team.id), org_id=str(actor.org_id))
    return team


async def enrich_teams(session: AsyncSession, teams: Sequence[Team]) -> list[TeamRead]:
    """Convert Team rows to TeamRead with department, org and lead projections."""
    departments = await load_by_ids(session, Department, (t.department_id for t in teams))
    orgs = await load_by_ids(session, Organization, (t.org_id for t in teams))
    leads = await load_by_ids(session, User, (t.team_lead_id for t in teams))
    return [
        TeamRead(
            id=t.id,
            name=t.name,
            description=t.description,
            department=named_ref(departments, t.department_id),
            organization=named_ref(orgs, t.org_id),
            team_lead=user_ref(leads, t.team_lead_id),
            is_active=t.is_active,
            created_at=t.created_at,
            updated_at=t.updated_at,
        )
        for t in teams
    ]


async def enrich_team(session: AsyncSession, team: Team) -> TeamRead:
    return (await enrich_teams(session, [team]))[0]
