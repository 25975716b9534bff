"""
Team endpoints.

GET    /api/v1/teams                  — List teams in the caller's org
POST   /api/v1/teams                  — Create a team (admin / team lead)
GET    /api/v1/teams/{id}             — Get one team
"""

from __future__ import annotations

import uuid
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from okr_server.core.auth import get_current_actor
from okr_server.core.database import get_session
from okr_server.core.policy import Actor
from okr_server.services import teams as team_service
from okr_server.services.queries import DEFAULT_PER_PAGE, MAX_PER_PAGE
from okr_shared.schemas.organizations import TeamCreate, TeamRead

router = APIRouter()


@router.get("", response_model=List[TeamRead])
async def list_teams(
    page: int = Query(1, ge=1),
    per_page: int = Query(DEFAULT_PER_PAGE, ge=1, le=MAX_PER_PAGE),
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_session),
):
    teams = await team_service.list_teams(actor, session, page=page, per_page=per_page)
    return await team_service.enrich_teams(session, teams)


@router.post("", response_model=TeamRead, status_code=201)
async def create_team(
    body: TeamCreate,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_session),
):
    """Create a team under a department of the caller's organization."""
    team = await team_service.create_team(body, actor, session)
    await session.commit()
    return await team_service.enrich_team(session, team)


@router.get("/{team_id}", response_model=TeamRead)
async def get_team(
    team_id: uuid.UUID,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_session),
):
    team = await team_service.get_team(team_id, actor, session)
    return await team_service.enrich_team(session, team)
