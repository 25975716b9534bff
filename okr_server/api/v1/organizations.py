"""
Organization API endpoints.

GET    /api/v1/organizations          — List all organizations (admin only)
POST   /api/v1/organizations          — Create an organization (admin only)
GET    /api/v1/organizations/{orgId}  — Get organization details (own org)
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from okr_server.core.auth import get_current_actor
from okr_server.core.database import get_session
from okr_server.core.policy import Actor
from okr_server.services import organizations as org_service
from okr_server.services.queries import DEFAULT_PER_PAGE, MAX_PER_PAGE
from okr_shared.schemas.organizations import OrgCreateRequest, OrgListResponse, OrgResponse

router = APIRouter()


@router.get("", response_model=OrgListResponse)
async def list_organizations(
    page: int = Query(1, ge=1),
    per_page: int = Query(DEFAULT_PER_PAGE, ge=1, le=MAX_PER_PAGE),
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_session),
):
    """List every active organization, by name."""
    orgs = await org_service.list_organizations(actor, session, page=page, per_page=per_page)
    return OrgListResponse(data=[OrgResponse.model_validate(o) for o in orgs])


@router.post("", response_model=OrgResponse, status_code=201)
async def create_organization(
    body: OrgCreateRequest,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_session),
):
    org = await org_service.create_organization(body, actor, session)
    await session.commit()
    return OrgResponse.model_validate(org)


@router.get("/{org_id}", response_model=OrgResponse)
async def get_organization(
    org_id: uuid.UUID,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_session),
):
    org = await org_service.get_organization(org_id, actor, session)
    return OrgResponse.model_validate(org)
