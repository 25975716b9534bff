"""
User endpoints.

GET    /api/v1/users                  — List members of the caller's org
GET    /api/v1/users/{userId}         — Get a user profile
PUT    /api/v1/users/{userId}         — Update a profile (self or admin)
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from okr_server.core.auth import get_current_actor
from okr_server.core.database import get_session
from okr_server.core.policy import Actor
from okr_server.services import users as user_service
from okr_server.services.queries import DEFAULT_PER_PAGE, MAX_PER_PAGE
from okr_shared.schemas.users import UserListResponse, UserResponse, UserUpdateRequest

router = APIRouter()


@router.get("", response_model=UserListResponse)
async def list_users(
    page: int = Query(1, ge=1),
    per_page: int = Query(DEFAULT_PER_PAGE, ge=1, le=MAX_PER_PAGE),
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_session),
):
    """List all active members of the org."""
    users = await user_service.list_users(actor, session, page=page, per_page=per_page)
    return UserListResponse(data=await user_service.enrich_users(session, users))


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: uuid.UUID,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_session),
):
    user = await user_service.get_user(user_id, actor, session)
    return await user_service.enrich_user(session, user)


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: uuid.UUID,
    body: UserUpdateRequest,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_session),
):
    """Update name, team or department (self or admin)."""
    user = await user_service.update_user(user_id, body, actor, session)
    await session.commit()
    return await user_service.enrich_user(session, user)
