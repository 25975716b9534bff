"""
Authentication endpoints (not org-scoped).

POST   /auth/register   — Create an account (found or join an organization)
POST   /auth/login      — Exchange email/password for a bearer token
GET    /auth/me         — Profile of the authenticated user
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from okr_server.core.auth import create_jwt, get_current_user
from okr_server.core.database import get_session
from okr_server.models.user import User
from okr_server.services import users as user_service
from okr_shared.schemas.users import (
    LoginRequest,
    RegisterRequest,
    TokenResponse,
    UserResponse,
)

router = APIRouter()


async def _token_response(session: AsyncSession, user: User) -> TokenResponse:
    token, _ = create_jwt(user.id, user.org_id, user.role)
    return TokenResponse(access_token=token, user=await user_service.enrich_user(session, user))


@router.post("/register", response_model=TokenResponse, status_code=201)
async def register(
    body: RegisterRequest,
    session: AsyncSession = Depends(get_session),
):
    """Register. Supplying organization_name founds a new org with you as admin."""
    user = await user_service.register_user(body, session)
    await session.commit()
    return await _token_response(session, user)


@router.post("/login", response_model=TokenResponse)
async def login(
    body: LoginRequest,
    session: AsyncSession = Depends(get_session),
):
    user = await user_service.authenticate_user(body.email, body.password, session)
    return await _token_response(session, user)


@router.get("/me", response_model=UserResponse)
async def me(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    return await user_service.enrich_user(session, user)
