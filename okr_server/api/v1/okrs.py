"""
OKR endpoints: CRUD, progress, comments.

Status: Draft → Active → Completed | Cancelled
- Entering Completed stamps completed_date; it is never cleared.
- overall_progress is derived from key results on every read.
- DELETE is a soft delete: the OKR leaves lists but stays readable by id.
"""

from __future__ import annotations

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from okr_server.core.auth import get_current_actor
from okr_server.core.database import get_session
from okr_server.core.policy import Actor
from okr_server.services import okrs as okr_service
from okr_server.services.queries import DEFAULT_PER_PAGE, MAX_PER_PAGE, AssignedToFilter
from okr_shared.schemas.common import OKRPriority, OKRStatus
from okr_shared.schemas.okrs import (
    CommentCreate,
    OKRCreate,
    OKRProgressUpdate,
    OKRRead,
    OKRUpdate,
)

router = APIRouter()


# ---------------------------------------------------------------------------
# OKR CRUD
# ---------------------------------------------------------------------------


@router.get("", response_model=List[OKRRead])
async def list_okrs_endpoint(
    status: Optional[OKRStatus] = None,
    priority: Optional[OKRPriority] = None,
    assigned_to: Optional[AssignedToFilter] = None,
    page: int = Query(1, ge=1),
    per_page: int = Query(DEFAULT_PER_PAGE, ge=1, le=MAX_PER_PAGE),
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_session),
):
    """List active OKRs in the caller's org, newest first.

    ``assigned_to=me`` keeps OKRs assigned to the caller; ``assigned_to=team``
    keeps OKRs assigned to the caller's team (ignored when they have none).
    """
    okrs = await okr_service.list_okrs(
        actor,
        session,
        status=status,
        priority=priority,
        assigned_to=assigned_to,
        page=page,
        per_page=per_page,
    )
    return await okr_service.enrich_okrs(session, okrs)


@router.post("", response_model=OKRRead, status_code=201)
async def create_okr_endpoint(
    okr_in: OKRCreate,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_session),
):
    """Create an OKR. The caller becomes its assigner."""
    okr = await okr_service.create_okr(okr_in, actor, session)
    await session.commit()
    return await okr_service.enrich_okr(session, okr)


@router.get("/{okr_id}", response_model=OKRRead)
async def get_okr_endpoint(
    okr_id: uuid.UUID,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_session),
):
    okr = await okr_service.get_okr(okr_id, actor, session)
    return await okr_service.enrich_okr(session, okr)


@router.put("/{okr_id}", response_model=OKRRead)
async def update_okr_endpoint(
    okr_id: uuid.UUID,
    okr_in: OKRUpdate,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_session),
):
    """Full update (admin, assigner or user assignee)."""
    okr = await okr_service.get_okr(okr_id, actor, session)
    okr = await okr_service.update_okr(okr, okr_in, actor, session)
    await session.commit()
    return await okr_service.enrich_okr(session, okr)


@router.delete("/{okr_id}")
async def delete_okr_endpoint(
    okr_id: uuid.UUID,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_session),
):
    """Soft delete (admin or assigner)."""
    okr = await okr_service.get_okr(okr_id, actor, session)
    await okr_service.delete_okr(okr, actor, session)
    await session.commit()
    return {"message": "OKR deleted successfully"}


# ---------------------------------------------------------------------------
# Progress & comments
# ---------------------------------------------------------------------------


@router.patch("/{okr_id}/progress", response_model=OKRRead)
async def update_progress_endpoint(
    okr_id: uuid.UUID,
    body: OKRProgressUpdate,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_session),
):
    """Replace the key-result list (admin, assigner or user assignee)."""
    okr = await okr_service.get_okr(okr_id, actor, session)
    okr = await okr_service.update_progress(okr, body, actor, session)
    await session.commit()
    return await okr_service.enrich_okr(session, okr)


@router.post("/{okr_id}/comments", response_model=OKRRead)
async def add_comment_endpoint(
    okr_id: uuid.UUID,
    body: CommentCreate,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_session),
):
    """Append a comment. Any member of the OKR's organization may comment."""
    okr = await okr_service.get_okr(okr_id, actor, session)
    await okr_service.add_comment(okr, body, actor, session)
    await session.commit()
    return await okr_service.enrich_okr(session, okr)
