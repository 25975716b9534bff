"""
Department endpoints.

GET    /api/v1/departments            — List departments in the caller's org
POST   /api/v1/departments            — Create a department (admin / team lead)
GET    /api/v1/departments/{id}       — Get one department
"""

from __future__ import annotations

import uuid
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from okr_server.core.auth import get_current_actor
from okr_server.core.database import get_session
from okr_server.core.policy import Actor
from okr_server.services import departments as department_service
from okr_server.services.queries import DEFAULT_PER_PAGE, MAX_PER_PAGE
from okr_shared.schemas.organizations import DepartmentCreate, DepartmentRead

router = APIRouter()


@router.get("", response_model=List[DepartmentRead])
async def list_departments(
    page: int = Query(1, ge=1),
    per_page: int = Query(DEFAULT_PER_PAGE, ge=1, le=MAX_PER_PAGE),
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_session),
):
    departments = await department_service.list_departments(
        actor, session, page=page, per_page=per_page
    )
    return await department_service.enrich_departments(session, departments)


@router.post("", response_model=DepartmentRead, status_code=201)
async def create_department(
    body: DepartmentCreate,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_session),
):
    department = await department_service.create_department(body, actor, session)
    await session.commit()
    return await department_service.enrich_department(session, department)


@router.get("/{department_id}", response_model=DepartmentRead)
async def get_department(
    department_id: uuid.UUID,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_session),
):
    department = await department_service.get_department(department_id, actor, session)
    return await department_service.enrich_department(session, department)
