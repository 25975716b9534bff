"""
Department service.
"""

from __future__ import annotations

import uuid
from typing import Sequence

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from okr_server.core.policy import Action, Actor, enforce
from okr_server.models.department import Department
from okr_server.models.organization import Organization
from okr_server.services.queries import (
    DEFAULT_PER_PAGE,
    get_or_404,
    list_statement,
    load_by_ids,
    named_ref,
)
from okr_shared.schemas.organizations import DepartmentCreate, DepartmentRead

log = structlog.get_logger()


async def list_departments(
    actor: Actor,
    session: AsyncSession,
    page: int = 1,
    per_page: int = DEFAULT_PER_PAGE,
) -> list[Department]:
    result = await session.execute(
        list_statement(Department, actor, page=page, per_page=per_page)
    )
    return list(result.scalars().all())


async def get_department(
    department_id: uuid.UUID, actor: Actor, session: AsyncSession
) -> Department:
    department = await get_or_404(session, Department, department_id, "Department")
    enforce(Action.READ, actor, department)
    return department


async def create_department(
    req: DepartmentCreate, actor: Actor, session: AsyncSession
) -> Department:
    enforce(Action.CREATE_DEPARTMENT, actor)
    department = Department(
        name=req.name,
        description=req.description,
        org_id=actor.org_id,
    )
    session.add(department)
    await session.flush()

    log.info("department.created", department_id=str(department.id), org_id=str(actor.org_id))
    return department


async def enrich_departments(
    session: AsyncSession, departments: Sequence[Department]
) -> list[DepartmentRead]:
    orgs = await load_by_ids(session, Organization, (d.org_id for d in departments))
    return [
        DepartmentRead(
            id=d.id,
            name=d.name,
            description=d.description,
            organization=named_ref(orgs, d.org_id),
            is_active=d.is_active,
            created_at=d.created_at,
            updated_at=d.updated_at,
        )
        for d in departments
    ]


async def enrich_department(session: AsyncSession, department: Department) -> DepartmentRead:
    return (await enrich_departments(session, [department]))[0]
