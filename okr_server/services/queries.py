"""
Query construction for list endpoints.

Every list statement is built through ``scoped_select`` so the visibility
predicate (actor's organization, active rows only) cannot be forgotten.
"""

from __future__ import annotations

import uuid
from enum import Enum
from typing import Any, Iterable, Optional, Type, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import and_
from sqlmodel import SQLModel, select

from okr_server.core.errors import NotFound
from okr_server.core.policy import Actor
from okr_server.models.department import Department
from okr_server.models.okr import OKR
from okr_server.models.organization import Organization
from okr_server.models.team import Team
from okr_server.models.user import User
from okr_shared.schemas.common import NamedRef, OKRPriority, OKRStatus, UserRef

ModelT = TypeVar("ModelT", bound=SQLModel)

DEFAULT_PER_PAGE = 50
MAX_PER_PAGE = 100


class AssignedToFilter(str, Enum):
    ME = "me"
    TEAM = "team"


DEFAULT_ORDER = {
    OKR: (OKR.created_at.desc(),),
    User: (User.first_name, User.last_name),
    Team: (Team.name,),
    Department: (Department.name,),
    Organization: (Organization.name,),
}


# ---------------------------------------------------------------------------
# Visibility
# ---------------------------------------------------------------------------


def visible(model: Type[SQLModel], actor: Actor):
    """The predicate every listed row must satisfy."""
    if model is Organization:
        # Organization listing is admin-wide; the policy gates who may list.
        return Organization.is_active == True  # noqa: E712
    return and_(model.org_id == actor.org_id, model.is_active == True)  # noqa: E712


def scoped_select(model: Type[ModelT], actor: Actor):
    return select(model).where(visible(model, actor))


def list_statement(
    model: Type[ModelT],
    actor: Actor,
    *criteria: Any,
    page: int = 1,
    per_page: int = DEFAULT_PER_PAGE,
):
    """Scoped, filtered, default-sorted and paginated select."""
    stmt = scoped_select(model, actor)
    if criteria:
        stmt = stmt.where(*criteria)
    return (
        stmt.order_by(*DEFAULT_ORDER[model])
        .offset((page - 1) * per_page)
        .limit(per_page)
    )


def okr_criteria(
    actor: Actor,
    status: Optional[OKRStatus] = None,
    priority: Optional[OKRPriority] = None,
    assigned_to: Optional[AssignedToFilter] = None,
) -> list:
    """Optional OKR filters, AND-combined."""
    criteria = []
    if status:
        criteria.append(OKR.status == status.value)
    if priority:
        criteria.append(OKR.priority == priority.value)
    if assigned_to == AssignedToFilter.ME:
        criteria.append(OKR.assigned_to_user_id == actor.user_id)
    elif assigned_to == AssignedToFilter.TEAM and actor.team_id:
        criteria.append(OKR.assigned_to_team_id == actor.team_id)
    return criteria


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------


async def get_or_404(
    session: AsyncSession, model: Type[ModelT], record_id: uuid.UUID, label: str
) -> ModelT:
    """Fetch by primary key regardless of is_active; 404 if it never existed."""
    record = await session.get(model, record_id)
    if record is None:
        raise NotFound(f"{label} not found")
    return record


async def load_by_ids(
    session: AsyncSession, model: Type[ModelT], ids: Iterable[Optional[uuid.UUID]]
) -> dict[uuid.UUID, ModelT]:
    """Batch-load records for response projections, keyed by id."""
    wanted = {i for i in ids if i is not None}
    if not wanted:
        return {}
    result = await session.execute(select(model).where(model.id.in_(wanted)))
    return {row.id: row for row in result.scalars().all()}


def named_ref(records: dict, record_id: Optional[uuid.UUID]) -> Optional[NamedRef]:
    record = records.get(record_id) if record_id else None
    return NamedRef.model_validate(record) if record else None


def user_ref(users: dict, user_id: Optional[uuid.UUID]) -> Optional[UserRef]:
    user = users.get(user_id) if user_id else None
    return UserRef.model_validate(user) if user else None
