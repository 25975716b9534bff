"""
OKR service layer: lifecycle, key results, comments.

Handles:
- OKR create / full update with business-level validation
- Progress updates (wholesale key-result replacement)
- Append-only comments
- Soft delete
- Enrichment of OKR data for API responses

Every check (policy, validation, referenced records) runs before the first
mutation, so a rejected request never leaves a partial write behind.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional, Sequence, Union

import structlog
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from okr_server.core.errors import ValidationFailed, field_error
from okr_server.core.policy import Action, Actor, enforce
from okr_server.models.base import utcnow
from okr_server.models.department import Department
from okr_server.models.key_result import KeyResult
from okr_server.models.okr import OKR
from okr_server.models.okr_comment import OKRComment
from okr_server.models.organization import Organization
from okr_server.models.team import Team
from okr_server.models.user import User
from okr_server.services.queries import (
    DEFAULT_PER_PAGE,
    AssignedToFilter,
    get_or_404,
    list_statement,
    load_by_ids,
    named_ref,
    okr_criteria,
    user_ref,
)
from okr_shared.schemas.common import AssignmentType, OKRPriority, OKRStatus
from okr_shared.schemas.okrs import (
    AssignmentRead,
    CommentCreate,
    CommentRead,
    KeyResultIn,
    KeyResultRead,
    OKRCreate,
    OKRProgressUpdate,
    OKRRead,
    OKRUpdate,
    TeamAssignment,
    UserAssignment,
    is_expected_transition,
)

log = structlog.get_logger()


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def validate_okr_content(
    title: str, objective: str, key_results: Sequence[KeyResultIn]
) -> None:
    """Mandatory content for create and full update."""
    errors = []
    if not title:
        errors.append(field_error("title", "Title is required"))
    if not objective:
        errors.append(field_error("objective", "Objective is required"))
    if not key_results:
        errors.append(field_error("key_results", "At least one key result is required"))
    errors.extend(_key_result_errors(key_results))
    if errors:
        raise ValidationFailed(details=errors)


def _key_result_errors(key_results: Sequence[KeyResultIn]) -> list[dict]:
    return [
        field_error(f"key_results.{i}.description", "Key result description is required")
        for i, kr in enumerate(key_results)
        if not kr.description
    ]


async def _check_assignee(
    session: AsyncSession,
    assignment: Union[UserAssignment, TeamAssignment],
    actor: Actor,
) -> None:
    """The assignee must exist and live in the actor's organization."""
    if isinstance(assignment, UserAssignment):
        assignee = await get_or_404(session, User, assignment.user, "Assigned user")
    else:
        assignee = await get_or_404(session, Team, assignment.team, "Assigned team")
    enforce(Action.READ, actor, assignee)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _replace_key_results(
    session: AsyncSession, okr: OKR, key_results: Sequence[KeyResultIn]
) -> None:
    for position, kr in enumerate(key_results):
        session.add(
            KeyResult(
                okr_id=okr.id,
                org_id=okr.org_id,
                position=position,
                description=kr.description,
                target=kr.target,
                progress=kr.progress,
            )
        )


async def _delete_key_results(session: AsyncSession, okr: OKR) -> None:
    await session.execute(delete(KeyResult).where(KeyResult.okr_id == okr.id))


def _apply_status(okr: OKR, status: OKRStatus, now: datetime) -> None:
    """Overwrite status; entering ``completed`` stamps completed_date.

    completed_date is never cleared, and backward moves are not rejected.
    """
    current = OKRStatus(okr.status)
    if not is_expected_transition(current, status):
        log.warning(
            "okr.status.unusual_transition",
            okr_id=str(okr.id),
            from_status=current.value,
            to_status=status.value,
        )
    okr.status = status.value
    if status == OKRStatus.COMPLETED:
        okr.completed_date = now


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


async def get_okr(okr_id: uuid.UUID, actor: Actor, session: AsyncSession) -> OKR:
    """Direct lookup. Soft-deleted OKRs are still returned here."""
    okr = await get_or_404(session, OKR, okr_id, "OKR")
    enforce(Action.READ, actor, okr)
    return okr


async def list_okrs(
    actor: Actor,
    session: AsyncSession,
    status: Optional[OKRStatus] = None,
    priority: Optional[OKRPriority] = None,
    assigned_to: Optional[AssignedToFilter] = None,
    page: int = 1,
    per_page: int = DEFAULT_PER_PAGE,
) -> list[OKR]:
    criteria = okr_criteria(actor, status=status, priority=priority, assigned_to=assigned_to)
    result = await session.execute(
        list_statement(OKR, actor, *criteria, page=page, per_page=per_page)
    )
    return list(result.scalars().all())


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------


async def create_okr(okr_in: OKRCreate, actor: Actor, session: AsyncSession) -> OKR:
    validate_okr_content(okr_in.title, okr_in.objective, okr_in.key_results)
    await _check_assignee(session, okr_in.assigned_to, actor)

    okr = OKR(
        title=okr_in.title,
        objective=okr_in.objective,
        assigned_by_id=actor.user_id,
        org_id=actor.org_id,
        department_id=actor.department_id,
        team_id=actor.team_id,
        status=OKRStatus.DRAFT.value,
        priority=(okr_in.priority or OKRPriority.MEDIUM).value,
        due_date=okr_in.due_date,
    )
    okr.assign(okr_in.assigned_to)
    session.add(okr)
    await session.flush()

    _replace_key_results(session, okr, okr_in.key_results)
    await session.flush()

    log.info(
        "okr.created",
        okr_id=str(okr.id),
        org_id=str(okr.org_id),
        assigned_to=okr.assigned_to_type,
        by=str(actor.user_id),
    )
    return okr


async def update_okr(
    okr: OKR, okr_in: OKRUpdate, actor: Actor, session: AsyncSession
) -> OKR:
    """Full update of an OKR's content."""
    enforce(Action.UPDATE_OKR, actor, okr)
    validate_okr_content(okr_in.title, okr_in.objective, okr_in.key_results)
    if okr_in.assigned_to is not None:
        await _check_assignee(session, okr_in.assigned_to, actor)

    now = utcnow()
    okr.title = okr_in.title
    okr.objective = okr_in.objective
    okr.due_date = okr_in.due_date
    if okr_in.priority is not None:
        okr.priority = okr_in.priority.value
    if okr_in.assigned_to is not None:
        okr.assign(okr_in.assigned_to)
    if okr_in.status is not None:
        _apply_status(okr, okr_in.status, now)
    okr.updated_at = now

    await _delete_key_results(session, okr)
    _replace_key_results(session, okr, okr_in.key_results)
    session.add(okr)
    await session.flush()

    log.info("okr.updated", okr_id=str(okr.id), status=okr.status, by=str(actor.user_id))
    return okr


async def update_progress(
    okr: OKR, progress_in: OKRProgressUpdate, actor: Actor, session: AsyncSession
) -> OKR:
    """Replace the key-result list verbatim. No other field changes."""
    enforce(Action.UPDATE_OKR_PROGRESS, actor, okr)
    errors = _key_result_errors(progress_in.key_results)
    if errors:
        raise ValidationFailed(details=errors)

    await _delete_key_results(session, okr)
    _replace_key_results(session, okr, progress_in.key_results)
    okr.updated_at = utcnow()
    session.add(okr)
    await session.flush()

    log.info(
        "okr.progress_updated",
        okr_id=str(okr.id),
        key_results=len(progress_in.key_results),
        by=str(actor.user_id),
    )
    return okr


async def add_comment(
    okr: OKR, comment_in: CommentCreate, actor: Actor, session: AsyncSession
) -> OKRComment:
    enforce(Action.COMMENT_OKR, actor, okr)
    if not comment_in.text:
        raise ValidationFailed(details=[field_error("text", "Comment text is required")])

    comment = OKRComment(
        okr_id=okr.id,
        org_id=okr.org_id,
        user_id=actor.user_id,
        text=comment_in.text,
    )
    session.add(comment)
    okr.updated_at = utcnow()
    session.add(okr)
    await session.flush()

    log.info("okr.commented", okr_id=str(okr.id), comment_id=str(comment.id), by=str(actor.user_id))
    return comment


async def delete_okr(okr: OKR, actor: Actor, session: AsyncSession) -> OKR:
    """Soft delete: the OKR leaves list results but stays readable by id."""
    enforce(Action.DELETE_OKR, actor, okr)
    okr.is_active = False
    session.add(okr)
    await session.flush()

    log.info("okr.deleted", okr_id=str(okr.id), by=str(actor.user_id))
    return okr


# ---------------------------------------------------------------------------
# Enrichment
# ---------------------------------------------------------------------------


async def enrich_okrs(session: AsyncSession, okrs: Sequence[OKR]) -> list[OKRRead]:
    """Convert OKR rows to OKRRead with key results, comments and projections."""
    if not okrs:
        return []
    okr_ids = [o.id for o in okrs]

    kr_result = await session.execute(
        select(KeyResult)
        .where(KeyResult.okr_id.in_(okr_ids))
        .order_by(KeyResult.okr_id, KeyResult.position)
    )
    key_results: dict[uuid.UUID, list[KeyResult]] = {i: [] for i in okr_ids}
    for kr in kr_result.scalars().all():
        key_results[kr.okr_id].append(kr)

    comment_result = await session.execute(
        select(OKRComment)
        .where(OKRComment.okr_id.in_(okr_ids))
        .order_by(OKRComment.created_at)
    )
    comments: dict[uuid.UUID, list[OKRComment]] = {i: [] for i in okr_ids}
    for c in comment_result.scalars().all():
        comments[c.okr_id].append(c)

    user_ids = {o.assigned_by_id for o in okrs}
    user_ids |= {o.assigned_to_user_id for o in okrs}
    user_ids |= {c.user_id for cs in comments.values() for c in cs}
    users = await load_by_ids(session, User, user_ids)
    teams = await load_by_ids(
        session, Team, {o.team_id for o in okrs} | {o.assigned_to_team_id for o in okrs}
    )
    departments = await load_by_ids(session, Department, (o.department_id for o in okrs))
    orgs = await load_by_ids(session, Organization, (o.org_id for o in okrs))

    return [
        OKRRead(
            id=o.id,
            title=o.title,
            objective=o.objective,
            key_results=[KeyResultRead.model_validate(kr) for kr in key_results[o.id]],
            assigned_to=AssignmentRead(
                type=AssignmentType(o.assigned_to_type),
                user=user_ref(users, o.assigned_to_user_id),
                team=named_ref(teams, o.assigned_to_team_id),
            ),
            assigned_by=user_ref(users, o.assigned_by_id),
            organization=named_ref(orgs, o.org_id),
            department=named_ref(departments, o.department_id),
            team=named_ref(teams, o.team_id),
            status=o.status,
            priority=o.priority,
            start_date=o.start_date,
            due_date=o.due_date,
            completed_date=o.completed_date,
            comments=[
                CommentRead(
                    id=c.id,
                    user=user_ref(users, c.user_id),
                    text=c.text,
                    created_at=c.created_at,
                )
                for c in comments[o.id]
            ],
            is_active=o.is_active,
            created_at=o.created_at,
            updated_at=o.updated_at,
        )
        for o in okrs
    ]


async def enrich_okr(session: AsyncSession, okr: OKR) -> OKRRead:
    return (await enrich_okrs(session, [okr]))[0]
