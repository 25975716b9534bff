"""
Organization service: org listing and creation (admin only), org lookup.
"""

from __future__ import annotations

import uuid

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from okr_server.core.policy import Action, Actor, enforce
from okr_server.models.organization import Organization
from okr_server.services.queries import DEFAULT_PER_PAGE, get_or_404, list_statement
from okr_shared.schemas.organizations import OrgCreateRequest

log = structlog.get_logger()


async def list_organizations(
    actor: Actor,
    session: AsyncSession,
    page: int = 1,
    per_page: int = DEFAULT_PER_PAGE,
) -> list[Organization]:
    """List every active organization (admin only)."""
    enforce(Action.LIST_ORGANIZATIONS, actor)
    result = await session.execute(
        list_statement(Organization, actor, page=page, per_page=per_page)
    )
    return list(result.scalars().all())


async def get_organization(
    org_id: uuid.UUID, actor: Actor, session: AsyncSession
) -> Organization:
    org = await get_or_404(session, Organization, org_id, "Organization")
    enforce(Action.READ, actor, org)
    return org


async def create_organization(
    req: OrgCreateRequest, actor: Actor, session: AsyncSession
) -> Organization:
    """Create a new tenant. The creating admin stays in their own organization."""
    enforce(Action.CREATE_ORGANIZATION, actor)
    org = Organization(name=req.name, description=req.description, domain=req.domain)
    session.add(org)
    await session.flush()

    log.info("org.created", org_id=str(org.id), creator=str(actor.user_id))
    return org
