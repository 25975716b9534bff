"""
Access control policy.

``decide(action, actor, target)`` is a pure function: no I/O, no session, no
request. Every rule checks organization scope first; a record outside the
actor's organization is always FORBIDDEN, whatever the actor's role. Only then
are role and ownership rules consulted.

Rules:
- READ / COMMENT_OKR: organization scope only.
- LIST_ORGANIZATIONS / CREATE_ORGANIZATION: admin.
- CREATE_DEPARTMENT / CREATE_TEAM: admin or team lead.
- UPDATE_OKR / UPDATE_OKR_PROGRESS: admin, the assigner, or the user assignee.
- DELETE_OKR: admin or the assigner (never the assignee alone).
- UPDATE_PROFILE: admin or the user themself.
"""

from __future__ import annotations

import uuid
from enum import Enum
from typing import Any, Callable, Optional

from okr_server.core.errors import Forbidden
from okr_server.models.organization import Organization
from okr_shared.schemas.common import ELEVATED_ROLES, Role


class Action(str, Enum):
    READ = "read"
    LIST_ORGANIZATIONS = "list_organizations"
    CREATE_ORGANIZATION = "create_organization"
    CREATE_DEPARTMENT = "create_department"
    CREATE_TEAM = "create_team"
    UPDATE_PROFILE = "update_profile"
    UPDATE_OKR = "update_okr"
    UPDATE_OKR_PROGRESS = "update_okr_progress"
    COMMENT_OKR = "comment_okr"
    DELETE_OKR = "delete_okr"


class Decision(str, Enum):
    ALLOW = "allow"
    FORBIDDEN = "forbidden"


class Actor:
    """The authenticated identity an operation runs as."""

    def __init__(
        self,
        user_id: uuid.UUID,
        role: str,
        org_id: uuid.UUID,
        department_id: Optional[uuid.UUID] = None,
        team_id: Optional[uuid.UUID] = None,
    ):
        self.user_id = user_id
        self.role = Role(role)
        self.org_id = org_id
        self.department_id = department_id
        self.team_id = team_id

    @classmethod
    def from_user(cls, user: Any) -> "Actor":
        return cls(
            user_id=user.id,
            role=user.role,
            org_id=user.org_id,
            department_id=user.department_id,
            team_id=user.team_id,
        )

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def __repr__(self) -> str:
        return f"Actor(user_id={self.user_id}, role={self.role.value}, org_id={self.org_id})"


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------

def _target_org_id(target: Any) -> uuid.UUID:
    if isinstance(target, Organization):
        return target.id
    return target.org_id


def _admin(actor: Actor, target: Any) -> bool:
    return actor.is_admin


def _elevated(actor: Actor, target: Any) -> bool:
    return actor.role in ELEVATED_ROLES


def _can_edit_okr(actor: Actor, okr: Any) -> bool:
    if okr is None:
        return False
    return (
        actor.is_admin
        or okr.assigned_by_id == actor.user_id
        or okr.is_assigned_to_user(actor.user_id)
    )


def _can_delete_okr(actor: Actor, okr: Any) -> bool:
    if okr is None:
        return False
    return actor.is_admin or okr.assigned_by_id == actor.user_id


def _can_update_profile(actor: Actor, user: Any) -> bool:
    if user is None:
        return False
    return actor.is_admin or user.id == actor.user_id


_RULES: dict[Action, Callable[[Actor, Any], bool]] = {
    Action.LIST_ORGANIZATIONS: _admin,
    Action.CREATE_ORGANIZATION: _admin,
    Action.CREATE_DEPARTMENT: _elevated,
    Action.CREATE_TEAM: _elevated,
    Action.UPDATE_PROFILE: _can_update_profile,
    Action.UPDATE_OKR: _can_edit_okr,
    Action.UPDATE_OKR_PROGRESS: _can_edit_okr,
    Action.DELETE_OKR: _can_delete_okr,
}

# Actions on an existing record; without a target there is nothing in scope.
TARGETED_ACTIONS = frozenset(
    {
        Action.READ,
        Action.COMMENT_OKR,
        Action.UPDATE_PROFILE,
        Action.UPDATE_OKR,
        Action.UPDATE_OKR_PROGRESS,
        Action.DELETE_OKR,
    }
)


def decide(action: Action, actor: Actor, target: Any = None) -> Decision:
    """Decide whether ``actor`` may perform ``action`` on ``target``."""
    if target is None:
        if action in TARGETED_ACTIONS:
            return Decision.FORBIDDEN
    elif _target_org_id(target) != actor.org_id:
        return Decision.FORBIDDEN

    rule = _RULES.get(action)
    if rule is None:
        return Decision.ALLOW
    return Decision.ALLOW if rule(actor, target) else Decision.FORBIDDEN


def enforce(action: Action, actor: Actor, target: Any = None) -> None:
    """Raise Forbidden unless the policy allows the action."""
    if decide(action, actor, target) is Decision.FORBIDDEN:
        raise Forbidden()
