"""OKR model (org-scoped)."""

from datetime import datetime
from typing import Optional, Union
import uuid

import sqlalchemy as sa
from sqlalchemy import CheckConstraint
from sqlmodel import Field, SQLModel

from okr_shared.schemas.okrs import TeamAssignment, UserAssignment

from .base import SoftDeleteMixin, TimestampMixin, UUIDMixin, utcnow


class OKR(UUIDMixin, TimestampMixin, SoftDeleteMixin, SQLModel, table=True):
    __tablename__ = "okrs"
    __table_args__ = (
        CheckConstraint(
            "(assigned_to_type = 'user' AND assigned_to_user_id IS NOT NULL"
            " AND assigned_to_team_id IS NULL)"
            " OR (assigned_to_type = 'team' AND assigned_to_team_id IS NOT NULL"
            " AND assigned_to_user_id IS NULL)",
            name="okr_single_assignment",
        ),
    )

    org_id: uuid.UUID = Field(foreign_key="organizations.id", nullable=False, index=True)
    department_id: Optional[uuid.UUID] = Field(default=None, foreign_key="departments.id")
    team_id: Optional[uuid.UUID] = Field(default=None, foreign_key="teams.id")
    title: str = Field(nullable=False)
    objective: str = Field(nullable=False)
    assigned_to_type: str = Field(nullable=False)  # user | team
    assigned_to_user_id: Optional[uuid.UUID] = Field(default=None, foreign_key="users.id", index=True)
    assigned_to_team_id: Optional[uuid.UUID] = Field(default=None, foreign_key="teams.id", index=True)
    assigned_by_id: uuid.UUID = Field(foreign_key="users.id", nullable=False, index=True)
    status: str = Field(default="draft", nullable=False, index=True)  # draft | active | completed | cancelled
    priority: str = Field(default="medium", nullable=False, index=True)  # low | medium | high | critical
    start_date: datetime = Field(default_factory=utcnow, nullable=False, sa_type=sa.DateTime(timezone=True))
    due_date: datetime = Field(nullable=False, sa_type=sa.DateTime(timezone=True))
    completed_date: Optional[datetime] = Field(default=None, sa_type=sa.DateTime(timezone=True))

    @property
    def assignment(self) -> Union[UserAssignment, TeamAssignment]:
        if self.assigned_to_type == "user":
            return UserAssignment(user=self.assigned_to_user_id)
        return TeamAssignment(team=self.assigned_to_team_id)

    def assign(self, assignment: Union[UserAssignment, TeamAssignment]) -> None:
        """Store exactly one assignment branch, clearing the other."""
        self.assigned_to_type = assignment.type
        if isinstance(assignment, UserAssignment):
            self.assigned_to_user_id = assignment.user
            self.assigned_to_team_id = None
        else:
            self.assigned_to_team_id = assignment.team
            self.assigned_to_user_id = None

    def is_assigned_to_user(self, user_id: uuid.UUID) -> bool:
        return self.assigned_to_type == "user" and self.assigned_to_user_id == user_id
