"""Team model (org-scoped)."""

from typing import Optional
import uuid

from sqlmodel import Field, SQLModel

from .base import SoftDeleteMixin, TimestampMixin, UUIDMixin


class Team(UUIDMixin, TimestampMixin, SoftDeleteMixin, SQLModel, table=True):
    __tablename__ = "teams"

    org_id: uuid.UUID = Field(foreign_key="organizations.id", nullable=False, index=True)
    department_id: uuid.UUID = Field(foreign_key="departments.id", nullable=False, index=True)
    name: str = Field(nullable=False)
    description: Optional[str] = None
    # Plain column: users.team_id already references teams, a FK here would be circular.
    team_lead_id: Optional[uuid.UUID] = Field(default=None, index=True)
