"""User model."""

from typing import Optional
import uuid

from sqlmodel import Field, SQLModel

from .base import SoftDeleteMixin, TimestampMixin, UUIDMixin


class User(UUIDMixin, TimestampMixin, SoftDeleteMixin, SQLModel, table=True):
    __tablename__ = "users"

    email: str = Field(unique=True, index=True, nullable=False)
    password_hash: str = Field(nullable=False)  # bcrypt
    first_name: str = Field(nullable=False)
    last_name: str = Field(nullable=False)
    role: str = Field(default="member", nullable=False)  # admin | team_lead | member
    org_id: uuid.UUID = Field(foreign_key="organizations.id", nullable=False, index=True)
    department_id: Optional[uuid.UUID] = Field(default=None, foreign_key="departments.id")
    team_id: Optional[uuid.UUID] = Field(default=None, foreign_key="teams.id", index=True)
