"""Key result model (ordered child rows of an OKR)."""

from typing import Optional
import uuid

from sqlalchemy import CheckConstraint
from sqlmodel import Field, SQLModel

from .base import UUIDMixin


class KeyResult(UUIDMixin, SQLModel, table=True):
    __tablename__ = "okr_key_results"
    __table_args__ = (
        CheckConstraint("progress >= 0 AND progress <= 100", name="key_result_progress_range"),
    )

    okr_id: uuid.UUID = Field(foreign_key="okrs.id", nullable=False, index=True)
    org_id: uuid.UUID = Field(foreign_key="organizations.id", nullable=False, index=True)
    position: int = Field(nullable=False)
    description: str = Field(nullable=False)
    target: Optional[str] = None
    progress: int = Field(default=0, nullable=False)
