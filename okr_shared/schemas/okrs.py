"""OKR-related Pydantic schemas shared between the server and API clients."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, List, Literal, Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field, UUID4, computed_field

from .common import (
    AssignmentType,
    IsoDatetime,
    NamedRef,
    OKRPriority,
    OKRStatus,
    TrimmedStr,
    UserRef,
)


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------

# Forward path of an OKR. Other transitions are accepted but logged as unusual.
OKR_TRANSITIONS: dict[OKRStatus, list[OKRStatus]] = {
    OKRStatus.DRAFT: [OKRStatus.ACTIVE, OKRStatus.COMPLETED, OKRStatus.CANCELLED],
    OKRStatus.ACTIVE: [OKRStatus.COMPLETED, OKRStatus.CANCELLED],
    OKRStatus.COMPLETED: [],
    OKRStatus.CANCELLED: [],
}


def is_expected_transition(current: OKRStatus, target: OKRStatus) -> bool:
    """True when ``target`` is the current status or a forward step from it."""
    return current == target or target in OKR_TRANSITIONS[current]


def calculate_progress(progress_values: Sequence[int]) -> int:
    """Mean of key-result progress, rounded half up. 0 when there are none."""
    if not progress_values:
        return 0
    total = sum(progress_values)
    count = len(progress_values)
    return (2 * total + count) // (2 * count)


# ---------------------------------------------------------------------------
# Assignment (tagged union)
# ---------------------------------------------------------------------------

class UserAssignment(BaseModel):
    model_config = ConfigDict(extra="forbid")

    type: Literal["user"] = "user"
    user: UUID4


class TeamAssignment(BaseModel):
    model_config = ConfigDict(extra="forbid")

    type: Literal["team"] = "team"
    team: UUID4


Assignment = Annotated[Union[UserAssignment, TeamAssignment], Field(discriminator="type")]


class AssignmentRead(BaseModel):
    type: AssignmentType
    user: Optional[UserRef] = None
    team: Optional[NamedRef] = None


# ---------------------------------------------------------------------------
# Key results & comments
# ---------------------------------------------------------------------------

class KeyResultIn(BaseModel):
    description: TrimmedStr
    target: Optional[TrimmedStr] = None
    progress: int = Field(default=0, ge=0, le=100)


class KeyResultRead(KeyResultIn):
    id: UUID4

    model_config = {"from_attributes": True}


class CommentCreate(BaseModel):
    text: TrimmedStr


class CommentRead(BaseModel):
    id: UUID4
    user: Optional[UserRef] = None
    text: str
    created_at: datetime


# ---------------------------------------------------------------------------
# OKR CRUD
# ---------------------------------------------------------------------------

class OKRCreate(BaseModel):
    title: TrimmedStr
    objective: TrimmedStr
    key_results: List[KeyResultIn] = Field(default_factory=list)
    assigned_to: Assignment
    priority: Optional[OKRPriority] = None
    due_date: IsoDatetime


class OKRUpdate(BaseModel):
    """Full update. Omitted ``assigned_to``/``priority`` keep their stored values."""
    title: TrimmedStr
    objective: TrimmedStr
    key_results: List[KeyResultIn] = Field(default_factory=list)
    assigned_to: Optional[Assignment] = None
    priority: Optional[OKRPriority] = None
    due_date: IsoDatetime
    status: Optional[OKRStatus] = None


class OKRProgressUpdate(BaseModel):
    key_results: List[KeyResultIn]


class OKRRead(BaseModel):
    id: UUID4
    title: str
    objective: str
    key_results: List[KeyResultRead] = Field(default_factory=list)
    assigned_to: AssignmentRead
    assigned_by: Optional[UserRef] = None
    organization: Optional[NamedRef] = None
    department: Optional[NamedRef] = None
    team: Optional[NamedRef] = None
    status: OKRStatus
    priority: OKRPriority
    start_date: datetime
    due_date: datetime
    completed_date: Optional[datetime] = None
    comments: List[CommentRead] = Field(default_factory=list)
    is_active: bool
    created_at: datetime
    updated_at: datetime

    @computed_field  # type: ignore[prop-decorator]
    @property
    def overall_progress(self) -> int:
        return calculate_progress([kr.progress for kr in self.key_results])
