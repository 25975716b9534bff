"""
Organization, department and team schemas.

Organizations are the tenant boundary; departments and teams always belong
to exactly one organization.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from .common import NamedRef, TrimmedStr, UserRef


# ---------------------------------------------------------------------------
# Organizations
# ---------------------------------------------------------------------------

class OrgCreateRequest(BaseModel):
    name: TrimmedStr = Field(..., min_length=1, max_length=100, description="Organization display name")
    description: Optional[TrimmedStr] = None
    domain: Optional[TrimmedStr] = Field(None, max_length=253, description="Primary email/web domain")


class OrgResponse(BaseModel):
    id: uuid.UUID
    name: str
    description: Optional[str] = None
    domain: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class OrgListResponse(BaseModel):
    data: list[OrgResponse]


# ---------------------------------------------------------------------------
# Departments
# ---------------------------------------------------------------------------

class DepartmentCreate(BaseModel):
    name: TrimmedStr = Field(..., min_length=1, max_length=100)
    description: Optional[TrimmedStr] = None


class DepartmentRead(BaseModel):
    id: uuid.UUID
    name: str
    description: Optional[str] = None
    organization: Optional[NamedRef] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime


# ---------------------------------------------------------------------------
# Teams
# ---------------------------------------------------------------------------

class TeamCreate(BaseModel):
    name: TrimmedStr = Field(..., min_length=1, max_length=100)
    description: Optional[TrimmedStr] = None
    department_id: uuid.UUID
    team_lead_id: Optional[uuid.UUID] = None


class TeamRead(BaseModel):
    id: uuid.UUID
    name: str
    description: Optional[str] = None
    department: Optional[NamedRef] = None
    organization: Optional[NamedRef] = None
    team_lead: Optional[UserRef] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime
