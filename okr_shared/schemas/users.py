"""User and authentication schemas."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field, UUID4, model_validator

from .common import NamedRef, Role, TrimmedStr


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class RegisterRequest(BaseModel):
    """Sign up. Either join an existing organization or found a new one."""
    email: EmailStr
    password: str = Field(min_length=8, max_length=128)
    first_name: TrimmedStr = Field(min_length=1, max_length=100)
    last_name: TrimmedStr = Field(min_length=1, max_length=100)
    organization_id: Optional[UUID4] = None
    organization_name: Optional[TrimmedStr] = Field(default=None, min_length=1, max_length=100)

    @model_validator(mode="after")
    def _one_organization_source(self) -> "RegisterRequest":
        if (self.organization_id is None) == (self.organization_name is None):
            raise ValueError("Provide exactly one of organization_id or organization_name")
        return self


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class UserUpdateRequest(BaseModel):
    """Profile update. Only supplied (non-empty) fields are changed."""
    first_name: Optional[TrimmedStr] = Field(default=None, max_length=100)
    last_name: Optional[TrimmedStr] = Field(default=None, max_length=100)
    department_id: Optional[UUID4] = None
    team_id: Optional[UUID4] = None


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class UserResponse(BaseModel):
    id: UUID4
    email: str
    first_name: str
    last_name: str
    role: Role
    organization: Optional[NamedRef] = None
    department: Optional[NamedRef] = None
    team: Optional[NamedRef] = None
    is_active: bool
    created_at: datetime


class UserListResponse(BaseModel):
    data: List[UserResponse]


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse
