import re
from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Any, Optional

from pydantic import AfterValidator, BaseModel, BeforeValidator, StringConstraints, UUID4

# Input strings are trimmed; emptiness is a business rule checked by the services.
TrimmedStr = Annotated[str, StringConstraints(strip_whitespace=True)]

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}")


def _require_iso_string(value: Any) -> Any:
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not _ISO_DATE.match(value):
        raise ValueError("must be an ISO-8601 date or date-time string")
    return value


def _assume_utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


# ISO-8601 input only (no epoch numbers); naive values are read as UTC.
IsoDatetime = Annotated[datetime, BeforeValidator(_require_iso_string), AfterValidator(_assume_utc)]


class Role(str, Enum):
    ADMIN = "admin"
    TEAM_LEAD = "team_lead"
    MEMBER = "member"


ELEVATED_ROLES = (Role.ADMIN, Role.TEAM_LEAD)


class OKRStatus(str, Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class OKRPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class AssignmentType(str, Enum):
    USER = "user"
    TEAM = "team"


class NamedRef(BaseModel):
    """Projection of an organization, department or team."""
    id: UUID4
    name: str

    model_config = {"from_attributes": True}


class UserRef(BaseModel):
    """Projection of a user as embedded in other records."""
    id: UUID4
    first_name: str
    last_name: str
    email: Optional[str] = None

    model_config = {"from_attributes": True}


class FieldError(BaseModel):
    field: str
    message: str


class ErrorBody(BaseModel):
    code: str
    message: str
    status: int
    details: Optional[list[FieldError]] = None


class ErrorResponse(BaseModel):
    error: ErrorBody
