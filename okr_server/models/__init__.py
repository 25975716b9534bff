# SQLModel definitions, imported so create_all sees every table.
from .base import SoftDeleteMixin, TimestampMixin, UUIDMixin  # noqa: F401
from .organization import Organization  # noqa: F401
from .department import Department  # noqa: F401
from .team import Team  # noqa: F401
from .user import User  # noqa: F401
from .okr import OKR  # noqa: F401
from .key_result import KeyResult  # noqa: F401
from .okr_comment import OKRComment  # noqa: F401
