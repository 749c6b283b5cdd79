"""Auth domain types."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel

from youkhana.core.rbac import Role


class InvitationStatus(str, Enum):
    """Invitation lifecycle states. ``used`` and ``expired`` are terminal."""

    PENDING = "pending"
    USED = "used"
    EXPIRED = "expired"


class User(BaseModel):
    """User domain model. The email is the unique identifier."""

    email: str
    name: str
    role: Role
    created_at: datetime
    invited_by: str | None = None
    last_sign_in: datetime | None = None


class Invitation(BaseModel):
    """Single-use onboarding invitation."""

    email: str
    role: Role
    token: str
    expires_at: datetime
    created_by: str
    created_at: datetime
    status: InvitationStatus = InvitationStatus.PENDING
    used_at: datetime | None = None

    def is_expired(self, now: datetime) -> bool:
        """True once ``now`` is past the expiry timestamp."""
        return now > self.expires_at


class SessionUser(BaseModel):
    """The signed-in caller, as resolved from a session token."""

    email: str
    role: Role
    name: str | None = None


class TokenPayload(BaseModel):
    """Session token claims."""

    sub: str  # user email
    purpose: str = "session"
    exp: int
    iat: int
