"""Audit log types."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, field_serializer
from pydantic.alias_generators import to_camel

from youkhana.core.clock import to_iso


class AuditAction(str, Enum):
    """Action tags recorded in the audit log."""

    USER_CREATE = "user.create"
    USER_UPDATE_ROLE = "user.update.role"
    USER_UPDATE_NAME = "user.update.name"
    USER_DELETE = "user.delete"

    INVITATION_CREATE = "invitation.create"
    INVITATION_RESEND = "invitation.resend"
    INVITATION_CANCEL = "invitation.cancel"
    INVITATION_ACCEPT = "invitation.accept"

    AUTH_SIGNIN = "auth.signin"
    AUTH_SIGNOUT = "auth.signout"
    AUTH_SIGNUP = "auth.signup"

    SETTINGS_UPDATE = "settings.update"

    PRODUCT_CREATE = "product.create"
    PRODUCT_UPDATE = "product.update"
    PRODUCT_DELETE = "product.delete"
    PRODUCT_STATUS_TOGGLE = "product.status.toggle"
    PRODUCT_FEATURED_TOGGLE = "product.featured.toggle"

    INQUIRY_STATUS_UPDATE = "inquiry.status.update"
    INQUIRY_NOTES_UPDATE = "inquiry.notes.update"
    INQUIRY_DELETE = "inquiry.delete"


class AuditCategory(str, Enum):
    """Groupings used for the per-category index."""

    USER_MANAGEMENT = "user_management"
    INVITATION_MANAGEMENT = "invitation_management"
    AUTHENTICATION = "authentication"
    SETTINGS = "settings"
    PRODUCT_MANAGEMENT = "product_management"
    INQUIRY_MANAGEMENT = "inquiry_management"


class AuditResult(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"


class AuditLogCreate(BaseModel):
    """Request to record an audit log entry."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    performed_by: str
    performed_by_role: str
    action: AuditAction
    category: AuditCategory
    resource: str
    result: AuditResult
    details: dict[str, Any] | None = None
    error_message: str | None = None
    ip_address: str | None = None
    user_agent: str | None = None


class AuditLog(AuditLogCreate):
    """Recorded audit log entry.

    Serialized with camelCase keys, e.g. ``performedBy``, so entries stay
    readable by other clients of the same store.
    """

    id: str
    timestamp: datetime

    @field_serializer("timestamp")
    def _serialize_timestamp(self, value: datetime) -> str:
        return to_iso(value)
