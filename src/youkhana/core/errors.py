"""Error definitions for the admin layer.

Every rejection carries a short, specific message because these
messages are shown verbatim in the admin UI.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Standardized error codes for admin operations."""

    UNAUTHENTICATED = "UNAUTHENTICATED"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    CONFLICT = "CONFLICT"
    NOT_FOUND = "NOT_FOUND"
    POLICY_VIOLATION = "POLICY_VIOLATION"
    RATE_LIMITED = "RATE_LIMITED"
    INFRASTRUCTURE = "INFRASTRUCTURE"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class AdminError(Exception):
    """Base exception for all admin-layer errors.

    Attributes:
        code: Standardized error code.
        message: Human-readable error message.
        details: Additional error details.
    """

    code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize the error."""
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for API response."""
        return {
            "error": {
                "code": self.code.value,
                "message": self.message,
                "details": self.details if self.details else None,
            }
        }


class ValidationError(AdminError):
    """Malformed or missing input. Raised before any store access."""

    code = ErrorCode.VALIDATION_FAILED


class ConflictError(AdminError):
    """A uniqueness invariant would be violated."""

    code = ErrorCode.CONFLICT


class NotFoundError(AdminError):
    """Referenced entity does not exist at mutation time."""

    code = ErrorCode.NOT_FOUND


class PolicyError(AdminError):
    """Action is structurally disallowed regardless of input."""

    code = ErrorCode.POLICY_VIOLATION


class PermissionDeniedError(AdminError):
    """Caller's role lacks the required permission."""

    code = ErrorCode.PERMISSION_DENIED


class InfrastructureError(AdminError):
    """The key-value store is unreachable or returned an error."""

    code = ErrorCode.INFRASTRUCTURE


class AuthenticationError(AdminError):
    """No signed-in session."""

    code = ErrorCode.UNAUTHENTICATED


class RateLimitedError(AdminError):
    """The caller exceeded a rate limit for this action."""

    code = ErrorCode.RATE_LIMITED
