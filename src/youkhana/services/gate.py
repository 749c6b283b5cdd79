"""Authorization gate shared by every admin action.

Each mutating action runs the same sequence:

1. a signed-in session must be present,
2. the session's role must grant the permission,
3. input is validated,
4. the rate limit is checked where one applies,
5. the mutation runs,
6. an audit entry is written, with result=failure if any step after (2) failed.

Nothing touches the store before (1) and (2) pass. Errors never cross the
boundary: every action returns an ``ActionResult``.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import structlog
from pydantic import BaseModel

from youkhana.core.auth.types import SessionUser
from youkhana.core.errors import (
    AdminError,
    AuthenticationError,
    ErrorCode,
    PermissionDeniedError,
    RateLimitedError,
    ValidationError,
)
from youkhana.core.rbac import Permission, has_permission
from youkhana.core.validation import safe_validate
from youkhana.safety.rate_limit import RATE_LIMITS, RateLimiter

logger = structlog.get_logger()

SIGN_IN_REQUIRED = "You must be signed in to perform this action"

M = TypeVar("M", bound=BaseModel)


class ActionResult(BaseModel):
    """Uniform result of an admin action."""

    success: bool
    message: str
    data: Any = None
    code: ErrorCode | None = None

    @classmethod
    def ok(cls, message: str, data: Any = None) -> ActionResult:
        return cls(success=True, message=message, data=data)

    @classmethod
    def from_error(cls, error: AdminError) -> ActionResult:
        return cls(success=False, message=error.message, code=error.code)


def authorize(
    session: SessionUser | None,
    permission: Permission,
    denied_message: str,
) -> SessionUser:
    """Require a session whose role grants ``permission``.

    Raises:
        AuthenticationError: If there is no session.
        PermissionDeniedError: If the role lacks the permission.
    """
    if session is None:
        raise AuthenticationError(SIGN_IN_REQUIRED)

    if not has_permission(session.role, permission):
        logger.warning(
            "permission_denied",
            email=session.email,
            role=session.role.value,
            permission=permission.value,
        )
        raise PermissionDeniedError(denied_message)

    return session


def validated(schema: type[M], data: Any) -> M:
    """Validate input, raising the first error as a ValidationError."""
    model, error = safe_validate(schema, data)
    if model is None:
        raise ValidationError(error or "Validation failed")
    return model


async def enforce_rate_limit(limiter: RateLimiter, identifier: str, action: str) -> None:
    """Count an attempt against a preconfigured limit.

    Raises:
        RateLimitedError: If the limit is exhausted.
    """
    result = await limiter.check_rate_limit(identifier, action, RATE_LIMITS[action])
    if not result.allowed:
        raise RateLimitedError(
            result.error or "Rate limit exceeded",
            details={"reset_in": result.reset_in},
        )


FailureHook = Callable[[str], Awaitable[object]]


async def run_guarded(
    operation: Callable[[], Awaitable[ActionResult]],
    *,
    action: str,
    fallback_message: str,
    on_failure: FailureHook | None = None,
) -> ActionResult:
    """Run the post-authorization part of an action.

    Domain errors become failed results carrying their own message.
    Anything else is logged and reported with ``fallback_message``.
    ``on_failure`` receives the message, typically to write a failure
    audit entry.
    """
    try:
        return await operation()
    except AdminError as e:
        logger.info("action_rejected", action=action, code=e.code.value, reason=e.message)
        if on_failure is not None:
            await on_failure(e.message)
        return ActionResult.from_error(e)
    except Exception as e:
        logger.exception("action_failed", action=action)
        if on_failure is not None:
            await on_failure(str(e) or fallback_message)
        return ActionResult(
            success=False,
            message=fallback_message,
            code=ErrorCode.INTERNAL_ERROR,
        )
