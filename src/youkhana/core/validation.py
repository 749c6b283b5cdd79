"""Input validation schemas for admin actions.

Emails are lower-cased and trimmed, names are trimmed, and every failure
produces a single short message suitable for the admin UI.
"""

from __future__ import annotations

import re
from typing import Annotated, Any, TypeVar

from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict
from pydantic import ValidationError as PydanticValidationError
from pydantic.networks import validate_email
from pydantic_core import PydanticCustomError

from youkhana.core.rbac import Role, coerce_role

NAME_MAX_LENGTH = 100
TOKEN_PATTERN = re.compile(r"^[a-f0-9]{64}$")

M = TypeVar("M", bound=BaseModel)


def _normalize_email(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise PydanticCustomError("email_required", "Email is required")
    candidate = value.strip().lower()
    try:
        validate_email(candidate)
    except PydanticCustomError:
        raise PydanticCustomError("email_invalid", "Invalid email format") from None
    return candidate


def _normalize_name(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise PydanticCustomError("name_required", "Name is required")
    trimmed = value.strip()
    if len(trimmed) > NAME_MAX_LENGTH:
        raise PydanticCustomError(
            "name_too_long", f"Name must be less than {NAME_MAX_LENGTH} characters"
        )
    return trimmed


def _parse_role(value: Any) -> Role:
    role = coerce_role(value)
    if role is None:
        raise PydanticCustomError("role_invalid", "Invalid role")
    return role


def _check_invitation_role(value: Role) -> Role:
    if value is Role.MASTER_ADMIN:
        raise PydanticCustomError(
            "role_not_invitable", "Master admin cannot be invited through invitation system"
        )
    return value


def _check_token(value: Any) -> str:
    if not isinstance(value, str) or not TOKEN_PATTERN.match(value):
        raise PydanticCustomError("token_invalid", "Invalid token format")
    return value


Email = Annotated[str, BeforeValidator(_normalize_email)]
Name = Annotated[str, BeforeValidator(_normalize_name)]
RoleField = Annotated[Role, BeforeValidator(_parse_role)]
InvitationRole = Annotated[Role, BeforeValidator(_parse_role), AfterValidator(_check_invitation_role)]
Token = Annotated[str, BeforeValidator(_check_token)]


class _Schema(BaseModel):
    model_config = ConfigDict(frozen=True)


class CreateUserInput(_Schema):
    email: Email
    name: Name
    role: RoleField
    invited_by: Email | None = None


class UpdateUserRoleInput(_Schema):
    email: Email
    role: RoleField


class UpdateUserNameInput(_Schema):
    email: Email
    name: Name


class DeleteUserInput(_Schema):
    email: Email


class CreateInvitationInput(_Schema):
    email: Email
    role: InvitationRole


class InvitationTokenInput(_Schema):
    """Used by both resend and cancel."""

    token: Token


class SignupInput(_Schema):
    token: Token
    name: Name


class SignInInput(_Schema):
    email: Email


def first_error_message(error: PydanticValidationError) -> str:
    """Extract the first error message from a pydantic validation error."""
    issues = error.errors()
    if not issues:
        return "Validation failed"
    return str(issues[0].get("msg") or "Validation failed")


def safe_validate(schema: type[M], data: Any) -> tuple[M | None, str | None]:
    """Validate data without raising.

    Returns:
        ``(model, None)`` if valid, ``(None, message)`` otherwise.
    """
    try:
        return schema.model_validate(data), None
    except PydanticValidationError as e:
        return None, first_error_message(e)
