"""Auth domain types and utilities."""

from youkhana.core.auth.jwt import (
    SessionConfig,
    TokenError,
    create_session_token,
    create_sign_in_token,
    decode_session_token,
    decode_sign_in_token,
)
from youkhana.core.auth.mailer import AuthMailer
from youkhana.core.auth.tokens import (
    build_signup_url,
    generate_invitation_token,
    get_token_expiry,
)
from youkhana.core.auth.types import (
    Invitation,
    InvitationStatus,
    SessionUser,
    TokenPayload,
    User,
)

__all__ = [
    "AuthMailer",
    "Invitation",
    "InvitationStatus",
    "SessionConfig",
    "SessionUser",
    "TokenError",
    "TokenPayload",
    "User",
    "build_signup_url",
    "create_session_token",
    "create_sign_in_token",
    "decode_session_token",
    "decode_sign_in_token",
    "generate_invitation_token",
    "get_token_expiry",
]
