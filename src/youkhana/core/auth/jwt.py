"""Session and sign-in token creation and validation.

Both are stateless HS256 tokens carrying the user's email. A ``purpose``
claim keeps a short-lived sign-in link from being used as a session.
"""

from dataclasses import dataclass
from datetime import timedelta

import jwt

from youkhana.core.auth.types import TokenPayload
from youkhana.core.clock import utcnow


class TokenError(Exception):
    """Raised when token validation fails."""

    pass


ALGORITHM = "HS256"
SESSION_PURPOSE = "session"
SIGN_IN_PURPOSE = "signin"


@dataclass(frozen=True)
class SessionConfig:
    """Session token configuration.

    Attributes:
        secret_key: HMAC secret used to sign tokens.
        expire_days: Session lifetime.
        sign_in_expire_minutes: Lifetime of an emailed sign-in link.
    """

    secret_key: str = "dev-secret-change-in-production"  # pragma: allowlist secret
    expire_days: int = 30
    sign_in_expire_minutes: int = 15


def _encode(email: str, purpose: str, lifetime: timedelta, config: SessionConfig) -> str:
    now = utcnow()
    payload = {
        "sub": email,
        "purpose": purpose,
        "exp": int((now + lifetime).timestamp()),
        "iat": int(now.timestamp()),
    }
    return jwt.encode(payload, config.secret_key, algorithm=ALGORITHM)


def _decode(token: str, purpose: str, config: SessionConfig) -> TokenPayload:
    try:
        payload = jwt.decode(token, config.secret_key, algorithms=[ALGORITHM])
        decoded = TokenPayload(
            sub=payload["sub"],
            exp=payload["exp"],
            iat=payload["iat"],
            purpose=payload.get("purpose", SESSION_PURPOSE),
        )
    except jwt.ExpiredSignatureError:
        raise TokenError("Token has expired") from None
    except (jwt.InvalidTokenError, KeyError) as e:
        raise TokenError(f"Invalid token: {e}") from None

    if decoded.purpose != purpose:
        raise TokenError("Invalid token: wrong purpose")
    return decoded


def create_session_token(email: str, config: SessionConfig) -> str:
    """Create a session token for a signed-in user.

    Args:
        email: The user's email address.
        config: Session configuration.

    Returns:
        Encoded JWT string.
    """
    return _encode(email, SESSION_PURPOSE, timedelta(days=config.expire_days), config)


def decode_session_token(token: str, config: SessionConfig) -> TokenPayload:
    """Decode and validate a session token.

    Args:
        token: Encoded JWT string.
        config: Session configuration.

    Returns:
        Decoded token payload.

    Raises:
        TokenError: If token is invalid, expired, or not a session token.
    """
    return _decode(token, SESSION_PURPOSE, config)


def create_sign_in_token(email: str, config: SessionConfig) -> str:
    """Create the short-lived token embedded in an emailed sign-in link."""
    return _encode(
        email, SIGN_IN_PURPOSE, timedelta(minutes=config.sign_in_expire_minutes), config
    )


def decode_sign_in_token(token: str, config: SessionConfig) -> TokenPayload:
    """Decode a sign-in link token.

    Raises:
        TokenError: If token is invalid, expired, or not a sign-in token.
    """
    return _decode(token, SIGN_IN_PURPOSE, config)
