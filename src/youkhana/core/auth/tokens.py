"""Secure token generation for invitation links."""

import secrets
from datetime import datetime, timedelta

from youkhana.core.clock import utcnow

# 256 bits of entropy, hex encoded to 64 characters
INVITATION_TOKEN_BYTES = 32
DEFAULT_INVITATION_EXPIRY_DAYS = 7
DEFAULT_INVITATION_RETENTION_DAYS = 90


def generate_invitation_token() -> str:
    """Generate a cryptographically secure invitation token.

    The token is used directly as the store key suffix, so it doubles
    as a bearer credential for the signup page.

    Returns:
        64-character lowercase hex string.
    """
    return secrets.token_hex(INVITATION_TOKEN_BYTES)


def get_token_expiry(
    days: int = DEFAULT_INVITATION_EXPIRY_DAYS,
    now: datetime | None = None,
) -> datetime:
    """Calculate token expiry timestamp.

    Args:
        days: Number of days until expiry.
        now: Reference time. Defaults to the current UTC time.

    Returns:
        UTC datetime when the token expires.
    """
    return (now or utcnow()) + timedelta(days=days)


def build_signup_url(base_url: str, token: str) -> str:
    """Build the link an invitee follows to complete signup.

    Args:
        base_url: Signup base, e.g. ``https://example.com/auth``.
        token: Invitation token.
    """
    return f"{base_url.rstrip('/')}/signup/{token}"
