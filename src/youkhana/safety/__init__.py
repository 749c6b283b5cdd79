"""Safety module - admission control for sensitive actions."""

from youkhana.safety.rate_limit import (
    INVITATION_CREATION,
    RATE_LIMITS,
    USER_DELETION,
    RateLimitConfig,
    RateLimiter,
    RateLimitResult,
)

__all__ = [
    "INVITATION_CREATION",
    "RATE_LIMITS",
    "USER_DELETION",
    "RateLimitConfig",
    "RateLimitResult",
    "RateLimiter",
]
