"""Rate Limiter - fixed-window admission control for sensitive actions.

Counters live in the shared store at ``ratelimit:{action}:{identifier}``.
Every attempt increments the counter; the increment that creates it also
sets a TTL equal to the window, and the store's expiry resets the window.
A counter found without a TTL gets one again on the next read. Bursts of
up to twice the nominal rate are possible across a window edge.

Usage:
    limiter = RateLimiter(store)
    result = await limiter.check_rate_limit(
        email, INVITATION_CREATION, RATE_LIMITS[INVITATION_CREATION]
    )
    if not result.allowed:
        ...
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import structlog

from youkhana.adapters.kv import KeyValueStore, keys
from youkhana.core.errors import AdminError

logger = structlog.get_logger()

INVITATION_CREATION = "invitation_creation"
USER_DELETION = "user_deletion"

UNAVAILABLE_MESSAGE = "Rate limiting is temporarily unavailable. Please try again later."


@dataclass(frozen=True)
class RateLimitConfig:
    """Configuration for one rate-limited action.

    Attributes:
        max_attempts: Attempts allowed per window.
        window_seconds: Window length.
        error_message: Message shown when the limit is hit. A generic
            message with the minutes until reset is used if not set.
    """

    max_attempts: int
    window_seconds: int
    error_message: str | None = None

    def message_for(self, reset_in: int) -> str:
        if self.error_message:
            return self.error_message
        return f"Rate limit exceeded. Please try again in {math.ceil(reset_in / 60)} minutes."


@dataclass(frozen=True)
class RateLimitResult:
    """Outcome of a rate limit check.

    Attributes:
        allowed: Whether the action may proceed.
        remaining: Attempts left in the current window.
        reset_in: Seconds until the window resets.
        error: Rejection message when not allowed.
    """

    allowed: bool
    remaining: int
    reset_in: int
    error: str | None = None


RATE_LIMITS: dict[str, RateLimitConfig] = {
    INVITATION_CREATION: RateLimitConfig(
        max_attempts=10,
        window_seconds=3600,
        error_message="You have exceeded the invitation creation limit. Please try again later.",
    ),
    USER_DELETION: RateLimitConfig(
        max_attempts=20,
        window_seconds=3600,
        error_message="You have exceeded the user deletion limit. Please try again later.",
    ),
}


class RateLimiter:
    """Fixed-window rate limiter.

    Store failures are logged and, with ``fail_open`` (the default), the
    action is allowed. With ``fail_open=False`` the action is rejected.
    """

    def __init__(self, store: KeyValueStore, fail_open: bool = True) -> None:
        """Initialize the rate limiter.

        Args:
            store: Key-value store adapter.
            fail_open: Allow actions when the store is unavailable.
        """
        self._store = store
        self.fail_open = fail_open

    async def check_rate_limit(
        self,
        identifier: str,
        action: str,
        config: RateLimitConfig,
    ) -> RateLimitResult:
        """Count an attempt if it is within the limit.

        The read and the increment are separate store calls, so concurrent
        attempts at the boundary can slightly exceed the limit.

        Args:
            identifier: Who is acting, usually an email.
            action: Action name, e.g. ``invitation_creation``.
            config: Limit for this action.
        """
        key = keys.rate_limit(action, identifier)

        try:
            count, reset_in = await self._read(key, config)

            if count >= config.max_attempts:
                logger.warning(
                    "rate_limit_exceeded",
                    action=action,
                    identifier=identifier,
                    count=count,
                    reset_in=reset_in,
                )
                return RateLimitResult(
                    allowed=False,
                    remaining=0,
                    reset_in=reset_in,
                    error=config.message_for(reset_in),
                )

            new_count = await self._store.incr(key)
            if new_count == 1:
                await self._store.expire(key, config.window_seconds)

            return RateLimitResult(
                allowed=True,
                remaining=max(0, config.max_attempts - new_count),
                reset_in=reset_in,
            )
        except AdminError as e:
            return self._unavailable("rate_limit_check_failed", action, config, e)

    async def get_rate_limit_status(
        self,
        identifier: str,
        action: str,
        config: RateLimitConfig,
    ) -> RateLimitResult:
        """Same computation as ``check_rate_limit`` without counting an attempt."""
        key = keys.rate_limit(action, identifier)

        try:
            count, reset_in = await self._read(key, config)
        except AdminError as e:
            return self._unavailable("rate_limit_status_failed", action, config, e)

        allowed = count < config.max_attempts
        return RateLimitResult(
            allowed=allowed,
            remaining=max(0, config.max_attempts - count),
            reset_in=reset_in,
            error=None if allowed else config.message_for(reset_in),
        )

    async def reset_rate_limit(self, identifier: str, action: str) -> None:
        """Delete the counter outright."""
        try:
            await self._store.delete(keys.rate_limit(action, identifier))
        except AdminError as e:
            logger.error("rate_limit_reset_failed", action=action, error=e.message)
            return

        logger.info("rate_limit_reset", action=action, identifier=identifier)

    async def _read(self, key: str, config: RateLimitConfig) -> tuple[int, int]:
        raw = await self._store.get(key)
        count = int(raw) if raw else 0
        ttl = await self._store.ttl(key)
        if count > 0 and ttl == -1:
            # counter created by an increment that raced the window expiry
            await self._store.expire(key, config.window_seconds)
            logger.warning("rate_limit_ttl_restored", key=key)
        reset_in = ttl if ttl > 0 else config.window_seconds
        return count, reset_in

    def _unavailable(
        self,
        event: str,
        action: str,
        config: RateLimitConfig,
        error: AdminError,
    ) -> RateLimitResult:
        logger.error(event, action=action, error=error.message, fail_open=self.fail_open)
        if self.fail_open:
            return RateLimitResult(
                allowed=True,
                remaining=config.max_attempts,
                reset_in=config.window_seconds,
            )
        return RateLimitResult(
            allowed=False,
            remaining=0,
            reset_in=config.window_seconds,
            error=UNAVAILABLE_MESSAGE,
        )
