"""Tests for the fixed-window rate limiter."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock

import fakeredis
import pytest
from redis.exceptions import RedisError
from youkhana.adapters.kv import KeyValueStore
from youkhana.safety.rate_limit import (
    INVITATION_CREATION,
    RATE_LIMITS,
    UNAVAILABLE_MESSAGE,
    RateLimitConfig,
    RateLimiter,
)

CONFIG = RateLimitConfig(max_attempts=3, window_seconds=600)
IDENTIFIER = "admin@youkhana.com"


def _broken_store() -> KeyValueStore:
    client = MagicMock()
    client.get = AsyncMock(side_effect=RedisError("down"))
    client.delete = AsyncMock(side_effect=RedisError("down"))
    return KeyValueStore(client=client)


class TestRateLimitConfig:
    """Tests for RateLimitConfig messages."""

    def test_custom_message(self) -> None:
        config = RATE_LIMITS[INVITATION_CREATION]

        assert config.max_attempts == 10
        assert config.window_seconds == 3600
        assert "invitation creation limit" in config.message_for(100)

    def test_generic_message_rounds_minutes_up(self) -> None:
        assert CONFIG.message_for(61) == "Rate limit exceeded. Please try again in 2 minutes."


class TestCheckRateLimit:
    """Tests for check_rate_limit."""

    async def test_allows_up_to_max_then_blocks(self, rate_limiter: RateLimiter) -> None:
        results = [
            await rate_limiter.check_rate_limit(IDENTIFIER, "test_action", CONFIG)
            for _ in range(4)
        ]

        assert [r.allowed for r in results] == [True, True, True, False]
        assert [r.remaining for r in results] == [2, 1, 0, 0]
        assert results[-1].error == "Rate limit exceeded. Please try again in 10 minutes."

    async def test_first_attempt_sets_window(
        self, rate_limiter: RateLimiter, store: KeyValueStore
    ) -> None:
        await rate_limiter.check_rate_limit(IDENTIFIER, "test_action", CONFIG)
        await rate_limiter.check_rate_limit(IDENTIFIER, "test_action", CONFIG)

        key = f"ratelimit:test_action:{IDENTIFIER}"
        assert await store.get(key) == "2"
        assert 0 < await store.ttl(key) <= 600

    async def test_identifiers_are_independent(self, rate_limiter: RateLimiter) -> None:
        for _ in range(3):
            await rate_limiter.check_rate_limit(IDENTIFIER, "test_action", CONFIG)

        other = await rate_limiter.check_rate_limit("other@youkhana.com", "test_action", CONFIG)

        assert other.allowed

    async def test_reset_clears_counter(self, rate_limiter: RateLimiter) -> None:
        for _ in range(3):
            await rate_limiter.check_rate_limit(IDENTIFIER, "test_action", CONFIG)

        await rate_limiter.reset_rate_limit(IDENTIFIER, "test_action")

        result = await rate_limiter.check_rate_limit(IDENTIFIER, "test_action", CONFIG)
        assert result.allowed
        assert result.remaining == 2

    async def test_window_expiry_resets_counter(self, rate_limiter: RateLimiter) -> None:
        config = RateLimitConfig(max_attempts=3, window_seconds=1)
        for _ in range(3):
            await rate_limiter.check_rate_limit(IDENTIFIER, "test_action", config)
        assert not (await rate_limiter.check_rate_limit(IDENTIFIER, "test_action", config)).allowed

        await asyncio.sleep(1.2)

        result = await rate_limiter.check_rate_limit(IDENTIFIER, "test_action", config)
        assert result.allowed
        assert result.remaining == 2

    async def test_counter_recreated_mid_check_still_expires(
        self,
        rate_limiter: RateLimiter,
        store: KeyValueStore,
        redis_client: fakeredis.FakeAsyncRedis,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """A window ending between the read and the increment keeps its TTL."""
        key = f"ratelimit:test_action:{IDENTIFIER}"
        await rate_limiter.check_rate_limit(IDENTIFIER, "test_action", CONFIG)

        read = store.get

        async def read_then_expire(name: str) -> str | None:
            value = await read(name)
            await redis_client.delete(name)
            return value

        monkeypatch.setattr(store, "get", read_then_expire)
        await rate_limiter.check_rate_limit(IDENTIFIER, "test_action", CONFIG)

        assert 0 < await store.ttl(key) <= 600

    async def test_counter_without_ttl_is_given_one(
        self,
        rate_limiter: RateLimiter,
        store: KeyValueStore,
        redis_client: fakeredis.FakeAsyncRedis,
    ) -> None:
        key = f"ratelimit:test_action:{IDENTIFIER}"
        await redis_client.set(key, "2")

        result = await rate_limiter.check_rate_limit(IDENTIFIER, "test_action", CONFIG)

        assert result.remaining == 0
        assert 0 < await store.ttl(key) <= 600


class TestGetRateLimitStatus:
    """Tests for get_rate_limit_status."""

    async def test_does_not_count(self, rate_limiter: RateLimiter) -> None:
        await rate_limiter.check_rate_limit(IDENTIFIER, "test_action", CONFIG)

        first = await rate_limiter.get_rate_limit_status(IDENTIFIER, "test_action", CONFIG)
        second = await rate_limiter.get_rate_limit_status(IDENTIFIER, "test_action", CONFIG)

        assert first.remaining == second.remaining == 2
        assert first.allowed and second.allowed

    async def test_reports_blocked(self, rate_limiter: RateLimiter) -> None:
        for _ in range(3):
            await rate_limiter.check_rate_limit(IDENTIFIER, "test_action", CONFIG)

        status = await rate_limiter.get_rate_limit_status(IDENTIFIER, "test_action", CONFIG)

        assert not status.allowed
        assert status.error is not None


class TestStoreFailures:
    """Tests for behaviour when the store is unavailable."""

    async def test_fails_open_by_default(self) -> None:
        limiter = RateLimiter(_broken_store())

        result = await limiter.check_rate_limit(IDENTIFIER, "test_action", CONFIG)

        assert result.allowed
        assert result.remaining == 3

    async def test_fails_closed_when_configured(self) -> None:
        limiter = RateLimiter(_broken_store(), fail_open=False)

        result = await limiter.check_rate_limit(IDENTIFIER, "test_action", CONFIG)
        status = await limiter.get_rate_limit_status(IDENTIFIER, "test_action", CONFIG)

        assert not result.allowed
        assert result.error == UNAVAILABLE_MESSAGE
        assert not status.allowed

    async def test_reset_failure_is_logged_not_raised(self) -> None:
        limiter = RateLimiter(_broken_store())

        await limiter.reset_rate_limit(IDENTIFIER, "test_action")
