"""Tests for the key-value store adapter."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from youkhana.adapters.kv import KeyValueStore, drop_empty
from youkhana.core.errors import ErrorCode, InfrastructureError


class TestKeyValueStore:
    """Tests for KeyValueStore."""

    async def test_hash_round_trip(self, store: KeyValueStore) -> None:
        await store.hset("user:jane@example.com", {"name": "Jane", "role": "ADMIN"})

        assert await store.hgetall("user:jane@example.com") == {"name": "Jane", "role": "ADMIN"}
        assert await store.hgetall("user:ghost@example.com") == {}

    async def test_empty_writes_are_skipped(self, store: KeyValueStore) -> None:
        await store.hset("user:empty", {})
        await store.sadd("users:all")

        assert await store.hgetall("user:empty") == {}
        assert await store.scard("users:all") == 0
        assert await store.delete() == 0

    async def test_ttl_reports_missing_and_persistent_keys(self, store: KeyValueStore) -> None:
        await store.set("plain", "1")
        await store.setex("expiring", 60, "1")

        assert await store.ttl("missing") == -2
        assert await store.ttl("plain") == -1
        assert 0 < await store.ttl("expiring") <= 60

    async def test_sorted_set_ordering(self, store: KeyValueStore) -> None:
        await store.zadd("scores", "b", 2)
        await store.zadd("scores", "a", 1)
        await store.zadd("scores", "c", 3)

        assert await store.zrange("scores", 0, -1) == ["a", "b", "c"]
        assert await store.zrange("scores", 0, 1, desc=True) == ["c", "b"]
        assert await store.zrangebyscore("scores", 0, 2) == ["a", "b"]
        assert await store.zremrangebyscore("scores", 0, 2) == 2
        assert await store.zcard("scores") == 1

    async def test_store_errors_become_infrastructure_errors(self) -> None:
        client = MagicMock()
        client.get = AsyncMock(side_effect=RedisConnectionError("connection refused"))
        store = KeyValueStore(client=client)

        with pytest.raises(InfrastructureError) as exc_info:
            await store.get("user:jane@example.com")

        assert exc_info.value.code is ErrorCode.INFRASTRUCTURE
        assert "get" in exc_info.value.message

    async def test_client_required(self) -> None:
        with pytest.raises(RuntimeError, match="not initialized"):
            await KeyValueStore().get("anything")

    async def test_connect_requires_url(self) -> None:
        with pytest.raises(RuntimeError, match="URL not configured"):
            await KeyValueStore().connect()


class TestDropEmpty:
    """Tests for drop_empty."""

    def test_drops_none_and_stringifies(self) -> None:
        assert drop_empty({"a": None, "b": 2, "c": "x", "d": False}) == {
            "b": "2",
            "c": "x",
            "d": "False",
        }
