"""Key-value store adapter using redis-py's asyncio client."""

from __future__ import annotations

from collections.abc import Awaitable, Mapping
from typing import Any, TypeVar

import redis.asyncio as aioredis
import structlog
from redis.exceptions import RedisError

from youkhana.core.errors import InfrastructureError

logger = structlog.get_logger()

T = TypeVar("T")


class KeyValueStore:
    """Thin wrapper around a remote key/hash/set/sorted-set store.

    Every call operates on a single key. There is no cross-key atomicity,
    so callers that update a record and its indices do so as a series of
    independent calls. Store failures surface as ``InfrastructureError``.
    """

    def __init__(self, url: str | None = None, client: aioredis.Redis | None = None) -> None:
        """Initialize the store adapter.

        Args:
            url: Connection URL, used by ``connect``.
            client: An already-constructed client (tests pass a fake one).
        """
        self.url = url
        self._client = client

    async def connect(self) -> None:
        """Create the client connection pool."""
        if self._client is None:
            if not self.url:
                raise RuntimeError("Store URL not configured")
            self._client = aioredis.from_url(self.url, decode_responses=True)
        await self._run("ping", self.client.ping())
        logger.info("kv_store_connected", url=(self.url or "").split("@")[-1])

    async def close(self) -> None:
        """Close the client."""
        if self._client is not None:
            await self._client.aclose()
            logger.info("kv_store_disconnected")

    @property
    def client(self) -> aioredis.Redis:
        if self._client is None:
            raise RuntimeError("Store client not initialized")
        return self._client

    async def _run(self, op: str, awaitable: Awaitable[T]) -> T:
        try:
            return await awaitable
        except RedisError as e:
            logger.error("kv_store_error", op=op, error=str(e))
            raise InfrastructureError(f"Store operation '{op}' failed") from e

    # Strings
    async def get(self, key: str) -> str | None:
        return await self._run("get", self.client.get(key))

    async def set(self, key: str, value: str) -> None:
        await self._run("set", self.client.set(key, value))

    async def setex(self, key: str, seconds: int, value: str) -> None:
        await self._run("setex", self.client.setex(key, seconds, value))

    async def incr(self, key: str) -> int:
        return int(await self._run("incr", self.client.incr(key)))

    async def delete(self, *keys: str) -> int:
        if not keys:
            return 0
        return int(await self._run("del", self.client.delete(*keys)))

    async def expire(self, key: str, seconds: int) -> None:
        await self._run("expire", self.client.expire(key, seconds))

    async def ttl(self, key: str) -> int:
        """Seconds to live; -2 if the key is missing, -1 if it has no expiry."""
        return int(await self._run("ttl", self.client.ttl(key)))

    # Hashes
    async def hgetall(self, key: str) -> dict[str, str]:
        return dict(await self._run("hgetall", self.client.hgetall(key)))

    async def hset(self, key: str, mapping: Mapping[str, str]) -> None:
        if mapping:
            await self._run("hset", self.client.hset(key, mapping=dict(mapping)))

    # Sets
    async def sadd(self, key: str, *members: str) -> None:
        if members:
            await self._run("sadd", self.client.sadd(key, *members))

    async def srem(self, key: str, *members: str) -> None:
        if members:
            await self._run("srem", self.client.srem(key, *members))

    async def smembers(self, key: str) -> set[str]:
        return set(await self._run("smembers", self.client.smembers(key)))

    async def scard(self, key: str) -> int:
        return int(await self._run("scard", self.client.scard(key)))

    # Sorted sets
    async def zadd(self, key: str, member: str, score: float) -> None:
        await self._run("zadd", self.client.zadd(key, {member: score}))

    async def zrem(self, key: str, *members: str) -> None:
        if members:
            await self._run("zrem", self.client.zrem(key, *members))

    async def zrange(self, key: str, start: int, end: int, desc: bool = False) -> list[str]:
        """Members by rank. ``desc=True`` returns highest scores first."""
        return list(await self._run("zrange", self.client.zrange(key, start, end, desc=desc)))

    async def zrangebyscore(self, key: str, min_score: float, max_score: float) -> list[str]:
        return list(
            await self._run("zrangebyscore", self.client.zrangebyscore(key, min_score, max_score))
        )

    async def zremrangebyscore(self, key: str, min_score: float, max_score: float) -> int:
        return int(
            await self._run(
                "zremrangebyscore", self.client.zremrangebyscore(key, min_score, max_score)
            )
        )

    async def zcard(self, key: str) -> int:
        return int(await self._run("zcard", self.client.zcard(key)))


def drop_empty(mapping: Mapping[str, Any]) -> dict[str, str]:
    """Prepare a mapping for ``hset``: drop None values, stringify the rest."""
    return {k: str(v) for k, v in mapping.items() if v is not None}
