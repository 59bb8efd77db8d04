"""Cache adapters: a key → bytes store with expiry.

Values are opaque bytes produced by EntityCodec.  Adapters raise
CacheError on backend faults; CachedRepository logs and bypasses them,
so a dead cache degrades to store-only reads and never fails a request.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Protocol

import redis.asyncio as redis
from redis.asyncio import Redis

from marketstore.domain.errors import CacheError

from .settings import Settings, get_settings


class Cache(Protocol):
    async def get(self, key: str) -> bytes | None:
        """Return the cached bytes, or None on miss / expiry."""
        ...

    async def set(self, key: str, value: bytes, ttl: int) -> None:
        """Store value under key for ttl seconds."""
        ...

    async def delete(self, key: str) -> None:
        """Remove key.  A missing key is not an error."""
        ...


class RedisCache:
    """Cache backed by a pooled redis.asyncio client.

    The client must return raw bytes (decode_responses=False); cached
    values are codec output, not text.
    """

    def __init__(self, client: Redis) -> None:
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> RedisCache:
        settings = settings or get_settings()
        client = redis.from_url(
            settings.redis_url,
            decode_responses=False,
            retry_on_timeout=True,
            health_check_interval=30,
        )
        return cls(client)

    async def get(self, key: str) -> bytes | None:
        try:
            return await self._client.get(key)
        except redis.RedisError as exc:
            raise CacheError(f"GET {key} failed: {exc}") from exc

    async def set(self, key: str, value: bytes, ttl: int) -> None:
        try:
            await self._client.set(key, value, ex=ttl)
        except redis.RedisError as exc:
            raise CacheError(f"SET {key} failed: {exc}") from exc

    async def delete(self, key: str) -> None:
        try:
            await self._client.delete(key)
        except redis.RedisError as exc:
            raise CacheError(f"DEL {key} failed: {exc}") from exc

    async def close(self) -> None:
        await self._client.aclose()


class InMemoryCache:
    """Process-local cache for tests and single-process development.

    Setting fail = True makes every call raise CacheError, which lets
    tests exercise the cache-fault paths without a broken Redis.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[str, tuple[bytes, float]] = {}
        self.fail = False

    def _check(self, op: str, key: str) -> None:
        if self.fail:
            raise CacheError(f"{op} {key} failed: cache unavailable")

    async def get(self, key: str) -> bytes | None:
        self._check("GET", key)
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        return value

    async def set(self, key: str, value: bytes, ttl: int) -> None:
        self._check("SET", key)
        self._entries[key] = (value, self._clock() + ttl)

    async def delete(self, key: str) -> None:
        self._check("DEL", key)
        self._entries.pop(key, None)

    def __contains__(self, key: str) -> bool:
        entry = self._entries.get(key)
        return entry is not None and self._clock() < entry[1]
