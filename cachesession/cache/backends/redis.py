"""
CacheSession Cache — Redis adapter for distributed session storage.

- Connection pool via redis.asyncio
- SETEX for TTL-bound session payloads
- Pluggable serializer (JSON by default)
- Errors are returned as failed results, never raised into the caller
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from ..core import CacheAdapter, CacheResult
from ..serializers import CacheSerializer, JsonCacheSerializer

logger = logging.getLogger("cachesession.cache.redis")


class RedisCacheAdapter(CacheAdapter):
    """
    Redis-backed cache adapter using redis-py's asyncio client.

    Example:
        >>> cache = RedisCacheAdapter("redis://localhost:6379/0", key_prefix="sess:")
        >>> await cache.initialize()
        >>> await cache.set("2::abc", {"foo": "bar"}, ttl=86400)
    """

    __slots__ = (
        "_url",
        "_max_connections",
        "_socket_timeout",
        "_connect_timeout",
        "_key_prefix",
        "_serializer",
        "_redis",
    )

    def __init__(
        self,
        url: str = "redis://localhost:6379/0",
        key_prefix: str = "",
        serializer: Optional[CacheSerializer] = None,
        max_connections: int = 10,
        socket_timeout: float = 5.0,
        connect_timeout: float = 5.0,
        client: Any = None,
    ):
        """
        Args:
            url: Redis connection URL
            key_prefix: Prefix applied to every key
            serializer: Payload serializer (JSON if omitted)
            max_connections: Pool size
            socket_timeout: Per-command socket timeout in seconds
            connect_timeout: Connection timeout in seconds
            client: Pre-built ``redis.asyncio.Redis`` client (skips ``initialize``)
        """
        self._url = url
        self._key_prefix = key_prefix
        self._serializer = serializer or JsonCacheSerializer()
        self._max_connections = max_connections
        self._socket_timeout = socket_timeout
        self._connect_timeout = connect_timeout
        self._redis = client

    @property
    def name(self) -> str:
        return "redis"

    @property
    def is_distributed(self) -> bool:
        return True

    async def initialize(self) -> None:
        """Connect to Redis and verify the connection."""
        if self._redis is not None:
            return

        import redis.asyncio as aioredis

        try:
            self._redis = aioredis.from_url(
                self._url,
                max_connections=self._max_connections,
                socket_timeout=self._socket_timeout,
                socket_connect_timeout=self._connect_timeout,
                decode_responses=False,  # We handle serialization
            )
            await self._redis.ping()
            logger.info(f"Redis session cache connected: {self._url}")
        except Exception as e:
            logger.error(f"Failed to connect to Redis: {e}")
            self._redis = None
            raise

    async def shutdown(self) -> None:
        """Close the Redis connection pool."""
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None

    def _full_key(self, key: str) -> str:
        return f"{self._key_prefix}{key}"

    def _not_connected(self) -> CacheResult:
        return CacheResult.failure(ConnectionError("Redis adapter is not initialized"))

    async def get(self, key: str) -> CacheResult:
        if self._redis is None:
            return self._not_connected()

        try:
            raw = await self._redis.get(self._full_key(key))
            if raw is None:
                return CacheResult.success(None)
            return CacheResult.success(self._serializer.deserialize(raw))
        except Exception as e:
            logger.warning(f"Redis GET error for key '{key}': {e}")
            return CacheResult.failure(e)

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> CacheResult:
        if value is False:
            return CacheResult.failure(
                ValueError("Refusing to store literal False: it reads back as a miss")
            )
        if self._redis is None:
            return self._not_connected()

        try:
            payload = self._serializer.serialize(value)
            if ttl and ttl > 0:
                acknowledged = await self._redis.setex(self._full_key(key), ttl, payload)
            else:
                acknowledged = await self._redis.set(self._full_key(key), payload)
        except Exception as e:
            logger.warning(f"Redis SET error for key '{key}': {e}")
            return CacheResult.failure(e)

        if not acknowledged:
            return CacheResult.failure(
                RuntimeError(f"Redis did not acknowledge SET for key '{key}'"),
                value=False,
            )
        return CacheResult.success(True)

    async def remove(self, key: str) -> CacheResult:
        if self._redis is None:
            return self._not_connected()

        try:
            removed = await self._redis.delete(self._full_key(key))
            return CacheResult.success(bool(removed))
        except Exception as e:
            logger.warning(f"Redis DELETE error for key '{key}': {e}")
            return CacheResult.failure(e)
