"""
CacheSession Cache — In-memory adapter.

Single-process store for development and tests:
- OrderedDict with O(1) LRU eviction at capacity
- Lazy TTL expiry on the monotonic clock
- Deep copies on write and read so no caller shares the stored mapping

Not distributed: sessions live and die with the process.
"""

from __future__ import annotations

import asyncio
import copy
import logging
import time
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from ..core import CacheAdapter, CacheResult

logger = logging.getLogger("cachesession.cache.memory")


@dataclass(slots=True)
class _Entry:
    value: Any
    expires_at: Optional[float] = None
    created_at: float = field(default_factory=time.monotonic)

    def is_expired(self, now: float) -> bool:
        return self.expires_at is not None and now >= self.expires_at


class MemoryCacheAdapter(CacheAdapter):
    """
    In-memory cache adapter with TTL and LRU eviction.

    Example:
        >>> cache = MemoryCacheAdapter(max_size=1000)
        >>> await cache.set("2::abc", {"foo": "bar"}, ttl=60)
        >>> (await cache.get("2::abc")).value
        {'foo': 'bar'}
    """

    __slots__ = ("_max_size", "_store", "_lock", "_clock", "_evictions")

    def __init__(
        self,
        max_size: int = 10000,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            max_size: Maximum number of entries before LRU eviction
            clock: Monotonic time source (seconds)
        """
        if max_size <= 0:
            raise ValueError("max_size must be positive")
        self._max_size = max_size
        self._store: OrderedDict[str, _Entry] = OrderedDict()
        self._lock = asyncio.Lock()
        self._clock = clock
        self._evictions = 0

    @property
    def name(self) -> str:
        return "memory"

    @property
    def size(self) -> int:
        return len(self._store)

    @property
    def evictions(self) -> int:
        return self._evictions

    async def get(self, key: str) -> CacheResult:
        async with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return CacheResult.success(None)

            if entry.is_expired(self._clock()):
                del self._store[key]
                return CacheResult.success(None)

            self._store.move_to_end(key)
            return CacheResult.success(copy.deepcopy(entry.value))

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> CacheResult:
        if value is False:
            return CacheResult.failure(
                ValueError("Refusing to store literal False: it reads back as a miss")
            )

        try:
            stored = copy.deepcopy(value)
        except Exception as e:
            logger.warning(f"Memory SET copy failed for key '{key}': {e}")
            return CacheResult.failure(e)

        async with self._lock:
            now = self._clock()
            expires_at = now + ttl if ttl and ttl > 0 else None

            if key in self._store:
                self._store.move_to_end(key)
            elif len(self._store) >= self._max_size:
                self._evict_one(now)

            self._store[key] = _Entry(value=stored, expires_at=expires_at, created_at=now)
            return CacheResult.success(True)

    async def remove(self, key: str) -> CacheResult:
        async with self._lock:
            existed = self._store.pop(key, None) is not None
            return CacheResult.success(existed)

    async def shutdown(self) -> None:
        async with self._lock:
            self._store.clear()

    def _evict_one(self, now: float) -> None:
        """Drop an expired entry if one exists, otherwise the least recently used."""
        for key, entry in self._store.items():
            if entry.is_expired(now):
                del self._store[key]
                break
        else:
            key, _ = self._store.popitem(last=False)
            logger.debug(f"Evicted LRU entry '{key}'")
        self._evictions += 1
