"""
CacheSession Cache — Adapter implementations.
"""

from .memory import MemoryCacheAdapter
from .redis import RedisCacheAdapter

__all__ = ["MemoryCacheAdapter", "RedisCacheAdapter"]
