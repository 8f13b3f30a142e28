"""
CacheSession Cache — key/value boundary for session persistence.

Every adapter returns a ``CacheResult`` carrying either an error or a
value, so the session layer never has to guess what a response means.

Adapters:
- MemoryCacheAdapter: in-process (dev/testing)
- RedisCacheAdapter: distributed (production)
- CallbackCacheAdapter: bridge for single-callback cache clients
"""

from .core import CacheAdapter, CacheResult
from .serializers import (
    CacheSerializer,
    JsonCacheSerializer,
    PickleCacheSerializer,
    MsgpackCacheSerializer,
    get_serializer,
)
from .backends import MemoryCacheAdapter, RedisCacheAdapter
from .callbacks import CallbackCacheAdapter, normalize_response, wrap_completion

__all__ = [
    "CacheAdapter",
    "CacheResult",
    "CacheSerializer",
    "JsonCacheSerializer",
    "PickleCacheSerializer",
    "MsgpackCacheSerializer",
    "get_serializer",
    "MemoryCacheAdapter",
    "RedisCacheAdapter",
    "CallbackCacheAdapter",
    "normalize_response",
    "wrap_completion",
]
