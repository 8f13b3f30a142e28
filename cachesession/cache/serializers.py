"""
CacheSession Cache — Pluggable serializers for session payloads.

Used by adapters that talk to an out-of-process store. Supports JSON
(default), pickle (Python-only, trusted data) and msgpack (compact).
"""

from __future__ import annotations

import json
import logging
import pickle
from typing import Any, Protocol, runtime_checkable

logger = logging.getLogger("cachesession.cache.serializers")


@runtime_checkable
class CacheSerializer(Protocol):
    """Protocol for cache value serialization."""

    def serialize(self, value: Any) -> bytes:
        ...

    def deserialize(self, data: bytes) -> Any:
        ...


class JsonCacheSerializer:
    """
    JSON serializer — safe, human-readable, cross-language.

    Session payloads are plain mappings of primitives, so JSON covers the
    common case. Non-serializable values are rejected rather than coerced.
    """

    def serialize(self, value: Any) -> bytes:
        try:
            return json.dumps(value, ensure_ascii=False).encode("utf-8")
        except (TypeError, ValueError, OverflowError) as e:
            logger.warning(f"JSON serialization failed: {e}")
            raise

    def deserialize(self, data: bytes) -> Any:
        if isinstance(data, str):
            data = data.encode("utf-8")
        try:
            return json.loads(data.decode("utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning(f"JSON deserialization failed: {e}")
            raise


class PickleCacheSerializer:
    """
    Pickle serializer — supports arbitrary Python objects.

    WARNING: Only use with trusted data. Pickle can execute
    arbitrary code during deserialization.
    """

    def serialize(self, value: Any) -> bytes:
        try:
            return pickle.dumps(value, protocol=pickle.HIGHEST_PROTOCOL)
        except (pickle.PicklingError, TypeError, AttributeError) as e:
            logger.warning(f"Pickle serialization failed: {e}")
            raise

    def deserialize(self, data: bytes) -> Any:
        try:
            return pickle.loads(data)
        except (pickle.UnpicklingError, EOFError) as e:
            logger.warning(f"Pickle deserialization failed: {e}")
            raise


class MsgpackCacheSerializer:
    """
    MessagePack serializer — compact binary, cross-language.

    Requires the optional `msgpack` package: pip install cachesession[msgpack]
    """

    def __init__(self):
        try:
            import msgpack
        except ImportError:
            raise ImportError(
                "MsgpackCacheSerializer requires 'msgpack' package. "
                "Install with: pip install msgpack"
            )
        self._msgpack = msgpack

    def serialize(self, value: Any) -> bytes:
        try:
            return self._msgpack.packb(value, use_bin_type=True)
        except (TypeError, ValueError) as e:
            logger.warning(f"Msgpack serialization failed: {e}")
            raise

    def deserialize(self, data: bytes) -> Any:
        try:
            return self._msgpack.unpackb(data, raw=False)
        except (ValueError, self._msgpack.ExtraData) as e:
            logger.warning(f"Msgpack deserialization failed: {e}")
            raise


def get_serializer(name: str = "json") -> CacheSerializer:
    """
    Factory for serializer instances.

    Args:
        name: "json", "pickle", or "msgpack"
    """
    serializers = {
        "json": JsonCacheSerializer,
        "pickle": PickleCacheSerializer,
        "msgpack": MsgpackCacheSerializer,
    }

    cls = serializers.get(name)
    if cls is None:
        raise ValueError(f"Unknown serializer: {name}. Options: {list(serializers.keys())}")

    return cls()
