"""
CacheSession Cache — Core types and adapter contract.

The adapter boundary returns an explicit two-channel result instead of
overloading one value as error, failure flag and payload.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional


# ============================================================================
# Cache Result
# ============================================================================

@dataclass(frozen=True, slots=True)
class CacheResult:
    """
    Outcome of a single cache operation.

    Exactly one channel is meaningful: ``error`` when the operation failed,
    otherwise ``value`` (which may itself be ``None`` for a miss).
    """
    error: Optional[Exception] = None
    value: Any = None

    @classmethod
    def success(cls, value: Any = None) -> CacheResult:
        return cls(error=None, value=value)

    @classmethod
    def failure(cls, error: Exception, value: Any = None) -> CacheResult:
        return cls(error=error, value=value)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def failed(self) -> bool:
        return self.error is not None

    @property
    def hit(self) -> bool:
        """
        True when a lookup produced a stored value.

        ``None`` and a literal ``False`` both mean "absent"; every other
        value, including an empty mapping, is a hit.
        """
        return self.ok and self.value is not None and self.value is not False

    def __repr__(self) -> str:
        if self.error is not None:
            return f"<CacheResult error={self.error!r}>"
        return f"<CacheResult value={self.value!r}>"


# ============================================================================
# Cache Adapter Protocol
# ============================================================================

class CacheAdapter(ABC):
    """
    Abstract cache adapter — the key/value contract sessions rely on.

    Adapters never raise for I/O problems: failures come back as
    ``CacheResult.failure(...)``. Adapters must never store a literal
    ``False`` as a payload since lookups treat it as a miss.
    """

    async def initialize(self) -> None:
        """Initialize adapter resources (connection pools, etc.)."""

    async def shutdown(self) -> None:
        """Clean up adapter resources."""

    @abstractmethod
    async def get(self, key: str) -> CacheResult:
        """Retrieve the value stored at ``key``; a miss is a successful ``None``."""
        ...

    @abstractmethod
    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> CacheResult:
        """
        Store ``value`` at ``key``.

        Args:
            key: Cache key
            value: Serializable value
            ttl: Time-to-live in seconds (None = no expiry)
        """
        ...

    @abstractmethod
    async def remove(self, key: str) -> CacheResult:
        """Delete ``key``. The result value tells whether anything was removed."""
        ...

    @property
    @abstractmethod
    def name(self) -> str:
        """Adapter name for diagnostics."""
        ...

    @property
    def is_distributed(self) -> bool:
        """Whether this adapter is shared across processes."""
        return False
