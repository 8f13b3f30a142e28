"""
Shared test fixtures and helpers for the CacheSession test suite.
"""

import copy
from typing import Any, Dict, List, Optional

import pytest

from cachesession.cache import CacheAdapter, CacheResult, MemoryCacheAdapter
from cachesession.sessions import ResponseCookieGateway


# ============================================================================
# Fakes
# ============================================================================


class RecordingCache(CacheAdapter):
    """
    In-memory adapter that records every call.

    ``failures`` maps an operation name to the exception (or full
    CacheResult) that operation should fail with.
    """

    def __init__(self, data: Optional[Dict[str, Any]] = None):
        self.data: Dict[str, Any] = dict(data or {})
        self.calls: List[tuple] = []
        self.failures: Dict[str, Any] = {}

    @property
    def name(self) -> str:
        return "recording"

    def ops(self, operation: str) -> List[tuple]:
        return [call for call in self.calls if call[0] == operation]

    def _failure(self, operation: str) -> Optional[CacheResult]:
        failure = self.failures.get(operation)
        if failure is None:
            return None
        if isinstance(failure, CacheResult):
            return failure
        return CacheResult.failure(failure)

    async def get(self, key: str) -> CacheResult:
        self.calls.append(("get", key))
        return self._failure("get") or CacheResult.success(copy.deepcopy(self.data.get(key)))

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> CacheResult:
        self.calls.append(("set", key, copy.deepcopy(value), ttl))
        failure = self._failure("set")
        if failure is not None:
            return failure
        self.data[key] = copy.deepcopy(value)
        return CacheResult.success(True)

    async def remove(self, key: str) -> CacheResult:
        self.calls.append(("remove", key))
        failure = self._failure("remove")
        if failure is not None:
            return failure
        return CacheResult.success(self.data.pop(key, None) is not None)


class RecordingGateway:
    """Cookie gateway that only records what it was asked to do."""

    def __init__(self):
        self.sets: List[tuple] = []
        self.removes: List[str] = []

    def set_cookie(self, name: str, value: str, ttl_seconds: int) -> None:
        self.sets.append((name, value, ttl_seconds))

    def remove_cookie(self, name: str) -> None:
        self.removes.append(name)


class CallbackClient:
    """
    Callback-style cache client.

    Responds synchronously with whatever ``responses[operation]`` holds;
    an operation listed in ``silent`` never calls back.
    """

    def __init__(self, responses: Optional[Dict[str, Any]] = None):
        self.responses: Dict[str, Any] = dict(responses or {})
        self.silent: set = set()
        self.calls: List[tuple] = []

    def _respond(self, operation: str, cb) -> None:
        if operation in self.silent:
            return
        cb(self.responses.get(operation))

    def get(self, key, cb):
        self.calls.append(("get", key))
        self._respond("get", cb)

    def set(self, key, value, ttl, cb):
        self.calls.append(("set", key, value, ttl))
        self._respond("set", cb)

    def remove(self, key, cb):
        self.calls.append(("remove", key))
        self._respond("remove", cb)


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def cache():
    return RecordingCache()


@pytest.fixture
def gateway():
    return RecordingGateway()


@pytest.fixture
def response_gateway():
    return ResponseCookieGateway()


@pytest.fixture
def memory_cache():
    return MemoryCacheAdapter(max_size=100)


@pytest.fixture
def callback_client():
    return CallbackClient()

