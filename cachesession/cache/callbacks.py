"""
CacheSession Cache — Callback normalization for legacy cache clients.

Some cache clients (memcached wrappers in particular) report through a
single callback argument that is either an ``Exception``, a literal
``False`` meaning "the request failed", or the actual payload. This module
turns that convention into the explicit ``(error, value)`` contract and
bridges such clients onto the async ``CacheAdapter`` boundary.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Optional

from .core import CacheAdapter, CacheResult
from cachesession.sessions.faults import PersistFailedFault, RequestFailedFault

logger = logging.getLogger("cachesession.cache.callbacks")

Completion = Callable[[Optional[Exception], Any], None]
FaultFactory = Callable[..., Exception]


def _noop(error: Optional[Exception], response: Any) -> None:
    pass


def normalize_response(
    response: Any,
    false_is_error: bool,
    fault_factory: FaultFactory = RequestFailedFault,
    operation: str = "request",
) -> CacheResult:
    """
    Map a single-argument cache response onto a ``CacheResult``.

    Only an ``Exception`` instance or, when ``false_is_error`` is set, the
    exact value ``False`` count as failures. ``0``, ``""``, ``None`` and
    empty mappings pass through untouched.
    """
    if isinstance(response, Exception):
        return CacheResult.failure(response)
    if false_is_error and response is False:
        return CacheResult.failure(fault_factory(operation=operation), value=False)
    return CacheResult.success(response)


def wrap_completion(
    fn: Optional[Completion],
    false_is_error: bool,
    fault_factory: FaultFactory = RequestFailedFault,
    operation: str = "request",
) -> Callable[[Any], None]:
    """
    Wrap a two-argument completion handler as a single-argument callback.

    The returned callable accepts the raw cache response (or nothing) and
    calls ``fn(error, result)``. A missing ``fn`` becomes a no-op so call
    sites never need a None check.
    """
    if fn is None:
        fn = _noop

    def callback(response: Any = None) -> None:
        result = normalize_response(response, false_is_error, fault_factory, operation)
        if result.failed and result.value is not False:
            fn(result.error, None)
        else:
            fn(result.error, result.value)

    return callback


class CallbackCacheAdapter(CacheAdapter):
    """
    Async adapter over a callback-style cache client.

    The wrapped client must expose::

        get(key, cb)              -> cb(value | False)
        set(key, value, ttl, cb)  -> cb(response)   # False = failure
        remove(key, cb)           -> cb(response)   # False = failure

    Callbacks may fire synchronously or later from any thread. A timeout
    surfaces as ``RequestFailedFault``; nothing is retried.
    """

    def __init__(self, client: Any, timeout: Optional[float] = None):
        self._client = client
        self._timeout = timeout

    @property
    def name(self) -> str:
        return f"callback:{type(self._client).__name__}"

    @property
    def is_distributed(self) -> bool:
        return True

    async def get(self, key: str) -> CacheResult:
        result = await self._call("get", False, RequestFailedFault, key)
        if result.ok and result.value is False:
            return CacheResult.success(None)
        return result

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> CacheResult:
        return await self._call("set", True, PersistFailedFault, key, value, ttl)

    async def remove(self, key: str) -> CacheResult:
        return await self._call("remove", True, RequestFailedFault, key)

    async def _call(
        self,
        operation: str,
        false_is_error: bool,
        fault_factory: FaultFactory,
        *args: Any,
    ) -> CacheResult:
        loop = asyncio.get_running_loop()
        future: asyncio.Future = loop.create_future()

        def deliver(error: Optional[Exception], response: Any) -> None:
            if not future.done():
                future.set_result(
                    CacheResult.failure(error, response) if error is not None
                    else CacheResult.success(response)
                )

        completion = wrap_completion(deliver, false_is_error, fault_factory, operation)

        def callback(*response: Any) -> None:
            # Clients may call back from another thread
            loop.call_soon_threadsafe(completion, *response[:1])

        try:
            getattr(self._client, operation)(*args, callback)
        except Exception as e:
            logger.warning(f"Cache client {operation.upper()} raised: {e}")
            return CacheResult.failure(e)

        try:
            return await asyncio.wait_for(future, timeout=self._timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Cache client {operation.upper()} timed out after {self._timeout}s")
            return CacheResult.failure(
                fault_factory(
                    operation=operation,
                    message=f"Cache {operation} timed out after {self._timeout}s",
                )
            )
