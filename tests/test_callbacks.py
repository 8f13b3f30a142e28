"""
Callback normalization: normalize_response, wrap_completion, CallbackCacheAdapter.
"""

import asyncio
import threading

import pytest

from cachesession.cache import CallbackCacheAdapter, normalize_response, wrap_completion
from cachesession.sessions import PersistFailedFault, RequestFailedFault


class Recorder:
    def __init__(self):
        self.calls = []

    def __call__(self, error, response):
        self.calls.append((error, response))


# ============================================================================
# normalize_response
# ============================================================================

class TestNormalizeResponse:

    def test_exception(self):
        err = ValueError("bad")
        result = normalize_response(err, false_is_error=True)
        assert result.error is err

    def test_false_is_error(self):
        result = normalize_response(False, false_is_error=True)
        assert isinstance(result.error, RequestFailedFault)
        assert result.value is False

    def test_false_passes_when_allowed(self):
        result = normalize_response(False, false_is_error=False)
        assert result.ok
        assert result.value is False

    @pytest.mark.parametrize("value", [0, "", None, {}, []])
    def test_other_falsy_values_pass(self, value):
        result = normalize_response(value, false_is_error=True)
        assert result.ok
        assert result.value == value

    def test_fault_factory(self):
        result = normalize_response(False, True, PersistFailedFault, operation="set")
        assert isinstance(result.error, PersistFailedFault)
        assert result.error.operation == "set"


# ============================================================================
# wrap_completion
# ============================================================================

class TestWrapCompletion:

    def test_exception(self):
        fn = Recorder()
        err = RuntimeError("x")
        wrap_completion(fn, True)(err)
        assert fn.calls == [(err, None)]

    def test_false_as_error(self):
        fn = Recorder()
        wrap_completion(fn, True)(False)
        (error, response), = fn.calls
        assert isinstance(error, RequestFailedFault)
        assert error.message == "Cache request failed."
        assert response is False

    def test_false_as_value(self):
        fn = Recorder()
        wrap_completion(fn, False)(False)
        assert fn.calls == [(None, False)]

    def test_value(self):
        fn = Recorder()
        wrap_completion(fn, True)({"a": 1})
        assert fn.calls == [(None, {"a": 1})]

    def test_zero_is_not_an_error(self):
        fn = Recorder()
        wrap_completion(fn, True)(0)
        assert fn.calls == [(None, 0)]

    def test_no_argument(self):
        fn = Recorder()
        wrap_completion(fn, True)()
        assert fn.calls == [(None, None)]

    def test_missing_fn_is_noop(self):
        callback = wrap_completion(None, True)
        callback(False)
        callback(RuntimeError("ignored"))


# ============================================================================
# CallbackCacheAdapter
# ============================================================================

class TestCallbackCacheAdapter:

    @pytest.mark.asyncio
    async def test_get_value(self, callback_client):
        callback_client.responses["get"] = {"foo": "bar"}
        adapter = CallbackCacheAdapter(callback_client)
        result = await adapter.get("2::abc")
        assert result.hit
        assert result.value == {"foo": "bar"}
        assert callback_client.calls == [("get", "2::abc")]

    @pytest.mark.asyncio
    async def test_get_false_is_miss(self, callback_client):
        callback_client.responses["get"] = False
        result = await CallbackCacheAdapter(callback_client).get("k")
        assert result.ok
        assert result.value is None

    @pytest.mark.asyncio
    async def test_get_exception(self, callback_client):
        err = ConnectionError("down")
        callback_client.responses["get"] = err
        result = await CallbackCacheAdapter(callback_client).get("k")
        assert result.error is err

    @pytest.mark.asyncio
    async def test_set_false(self, callback_client):
        callback_client.responses["set"] = False
        result = await CallbackCacheAdapter(callback_client).set("k", {"a": 1}, 60)
        assert isinstance(result.error, PersistFailedFault)
        assert callback_client.calls == [("set", "k", {"a": 1}, 60)]

    @pytest.mark.asyncio
    async def test_set_ok(self, callback_client):
        callback_client.responses["set"] = True
        result = await CallbackCacheAdapter(callback_client).set("k", {}, 60)
        assert result.ok

    @pytest.mark.asyncio
    async def test_remove_false(self, callback_client):
        callback_client.responses["remove"] = False
        result = await CallbackCacheAdapter(callback_client).remove("k")
        assert isinstance(result.error, RequestFailedFault)
        assert not isinstance(result.error, PersistFailedFault)

    @pytest.mark.asyncio
    async def test_timeout(self, callback_client):
        callback_client.silent.add("get")
        result = await CallbackCacheAdapter(callback_client, timeout=0.01).get("k")
        assert isinstance(result.error, RequestFailedFault)
        assert "timed out" in result.error.message

    @pytest.mark.asyncio
    async def test_client_raises(self):
        class Broken:
            def get(self, key, cb):
                raise OSError("socket closed")

        result = await CallbackCacheAdapter(Broken()).get("k")
        assert isinstance(result.error, OSError)

    @pytest.mark.asyncio
    async def test_callback_from_thread(self):
        class Threaded:
            def get(self, key, cb):
                threading.Thread(target=cb, args=({"t": 1},)).start()

        result = await CallbackCacheAdapter(Threaded(), timeout=5).get("k")
        assert result.value == {"t": 1}

    @pytest.mark.asyncio
    async def test_late_callback_after_timeout(self):
        callbacks = []

        class Late:
            def get(self, key, cb):
                callbacks.append(cb)

        adapter = CallbackCacheAdapter(Late(), timeout=0.01)
        result = await adapter.get("k")
        assert result.failed
        callbacks[0]({"late": True})
        await asyncio.sleep(0)

    def test_name(self, callback_client):
        adapter = CallbackCacheAdapter(callback_client)
        assert adapter.name == "callback:CallbackClient"
        assert adapter.is_distributed is True
