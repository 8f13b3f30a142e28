"""
Faults: base Fault behavior and the session fault taxonomy.
"""

import re

import pytest

from cachesession.faults import ConfigFault, Fault, FaultDomain, Severity
from cachesession.sessions import (
    SessionFault,
    MissingDependencyFault,
    NoSessionCookieFault,
    NoSessionFoundFault,
    SessionNotStartedFault,
    RequestFailedFault,
    PersistFailedFault,
    InvalidKeyFault,
    InvalidCookieNameFault,
    hash_token,
)


class TestFault:

    def test_explicit_fields(self):
        fault = Fault(code="X", message="boom", domain=FaultDomain.IO)
        assert str(fault) == "[X] boom"
        assert fault.severity == Severity.WARN
        assert fault.retryable is True
        assert fault.public is False

    def test_missing_fields(self):
        with pytest.raises(TypeError):
            Fault(code="X")

    def test_argument_beats_class_attribute(self):
        fault = SessionNotStartedFault(severity=Severity.INFO)
        assert fault.severity == Severity.INFO

    def test_to_dict_stringifies_cause(self):
        fault = RequestFailedFault(operation="get", cause=ConnectionError("down"))
        d = fault.to_dict()
        assert d["code"] == "SESSION_REQUEST_FAILED"
        assert d["domain"] == "session"
        assert d["metadata"]["cause"] == "down"
        assert d["retryable"] is True

    def test_repr(self):
        assert "SessionNotStartedFault" in repr(SessionNotStartedFault())

    def test_domain_equality(self):
        assert FaultDomain.SESSION == "session"
        assert FaultDomain("session") == FaultDomain.SESSION


class TestSessionFaults:

    @pytest.mark.parametrize("fault, code", [
        (MissingDependencyFault("cache"), "SESSION_MISSING_DEPENDENCY"),
        (NoSessionCookieFault("session"), "SESSION_NO_COOKIE"),
        (NoSessionFoundFault("abc"), "SESSION_NOT_FOUND"),
        (SessionNotStartedFault(), "SESSION_NOT_STARTED"),
        (RequestFailedFault(), "SESSION_REQUEST_FAILED"),
        (PersistFailedFault(), "SESSION_PERSIST_FAILED"),
        (InvalidKeyFault(1), "SESSION_INVALID_KEY"),
        (InvalidCookieNameFault("a b"), "SESSION_INVALID_COOKIE_NAME"),
    ])
    def test_codes(self, fault, code):
        assert isinstance(fault, SessionFault)
        assert fault.code == code
        assert fault.domain == FaultDomain.SESSION

    def test_missing_dependency_is_fatal(self):
        assert MissingDependencyFault("cache").severity == Severity.FATAL

    def test_legacy_messages(self):
        assert NoSessionCookieFault().message == "No session cookie found."
        assert NoSessionFoundFault().message == "No session found."

    def test_not_found_hides_token(self):
        fault = NoSessionFoundFault("secret-token")
        assert "secret-token" not in str(fault.to_dict())
        assert fault.token_hash == hash_token("secret-token")

    def test_request_failed_with_cause(self):
        cause = TimeoutError("slow")
        fault = RequestFailedFault(operation="remove", cause=cause)
        assert fault.cause is cause
        assert fault.message == "Cache remove failed: slow"
        assert fault.operation == "remove"

    def test_persist_failed_is_request_failed(self):
        fault = PersistFailedFault()
        assert isinstance(fault, RequestFailedFault)
        assert fault.operation == "set"
        assert fault.message == "Session could not be persisted."

    def test_custom_message(self):
        assert RequestFailedFault(message="custom").message == "custom"

    def test_invalid_key_metadata(self):
        assert InvalidKeyFault(3).metadata["key_type"] == "int"


class TestHashToken:

    def test_format(self):
        assert re.fullmatch(r"sha256:[0-9a-f]{16}", hash_token("abc"))

    def test_stable(self):
        assert hash_token("abc") == hash_token("abc")
        assert hash_token("abc") != hash_token("abd")


class TestConfigFault:

    def test_config_fault(self):
        fault = ConfigFault("ttl must be positive")
        assert fault.code == "CONFIG_INVALID"
        assert fault.severity == Severity.FATAL
        assert fault.domain == FaultDomain.CONFIG
        assert "ttl must be positive" in fault.message
        assert not isinstance(fault, SessionFault)
