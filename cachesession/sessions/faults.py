"""
CacheSession - Session fault definitions.

All session errors are structured Faults, not bare exceptions.
I/O faults (persist/request failures) leave the store in a consistent
state; the caller decides whether to retry.
"""

from __future__ import annotations

import hashlib

from cachesession.faults.core import Fault, Severity, FaultDomain


def hash_token(token: str) -> str:
    """Hash a session token for logging and fault metadata (privacy)."""
    return f"sha256:{hashlib.sha256(token.encode()).hexdigest()[:16]}"


# ============================================================================
# Session Fault Base
# ============================================================================

class SessionFault(Fault):
    """Base class for session-related faults."""

    domain = FaultDomain.SESSION


# ============================================================================
# Construction Faults
# ============================================================================

class MissingDependencyFault(SessionFault):
    """
    A required collaborator was not supplied.

    Raised at construction time. Not recoverable: fix the wiring.
    """

    code = "SESSION_MISSING_DEPENDENCY"
    message = "Missing required dependency"
    severity = Severity.FATAL
    public = False
    retryable = False

    def __init__(self, dependency: str, **kwargs):
        super().__init__(
            message=f"Missing required dependency: {dependency}",
            metadata={"dependency": dependency},
            **kwargs,
        )
        self.dependency = dependency


# ============================================================================
# Resolution Faults
# ============================================================================

class NoSessionCookieFault(SessionFault):
    """Start was called without create and the request carries no session cookie."""

    code = "SESSION_NO_COOKIE"
    message = "No session cookie found."
    severity = Severity.WARN
    public = True
    retryable = False

    def __init__(self, cookie_name: str | None = None, **kwargs):
        super().__init__(metadata={"cookie_name": cookie_name}, **kwargs)
        self.cookie_name = cookie_name


class NoSessionFoundFault(SessionFault):
    """
    The session cookie resolved to nothing in the cache.

    Session may have expired, been destroyed, or belong to an older version.
    """

    code = "SESSION_NOT_FOUND"
    message = "No session found."
    severity = Severity.WARN
    public = True
    retryable = False

    def __init__(self, token: str | None = None, **kwargs):
        self.token_hash = hash_token(token) if token else None
        super().__init__(metadata={"token_hash": self.token_hash}, **kwargs)


class SessionNotStartedFault(SessionFault):
    """Persistence was requested before the session was started or created."""

    code = "SESSION_NOT_STARTED"
    message = "Session has not been started."
    severity = Severity.ERROR
    public = False
    retryable = False


# ============================================================================
# Cache I/O Faults
# ============================================================================

class RequestFailedFault(SessionFault):
    """
    A cache operation failed.

    Transient by nature; the core never retries on its own.
    """

    code = "SESSION_REQUEST_FAILED"
    message = "Cache request failed."
    severity = Severity.ERROR
    public = False
    retryable = True

    def __init__(
        self,
        operation: str = "request",
        cause: Exception | None = None,
        **kwargs,
    ):
        metadata = {"operation": operation}
        if cause is not None:
            metadata["cause"] = cause
        message = kwargs.pop("message", None)
        if message is None and cause is not None:
            message = f"Cache {operation} failed: {cause}"
        super().__init__(message=message, metadata=metadata, **kwargs)
        self.operation = operation


class PersistFailedFault(RequestFailedFault):
    """
    The cache did not acknowledge a session write.

    The session stays dirty so a later save can try again.
    """

    code = "SESSION_PERSIST_FAILED"
    message = "Session could not be persisted."

    def __init__(self, operation: str = "set", cause: Exception | None = None, **kwargs):
        super().__init__(operation=operation, cause=cause, **kwargs)


# ============================================================================
# Validation Faults
# ============================================================================

class InvalidKeyFault(SessionFault):
    """Session data keys must be strings."""

    code = "SESSION_INVALID_KEY"
    message = "Invalid session key"
    severity = Severity.ERROR
    public = False
    retryable = False

    def __init__(self, key: object, **kwargs):
        super().__init__(
            message=f"Invalid session key {key!r}: keys must be str",
            metadata={"key_type": type(key).__name__},
            **kwargs,
        )


class InvalidCookieNameFault(SessionFault):
    """Cookie name or prefix contains characters not allowed in a cookie name."""

    code = "SESSION_INVALID_COOKIE_NAME"
    message = "Invalid cookie name"
    severity = Severity.ERROR
    public = False
    retryable = False

    def __init__(self, name: str, **kwargs):
        super().__init__(
            message=f"Invalid cookie name: {name!r}",
            metadata={"name": name},
            **kwargs,
        )
        self.name = name
