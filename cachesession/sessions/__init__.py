"""
CacheSession - Cookie-correlated sessions over a key/value cache.

Core exports:
- SessionStore: per-request session lifecycle
- SessionManager: app-scoped factory and request helpers
- SessionConfig: session settings
- ResponseCookieGateway / CookieOptions: cookie transport
- generate_token / versioned_key: session identity
- Session faults
"""

from .faults import (
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
from .core import (
    SEPARATOR,
    DEFAULT_COOKIE_NAME,
    generate_token,
    versioned_key,
)
from .transport import (
    CookieGateway,
    CookieOptions,
    CookieDirective,
    ResponseCookieGateway,
    prefix_cookie_name,
    cookie_expiry,
    parse_cookie_header,
)
from .policy import SessionConfig
from .store import SessionStore
from .engine import SessionManager

__all__ = [
    # Faults
    "SessionFault",
    "MissingDependencyFault",
    "NoSessionCookieFault",
    "NoSessionFoundFault",
    "SessionNotStartedFault",
    "RequestFailedFault",
    "PersistFailedFault",
    "InvalidKeyFault",
    "InvalidCookieNameFault",
    "hash_token",
    # Identity
    "SEPARATOR",
    "DEFAULT_COOKIE_NAME",
    "generate_token",
    "versioned_key",
    # Transport
    "CookieGateway",
    "CookieOptions",
    "CookieDirective",
    "ResponseCookieGateway",
    "prefix_cookie_name",
    "cookie_expiry",
    "parse_cookie_header",
    # Lifecycle
    "SessionConfig",
    "SessionStore",
    "SessionManager",
]
