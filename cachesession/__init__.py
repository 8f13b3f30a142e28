"""
CacheSession - Server-side sessions over a key/value cache.

Complete integration of:
- Sessions: cookie-correlated, versioned, dirty-tracked session lifecycle
- Cache: adapter boundary with memory, Redis and callback-client adapters
- Faults: structured error handling with fault domains
- Config: layered file/.env/environment configuration
"""

__version__ = "0.1.0"

from .faults import Fault, FaultDomain, Severity, ConfigFault
from .sessions import (
    SessionStore,
    SessionManager,
    SessionConfig,
    CookieGateway,
    CookieOptions,
    CookieDirective,
    ResponseCookieGateway,
    parse_cookie_header,
    prefix_cookie_name,
    generate_token,
    versioned_key,
    SessionFault,
    MissingDependencyFault,
    NoSessionCookieFault,
    NoSessionFoundFault,
    SessionNotStartedFault,
    RequestFailedFault,
    PersistFailedFault,
    InvalidKeyFault,
    InvalidCookieNameFault,
)
from .cache import (
    CacheAdapter,
    CacheResult,
    MemoryCacheAdapter,
    RedisCacheAdapter,
    CallbackCacheAdapter,
    normalize_response,
    wrap_completion,
)
from .config import ConfigLoader

__all__ = [
    "__version__",
    # Faults
    "Fault",
    "FaultDomain",
    "Severity",
    "ConfigFault",
    "SessionFault",
    "MissingDependencyFault",
    "NoSessionCookieFault",
    "NoSessionFoundFault",
    "SessionNotStartedFault",
    "RequestFailedFault",
    "PersistFailedFault",
    "InvalidKeyFault",
    "InvalidCookieNameFault",
    # Sessions
    "SessionStore",
    "SessionManager",
    "SessionConfig",
    "CookieGateway",
    "CookieOptions",
    "CookieDirective",
    "ResponseCookieGateway",
    "parse_cookie_header",
    "prefix_cookie_name",
    "generate_token",
    "versioned_key",
    # Cache
    "CacheAdapter",
    "CacheResult",
    "MemoryCacheAdapter",
    "RedisCacheAdapter",
    "CallbackCacheAdapter",
    "normalize_response",
    "wrap_completion",
    # Config
    "ConfigLoader",
]
