"""
CacheSession - Session store.

SessionStore is the per-request lifecycle object:
1. Start - resolve the inbound cookie against the cache, or create
2. Mutate - handler reads/writes session data, tracked as dirty
3. End - persist if dirty
4. Destroy - clear data, drop the cookie, remove the cache entry

Awaited operations either return or raise a SessionFault. One store per
in-flight request; stores hold no locks and share no state.
"""

from __future__ import annotations

import copy
import logging
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Callable, Mapping, Optional

from .core import generate_token, versioned_key
from .faults import (
    SessionFault,
    MissingDependencyFault,
    NoSessionCookieFault,
    NoSessionFoundFault,
    SessionNotStartedFault,
    RequestFailedFault,
    PersistFailedFault,
    InvalidKeyFault,
    hash_token,
)
from .policy import SessionConfig

if TYPE_CHECKING:
    from cachesession.cache import CacheAdapter, CacheResult
    from .transport import CookieGateway


logger = logging.getLogger("cachesession.sessions")

SessionListener = Callable[[str, "SessionStore"], None]


class SessionStore:
    """
    Cookie-correlated session backed by a key/value cache.

    Example:
        >>> store = SessionStore(cache, gateway, cookie_prefix="app")
        >>> await store.start(request_cookies, create=True)
        >>> await store.set("user_id", 42)
        >>> await store.end()
    """

    def __init__(
        self,
        cache: CacheAdapter,
        cookies: CookieGateway,
        config: SessionConfig | None = None,
        *,
        listener: Optional[SessionListener] = None,
        **overrides: Any,
    ):
        """
        Args:
            cache: Cache adapter the session persists to
            cookies: Gateway that receives cookie set/remove directives
            config: Session settings (defaults if omitted)
            listener: Called as ``listener(event, store)`` on lifecycle events
            **overrides: Per-store config overrides (e.g. ``auto_save=True``)

        Raises:
            MissingDependencyFault: cache or cookies not supplied
            ConfigFault: overrides produce an invalid config
        """
        if cache is None:
            raise MissingDependencyFault("cache")
        if cookies is None:
            raise MissingDependencyFault("cookies")

        config = (config or SessionConfig()).validate()
        if overrides:
            config = config.with_overrides(**overrides)

        self._cache = cache
        self._cookies = cookies
        self._config = config
        self._cookie_name = config.effective_cookie_name
        self._listener = listener

        self._token: str | None = None
        self._key: str | None = None
        self._data: dict[str, Any] = {}
        self._dirty = False
        self._is_new = False

    # ========================================================================
    # Properties
    # ========================================================================

    @property
    def token(self) -> str | None:
        """Cookie-visible session token (None until started)."""
        return self._token

    @property
    def versioned_key(self) -> str | None:
        """Cache key, ``version::token`` (None until started)."""
        return self._key

    @property
    def dirty(self) -> bool:
        return self._dirty

    @property
    def data(self) -> Mapping[str, Any]:
        """Read-only view of the session data."""
        return MappingProxyType(self._data)

    @property
    def cookies(self) -> CookieGateway:
        """Gateway receiving this session's cookie directives."""
        return self._cookies

    @property
    def cookie_name(self) -> str:
        return self._cookie_name

    @property
    def ttl_seconds(self) -> int:
        return self._config.session_ttl

    @property
    def version(self) -> int:
        return self._config.version

    @property
    def auto_save(self) -> bool:
        return self._config.auto_save

    @property
    def config(self) -> SessionConfig:
        return self._config

    @property
    def is_new(self) -> bool:
        """True when this store created its session rather than loading one."""
        return self._is_new

    @property
    def started(self) -> bool:
        return self._token is not None

    # ========================================================================
    # Lifecycle
    # ========================================================================

    async def start(self, inbound: Mapping[str, str] | None, create: bool = False) -> SessionStore:
        """
        Resolve the session referenced by the inbound cookies.

        Args:
            inbound: Parsed request cookies
            create: Create a new session when none resolves

        Returns:
            self

        Raises:
            NoSessionCookieFault: No cookie and ``create`` is False
            NoSessionFoundFault: Cookie resolved to nothing and ``create`` is False
            RequestFailedFault: The cache lookup failed
        """
        token = (inbound or {}).get(self._cookie_name)

        if not token:
            if not create:
                logger.debug(f"No session cookie '{self._cookie_name}' on request")
                raise NoSessionCookieFault(self._cookie_name)
            return await self.create()

        key = versioned_key(self._config.version, token)
        result = await self._cache.get(key)

        if result.failed:
            logger.warning(f"Session load failed for {hash_token(token)}: {result.error}")
            raise self._as_fault(result, RequestFailedFault, "get")

        if not result.hit:
            if not create:
                logger.debug(f"Session {hash_token(token)} not found in cache")
                raise NoSessionFoundFault(token)
            return await self.create()

        if not isinstance(result.value, Mapping):
            raise RequestFailedFault(
                operation="get",
                message=f"Cache returned a {type(result.value).__name__} for a session payload",
            )

        self._token = token
        self._key = key
        self._data = copy.deepcopy(dict(result.value))
        self._dirty = False
        self._is_new = False

        logger.debug(f"Session loaded: {hash_token(token)}")
        self._notify("session_loaded")
        return self

    async def create(self) -> SessionStore:
        """
        Start a brand new session.

        Issues a fresh token and asks the gateway to set the cookie to it.
        Existing data is kept and marked dirty. With ``auto_save`` the
        session is persisted before returning.

        Raises:
            PersistFailedFault: auto_save is on and the write failed
        """
        self._token = generate_token()
        self._key = versioned_key(self._config.version, self._token)
        self._cookies.set_cookie(self._cookie_name, self._token, self._config.session_ttl)
        self._dirty = True
        self._is_new = True

        logger.debug(f"Session created: {hash_token(self._token)}")
        self._notify("session_created")

        if self._config.auto_save:
            await self.save()
        return self

    async def save(self, force: bool = False) -> None:
        """
        Persist the session data under the versioned key.

        Args:
            force: Write even when nothing changed

        Raises:
            SessionNotStartedFault: No token yet
            PersistFailedFault: The cache did not acknowledge the write;
                the session stays dirty
        """
        if self._key is None:
            raise SessionNotStartedFault()

        if not self._dirty and not force:
            return

        result = await self._cache.set(self._key, dict(self._data), self._config.session_ttl)
        if result.failed:
            logger.warning(f"Session persist failed for {hash_token(self._token)}: {result.error}")
            raise self._as_fault(result, PersistFailedFault, "set")

        self._dirty = False
        logger.debug(f"Session saved: {hash_token(self._token)}")

    async def end(self) -> None:
        """Finish this request's use of the session, persisting only if dirty."""
        if self._dirty:
            await self.save()
        self._notify("session_ended")

    async def destroy(self) -> None:
        """
        Destroy the session.

        Data and cookie are cleared before the cache removal is attempted,
        so both are gone even when the removal fails.

        Raises:
            RequestFailedFault: The cache removal failed
        """
        self._data = {}
        self._cookies.remove_cookie(self._cookie_name)
        self._notify("session_destroyed")

        if self._key is None:
            self._dirty = False
            return

        result = await self._cache.remove(self._key)
        if result.failed:
            logger.warning(f"Session removal failed for {hash_token(self._token)}: {result.error}")
            raise self._as_fault(result, RequestFailedFault, "remove")

        self._dirty = False
        logger.debug(f"Session destroyed: {hash_token(self._token)}")

    # ========================================================================
    # Data Access
    # ========================================================================

    def get(self, key: str, default: Any = None) -> Any:
        """Value stored at ``key``, or ``default`` when absent."""
        return self._data.get(key, default)

    def has(self, key: str) -> bool:
        return key in self._data

    async def set(self, key: str, value: Any, save: bool = False) -> None:
        """
        Store ``value`` at ``key`` and mark the session dirty.

        Args:
            key: Data key (must be str)
            value: Serializable value
            save: Persist now even when auto_save is off

        Raises:
            InvalidKeyFault: key is not a string
            PersistFailedFault: a triggered save failed
        """
        self._check_key(key)
        self._data[key] = value
        self._dirty = True
        if self._config.auto_save or save:
            await self.save()

    async def remove(self, key: str, save: bool = False) -> None:
        """Delete ``key`` (absent keys are fine) and mark the session dirty."""
        self._check_key(key)
        self._data.pop(key, None)
        self._dirty = True
        if self._config.auto_save or save:
            await self.save()

    # ========================================================================
    # Internals
    # ========================================================================

    @staticmethod
    def _check_key(key: Any) -> None:
        if not isinstance(key, str):
            raise InvalidKeyFault(key)

    @staticmethod
    def _as_fault(result: CacheResult, fault_cls: type[RequestFailedFault], operation: str) -> SessionFault:
        if isinstance(result.error, SessionFault):
            return result.error
        return fault_cls(operation=operation, cause=result.error)

    def _notify(self, event: str) -> None:
        if self._listener is not None:
            self._listener(event, self)

    def __repr__(self) -> str:
        token = hash_token(self._token) if self._token else None
        return f"SessionStore(token={token}, dirty={self._dirty}, keys={len(self._data)})"
