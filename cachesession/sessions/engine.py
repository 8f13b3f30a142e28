"""
CacheSession - Session manager.

The SessionManager is app-scoped and hands out request-scoped stores:
1. Open - build a store for the request and start it
2. Handler - reads/writes session data
3. Close - end the store (persist if dirty)

It also fans lifecycle events out to observability handlers.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, AsyncIterator, Callable, Mapping

from .faults import MissingDependencyFault, hash_token
from .policy import SessionConfig
from .store import SessionStore
from .transport import ResponseCookieGateway

if TYPE_CHECKING:
    from cachesession.cache import CacheAdapter
    from .transport import CookieGateway


EventHandler = Callable[[dict[str, Any]], None]


class SessionManager:
    """
    Session factory and lifecycle helper.

    Example:
        >>> manager = SessionManager(MemoryCacheAdapter(), SessionConfig(create=True))
        >>> async with manager.session(request_cookies) as session:
        ...     await session.set("cart", [1, 2, 3])
        >>> session.cookies.header_values()
    """

    def __init__(
        self,
        cache: CacheAdapter,
        config: SessionConfig | None = None,
        logger: logging.Logger | None = None,
    ):
        """
        Args:
            cache: Cache adapter shared by every store
            config: Session settings (defaults if omitted)
            logger: Optional logger

        Raises:
            MissingDependencyFault: cache not supplied
            ConfigFault: config is invalid
        """
        if cache is None:
            raise MissingDependencyFault("cache")

        self.cache = cache
        self.config = (config or SessionConfig()).validate()
        self.logger = logger or logging.getLogger("cachesession.sessions")

        # Event callbacks (for observability)
        self._event_handlers: list[EventHandler] = []

    def gateway(self) -> ResponseCookieGateway:
        """New response gateway carrying the configured cookie attributes."""
        return ResponseCookieGateway(self.config.cookie)

    def store(self, gateway: CookieGateway | None = None, **overrides: Any) -> SessionStore:
        """
        Build an unstarted store.

        Args:
            gateway: Response cookie gateway (a new ``ResponseCookieGateway`` if omitted).
                A ``ResponseCookieGateway`` built without options takes the
                store's configured cookie attributes.
            **overrides: Per-store config overrides
        """
        if gateway is None:
            gateway = ResponseCookieGateway()
        store = SessionStore(
            self.cache,
            gateway,
            self.config,
            listener=self._emit_event,
            **overrides,
        )
        if isinstance(gateway, ResponseCookieGateway):
            gateway.adopt(store.config.cookie)
        return store

    async def open(
        self,
        inbound: Mapping[str, str] | None,
        gateway: CookieGateway | None = None,
        create: bool | None = None,
    ) -> SessionStore:
        """
        Build and start a store for one request.

        Args:
            inbound: Parsed request cookies
            gateway: Response cookie gateway (a new ``ResponseCookieGateway`` if omitted)
            create: Create when none resolves (defaults to ``config.create``)

        Raises:
            NoSessionCookieFault, NoSessionFoundFault, RequestFailedFault:
                as raised by ``SessionStore.start``
        """
        if create is None:
            create = self.config.create
        store = self.store(gateway)
        return await store.start(inbound, create=create)

    async def close(self, store: SessionStore) -> None:
        """End a store opened by this manager."""
        await store.end()

    @asynccontextmanager
    async def session(
        self,
        inbound: Mapping[str, str] | None,
        gateway: CookieGateway | None = None,
        create: bool | None = None,
    ) -> AsyncIterator[SessionStore]:
        """
        Scope a session to a block.

        The session is ended on normal exit. If the block raises, nothing
        is persisted and the exception propagates.
        """
        store = await self.open(inbound, gateway, create=create)
        try:
            yield store
        except BaseException:
            self.logger.debug(
                f"Session block failed, skipping persist for {hash_token(store.token)}"
            )
            raise
        await self.close(store)

    # ========================================================================
    # Observability
    # ========================================================================

    def on_event(self, handler: EventHandler) -> None:
        """
        Register event handler for observability.

        Args:
            handler: Callback receiving one event dict per lifecycle event
        """
        self._event_handlers.append(handler)

    def _emit_event(self, event_type: str, store: SessionStore) -> None:
        event = {
            "type": event_type,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "token_hash": hash_token(store.token) if store.token else None,
            "dirty": store.dirty,
            "is_new": store.is_new,
        }

        for handler in self._event_handlers:
            try:
                handler(event)
            except Exception as e:
                self.logger.error(f"Event handler error for {event_type}: {e}")
