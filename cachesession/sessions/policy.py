"""
CacheSession - Session configuration.

SessionConfig is the single policy object a store and a manager are built
from. It is immutable: overrides produce a new, validated copy.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from typing import Any, Mapping

from cachesession.faults import ConfigFault

from .core import DEFAULT_COOKIE_NAME, DEFAULT_SESSION_TTL, DEFAULT_VERSION
from .faults import InvalidCookieNameFault
from .transport import CookieOptions, prefix_cookie_name


# Legacy camelCase keys accepted by from_dict
_ALIASES = {
    "cookiePrefix": "cookie_prefix",
    "prefix": "cookie_prefix",
    "cookieName": "cookie_name",
    "sessionTTL": "session_ttl",
    "sessionTtl": "session_ttl",
    "ttl": "session_ttl",
    "autoSave": "auto_save",
    "cookieOptions": "cookie",
}


@dataclass(frozen=True)
class SessionConfig:
    """
    Session behavior settings.

    Attributes:
        version: Key namespace; bump to invalidate every stored session
        cookie_prefix: Cookie namespace ("" for none, else ``prefix[name]``)
        cookie_name: Base cookie name
        session_ttl: Lifetime in seconds for the cache entry and the cookie
        auto_save: Persist after every mutation
        create: Create a session when none resolves (manager default)
        cookie: Attributes applied to the session cookie

    Example:
        >>> config = SessionConfig(cookie_prefix="app", auto_save=True)
        >>> config.effective_cookie_name
        'app[session]'
    """

    version: int = DEFAULT_VERSION
    cookie_prefix: str = ""
    cookie_name: str = DEFAULT_COOKIE_NAME
    session_ttl: int = DEFAULT_SESSION_TTL
    auto_save: bool = False
    create: bool = False
    cookie: CookieOptions = field(default_factory=CookieOptions)

    @property
    def effective_cookie_name(self) -> str:
        return prefix_cookie_name(self.cookie_prefix, self.cookie_name)

    def validate(self) -> SessionConfig:
        """
        Check invariants.

        Returns:
            self, so calls can be chained

        Raises:
            ConfigFault: ttl is not positive, version is negative, or the
                cookie name/prefix is illegal
        """
        if isinstance(self.session_ttl, bool) or not isinstance(self.session_ttl, int) or self.session_ttl <= 0:
            raise ConfigFault(f"session_ttl must be a positive integer, got {self.session_ttl!r}")
        if isinstance(self.version, bool) or not isinstance(self.version, int) or self.version < 0:
            raise ConfigFault(f"version must be a non-negative integer, got {self.version!r}")
        try:
            self.effective_cookie_name
        except InvalidCookieNameFault as e:
            raise ConfigFault(f"Invalid session cookie: {e.message}") from e
        return self

    def with_overrides(self, **overrides: Any) -> SessionConfig:
        """Return a validated copy with ``overrides`` applied (camelCase accepted)."""
        if not overrides:
            return self
        changes = _normalize_keys(overrides)
        try:
            if isinstance(changes.get("cookie"), Mapping):
                changes["cookie"] = CookieOptions.from_dict(changes["cookie"])
            return replace(self, **changes).validate()
        except (TypeError, ValueError) as e:
            raise ConfigFault(str(e)) from e

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> SessionConfig:
        """
        Build a validated config from a mapping.

        Unknown keys are ignored so a shared ``sessions`` config section
        can carry settings for other components.
        """
        if not data:
            return cls()

        values = _normalize_keys(data)
        known = {f.name for f in fields(cls)}
        kwargs = {k: v for k, v in values.items() if k in known}

        cookie = kwargs.get("cookie")
        if isinstance(cookie, Mapping):
            try:
                kwargs["cookie"] = CookieOptions.from_dict(cookie)
            except (TypeError, ValueError) as e:
                raise ConfigFault(f"Invalid cookie options: {e}") from e

        return cls(**kwargs).validate()

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "cookie_prefix": self.cookie_prefix,
            "cookie_name": self.cookie_name,
            "session_ttl": self.session_ttl,
            "auto_save": self.auto_save,
            "create": self.create,
            "cookie": {
                "path": self.cookie.path,
                "domain": self.cookie.domain,
                "secure": self.cookie.secure,
                "httponly": self.cookie.httponly,
                "samesite": self.cookie.samesite,
            },
        }


def _normalize_keys(data: Mapping[str, Any]) -> dict[str, Any]:
    normalized: dict[str, Any] = {}
    for key, value in data.items():
        name = _ALIASES.get(key, key)
        # snake_case wins over an alias for the same field
        if name in normalized and key != name:
            continue
        normalized[name] = value
    return normalized
