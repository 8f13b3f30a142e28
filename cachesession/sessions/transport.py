"""
CacheSession - Cookie transport.

Handles the cookie side of a session:
- Inbound: immutable snapshot of the request's cookies
- Outbound: set/remove directives recorded per response
- Naming: optional ``prefix[name]`` cookie namespacing

No cookie state is ever shared between requests.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from types import MappingProxyType
from typing import Mapping, Protocol, runtime_checkable

from .faults import InvalidCookieNameFault


# RFC 6265 token characters, plus the brackets used by prefixed names
_COOKIE_NAME_RE = re.compile(r"^[!#$%&'*+\-.^_`|~0-9A-Za-z\[\]]+$")

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_EXPIRES_FORMAT = "%a, %d %b %Y %H:%M:%S GMT"


def _validate_name_part(part: str) -> None:
    if not isinstance(part, str) or not part or "[" in part or "]" in part:
        raise InvalidCookieNameFault(str(part))
    if not _COOKIE_NAME_RE.match(part):
        raise InvalidCookieNameFault(part)


def prefix_cookie_name(prefix: str, name: str) -> str:
    """
    Compute the effective cookie name.

    Args:
        prefix: Namespace prefix ("" for none)
        name: Base cookie name

    Returns:
        ``name`` when prefix is empty, otherwise ``prefix[name]``

    Raises:
        InvalidCookieNameFault: prefix or name holds characters that are
            not legal in a cookie name
    """
    _validate_name_part(name)
    if not prefix:
        return name
    _validate_name_part(prefix)
    return f"{prefix}[{name}]"


def cookie_expiry(now: datetime, ttl_seconds: int) -> datetime:
    """Absolute expiry for a cookie set at ``now`` with ``ttl_seconds`` lifetime."""
    return now + timedelta(seconds=ttl_seconds)


def parse_cookie_header(header: str | None) -> Mapping[str, str]:
    """
    Parse a ``Cookie`` request header into a read-only mapping.

    The first occurrence of a name wins, matching browser ordering
    (most specific path first).
    """
    cookies: dict[str, str] = {}
    if not header:
        return MappingProxyType(cookies)

    for part in header.split(";"):
        part = part.strip()
        if "=" not in part:
            continue
        name, value = part.split("=", 1)
        name = name.strip()
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] == '"':
            value = value[1:-1]
        if name and name not in cookies:
            cookies[name] = value

    return MappingProxyType(cookies)


# ============================================================================
# Cookie Options & Directives
# ============================================================================

@dataclass(frozen=True)
class CookieOptions:
    """
    Attributes applied to every session cookie a gateway writes.

    Defaults: whole-site path, secure, HttpOnly, SameSite=Lax.
    """
    path: str = "/"
    domain: str | None = None
    secure: bool = True
    httponly: bool = True
    samesite: str | None = "lax"

    def __post_init__(self):
        if self.samesite is not None and self.samesite.lower() not in ("lax", "strict", "none"):
            raise ValueError(f"Invalid samesite value: {self.samesite!r}")
        if self.samesite is not None and self.samesite.lower() == "none" and not self.secure:
            raise ValueError("SameSite=None requires secure=True")

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> CookieOptions:
        """Build options from a config mapping, ignoring unknown keys."""
        known = {"path", "domain", "secure", "httponly", "samesite"}
        kwargs = {k: v for k, v in data.items() if k in known}
        # Legacy spelling
        if "isSecure" in data and "secure" not in kwargs:
            kwargs["secure"] = data["isSecure"]
        if "isHttpOnly" in data and "httponly" not in kwargs:
            kwargs["httponly"] = data["isHttpOnly"]
        return cls(**kwargs)


@dataclass(frozen=True)
class CookieDirective:
    """One outbound cookie instruction (set or remove)."""
    name: str
    value: str
    ttl_seconds: int | None
    options: CookieOptions = field(default_factory=CookieOptions)
    removal: bool = False

    def to_header(self, now: datetime | None = None) -> str:
        """
        Render as a ``Set-Cookie`` header value.

        Args:
            now: Reference time for ``Expires`` (defaults to current UTC time)
        """
        if self.removal:
            parts = [f"{self.name}=", "Max-Age=0", f"Expires={EPOCH.strftime(_EXPIRES_FORMAT)}"]
        else:
            parts = [f"{self.name}={self.value}"]
            if self.ttl_seconds is not None:
                now = now or datetime.now(timezone.utc)
                expires = cookie_expiry(now, self.ttl_seconds)
                parts.append(f"Max-Age={self.ttl_seconds}")
                parts.append(f"Expires={expires.strftime(_EXPIRES_FORMAT)}")

        opts = self.options
        if opts.path:
            parts.append(f"Path={opts.path}")
        if opts.domain:
            parts.append(f"Domain={opts.domain}")
        if opts.secure:
            parts.append("Secure")
        if opts.httponly:
            parts.append("HttpOnly")
        if opts.samesite:
            parts.append(f"SameSite={opts.samesite.capitalize()}")

        return "; ".join(parts)


# ============================================================================
# CookieGateway Protocol
# ============================================================================

@runtime_checkable
class CookieGateway(Protocol):
    """
    Outbound cookie interface used by the session store.

    The gateway only records what the response should carry; it does
    not validate sessions or touch the cache.
    """

    def set_cookie(self, name: str, value: str, ttl_seconds: int) -> None:
        ...

    def remove_cookie(self, name: str) -> None:
        ...


class ResponseCookieGateway:
    """
    Per-response cookie gateway.

    Records directives in call order. A later directive for the same name
    replaces the earlier one, so a create followed by a destroy yields a
    single removal.

    Example:
        >>> gateway = ResponseCookieGateway()
        >>> gateway.set_cookie("session", "abc", 86400)
        >>> gateway.header_values()
        ['session=abc; Max-Age=86400; Expires=...; Path=/; Secure; HttpOnly; SameSite=Lax']
    """

    def __init__(self, options: CookieOptions | None = None):
        self.options = options or CookieOptions()
        self._explicit_options = options is not None
        self._directives: dict[str, CookieDirective] = {}

    def adopt(self, options: CookieOptions) -> ResponseCookieGateway:
        """
        Use ``options`` for later directives unless options were given at
        construction. Returns self.
        """
        if not self._explicit_options:
            self.options = options
        return self

    @property
    def directives(self) -> list[CookieDirective]:
        return list(self._directives.values())

    def set_cookie(self, name: str, value: str, ttl_seconds: int) -> None:
        self._record(CookieDirective(name, value, ttl_seconds, self.options))

    def remove_cookie(self, name: str) -> None:
        self._record(CookieDirective(name, "", 0, self.options, removal=True))

    def header_values(self, now: datetime | None = None) -> list[str]:
        """``Set-Cookie`` header values for every recorded directive."""
        return [d.to_header(now) for d in self._directives.values()]

    def _record(self, directive: CookieDirective) -> None:
        # Re-insert so ordering follows the latest call
        self._directives.pop(directive.name, None)
        self._directives[directive.name] = directive
