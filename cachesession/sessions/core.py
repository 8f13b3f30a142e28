"""
CacheSession - Core session identity.

Defines how a session is named on both sides of the wire:
- The token: opaque identifier carried by the client cookie
- The versioned key: ``version::token``, used only against the cache
"""

from __future__ import annotations

import uuid


SEPARATOR = "::"
DEFAULT_COOKIE_NAME = "session"
DEFAULT_VERSION = 2
DEFAULT_SESSION_TTL = 86400  # 1 day


def generate_token() -> str:
    """
    Generate a new session token.

    A time-ordered UUID1 concatenated with a random UUID4, hex encoded
    (64 characters). Stateless and safe to call from any task.

    Example:
        >>> len(generate_token())
        64
    """
    return uuid.uuid1().hex + uuid.uuid4().hex


def versioned_key(version: int | str, token: str) -> str:
    """
    Build the cache key for a token.

    Bumping ``version`` invalidates every previously stored session
    without touching the cache.
    """
    return f"{version}{SEPARATOR}{token}"
