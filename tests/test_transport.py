"""
Cookie transport: naming, expiry, Set-Cookie rendering, inbound parsing.
"""

from datetime import datetime, timezone

import pytest

from cachesession.sessions import (
    CookieDirective,
    CookieGateway,
    CookieOptions,
    InvalidCookieNameFault,
    ResponseCookieGateway,
    cookie_expiry,
    parse_cookie_header,
    prefix_cookie_name,
)


NOW = datetime(2024, 1, 1, tzinfo=timezone.utc)


class TestPrefixCookieName:

    def test_no_prefix(self):
        assert prefix_cookie_name("", "session") == "session"

    def test_prefix(self):
        assert prefix_cookie_name("app", "session") == "app[session]"

    @pytest.mark.parametrize("bad", ["bad name", "a;b", "a=b", "x[y]", "tab\t"])
    def test_invalid_prefix(self, bad):
        with pytest.raises(InvalidCookieNameFault):
            prefix_cookie_name(bad, "session")

    @pytest.mark.parametrize("bad", ["", "has space", "semi;colon"])
    def test_invalid_name(self, bad):
        with pytest.raises(InvalidCookieNameFault):
            prefix_cookie_name("", bad)


class TestCookieExpiry:

    def test_expiry(self):
        assert cookie_expiry(NOW, 3600) == datetime(2024, 1, 1, 1, tzinfo=timezone.utc)


class TestCookieOptions:

    def test_defaults(self):
        opts = CookieOptions()
        assert opts.path == "/"
        assert opts.domain is None
        assert opts.secure is True
        assert opts.httponly is True
        assert opts.samesite == "lax"

    def test_invalid_samesite(self):
        with pytest.raises(ValueError):
            CookieOptions(samesite="sometimes")

    def test_samesite_none_requires_secure(self):
        with pytest.raises(ValueError):
            CookieOptions(samesite="none", secure=False)

    def test_from_dict_legacy_keys(self):
        opts = CookieOptions.from_dict({"isSecure": False, "path": "/app", "unknown": 1})
        assert opts.secure is False
        assert opts.path == "/app"


class TestCookieDirective:

    def test_set_header(self):
        directive = CookieDirective("session", "abc", 60)
        assert directive.to_header(NOW) == (
            "session=abc; Max-Age=60; Expires=Mon, 01 Jan 2024 00:01:00 GMT; "
            "Path=/; Secure; HttpOnly; SameSite=Lax"
        )

    def test_removal_header(self):
        directive = CookieDirective("app[session]", "", 0, removal=True)
        header = directive.to_header(NOW)
        assert header.startswith("app[session]=; Max-Age=0; Expires=Thu, 01 Jan 1970 00:00:00 GMT")

    def test_options_rendered(self):
        opts = CookieOptions(path="/x", domain="example.com", secure=False, httponly=False, samesite="strict")
        header = CookieDirective("s", "v", None, opts).to_header(NOW)
        assert header == "s=v; Path=/x; Domain=example.com; SameSite=Strict"


class TestResponseCookieGateway:

    def test_is_gateway(self, response_gateway):
        assert isinstance(response_gateway, CookieGateway)

    def test_records_set(self, response_gateway):
        response_gateway.set_cookie("session", "abc", 60)
        (directive,) = response_gateway.directives
        assert directive.value == "abc"
        assert directive.ttl_seconds == 60
        assert not directive.removal

    def test_later_directive_replaces(self, response_gateway):
        response_gateway.set_cookie("session", "abc", 60)
        response_gateway.set_cookie("other", "x", 60)
        response_gateway.remove_cookie("session")
        names = [(d.name, d.removal) for d in response_gateway.directives]
        assert names == [("other", False), ("session", True)]

    def test_header_values(self):
        gateway = ResponseCookieGateway(CookieOptions(secure=False, httponly=False, samesite=None))
        gateway.set_cookie("session", "abc", 60)
        assert gateway.header_values(NOW) == [
            "session=abc; Max-Age=60; Expires=Mon, 01 Jan 2024 00:01:00 GMT; Path=/"
        ]

    def test_adopt_replaces_default_options(self, response_gateway):
        options = CookieOptions(path="/app", secure=False)
        assert response_gateway.adopt(options) is response_gateway
        assert response_gateway.options == options

    def test_adopt_keeps_explicit_options(self):
        explicit = CookieOptions(path="/admin")
        gateway = ResponseCookieGateway(explicit)
        gateway.adopt(CookieOptions(path="/app"))
        assert gateway.options is explicit


class TestParseCookieHeader:

    def test_parse(self):
        cookies = parse_cookie_header('a=1; sess[session]=abc; quoted="v"')
        assert cookies["a"] == "1"
        assert cookies["sess[session]"] == "abc"
        assert cookies["quoted"] == "v"

    def test_first_wins(self):
        assert parse_cookie_header("a=1; a=2")["a"] == "1"

    def test_empty(self):
        assert dict(parse_cookie_header(None)) == {}
        assert dict(parse_cookie_header("")) == {}

    def test_skips_garbage(self):
        assert dict(parse_cookie_header("novalue; ; b=2")) == {"b": "2"}

    def test_immutable(self):
        cookies = parse_cookie_header("a=1")
        with pytest.raises(TypeError):
            cookies["a"] = "2"
