# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Cookie jar matching and Set-Cookie ingestion.

The jar is caller-owned (`httpx.Cookies`, or the `http.cookiejar.CookieJar` behind
it) and is mutated in place across a whole redirect chain. Nothing here locks: an
embedder sharing one jar between threads must synchronize access itself.

Malformed cookies are dropped silently in both directions. A single bad cookie
never fails the request it arrived on or is sent with.
"""

from __future__ import annotations

import logging
import re
import time
from http.cookiejar import Cookie, CookieJar, parse_ns_headers
from urllib.parse import quote, unquote

import httpx

logger = logging.getLogger(__name__)

_TOKEN_RE = re.compile(r"^[!#$%&'*+\-.^_`|~0-9A-Za-z]+$")
# RFC 6265 cookie-octet, minus "%" so existing escapes are re-escaped.
_COOKIE_VALUE_SAFE = "".join(chr(c) for c in range(0x21, 0x7F) if chr(c) not in '",;\\%')


class CookieEncodeError(ValueError):
    """A jar entry cannot be rendered as a request header."""


def _cookiejar(jar: httpx.Cookies | CookieJar) -> CookieJar:
    return jar.jar if isinstance(jar, httpx.Cookies) else jar


def encode_cookie(name: str, value: str) -> str:
    """Render one `name=value` pair, percent-encoding the value."""
    if not name or not _TOKEN_RE.match(name):
        raise CookieEncodeError(f"invalid cookie name: {name!r}")
    return f"{name}={quote(value or '', safe=_COOKIE_VALUE_SAFE)}"


def cookie_matches(cookie: Cookie, domain: str, path: str, is_secure: bool) -> bool:
    # No domain never matches.
    domain_ok = bool(cookie.domain) and domain.lower().endswith(cookie.domain.lower())
    # Literal prefix test, no segment-boundary check. No path matches everything.
    path_ok = path.startswith(cookie.path) if cookie.path_specified else True
    secure_ok = not cookie.secure or is_secure
    return domain_ok and path_ok and secure_ok


def match_cookies(
    jar: httpx.Cookies | CookieJar,
    domain: str,
    path: str,
    is_secure: bool,
) -> list[tuple[str, str]]:
    """Return one `Cookie` header per jar entry applicable to the request."""
    cookiejar = _cookiejar(jar)
    cookiejar.clear_expired_cookies()
    headers: list[tuple[str, str]] = []
    for cookie in cookiejar:
        if not cookie_matches(cookie, domain, path, is_secure):
            continue
        try:
            headers.append(("Cookie", encode_cookie(cookie.name, cookie.value or "")))
        except CookieEncodeError as exc:
            logger.debug("Skipping cookie that cannot be encoded: %s", exc)
    return headers


def _strip_quotes(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] == '"':
        return value[1:-1]
    return value


def parse_set_cookie(raw: str, hostname: str) -> Cookie | None:
    """
    Parse one Set-Cookie value into a jar entry.

    The first `name=value` pair is the cookie; every later `;` segment is one of its
    attributes, known or not. When the server omitted the Domain attribute the
    request hostname is used, so every stored cookie carries a domain. Returns None
    for unparseable input.
    """
    to_parse = raw if "domain=" in raw.lower() else f"{raw}; Domain={hostname}"
    parsed = parse_ns_headers([to_parse])
    if not parsed:
        return None
    (name, value), *attributes = parsed[0]
    if value is None or not name:
        return None

    domain = hostname
    path: str | None = None
    secure = False
    max_age: int | None = None
    expires: int | None = None
    rest: dict[str, str | None] = {}
    for key, attr_value in attributes:
        if key == "domain":
            domain = attr_value or hostname
        elif key == "path":
            path = attr_value or None
        elif key == "secure":
            secure = True
        elif key == "max-age":
            try:
                max_age = int(attr_value or "")
            except ValueError:
                pass
        elif key == "expires":
            # parse_ns_headers has already converted this to epoch seconds (None if invalid).
            expires = attr_value
        elif key in ("version", "port"):
            continue
        else:
            rest[key] = attr_value
    if max_age is not None:
        expires = int(time.time()) + max_age

    initial_dot = domain.startswith(".")
    domain = domain.lstrip(".")

    return Cookie(
        version=0,
        name=unquote(name),
        value=unquote(_strip_quotes(value)),
        port=None,
        port_specified=False,
        domain=domain,
        domain_specified=True,
        domain_initial_dot=initial_dot,
        path=path or "/",
        path_specified=path is not None,
        secure=secure,
        expires=expires,
        discard=expires is None,
        comment=None,
        comment_url=None,
        rest=rest,
    )


def store_set_cookies(jar: httpx.Cookies | CookieJar, raw_values: list[str], hostname: str) -> int:
    """Fold Set-Cookie header values into the jar; returns how many were stored."""
    cookiejar = _cookiejar(jar)
    stored = 0
    for raw in raw_values:
        cookie = parse_set_cookie(raw, hostname)
        if cookie is None:
            logger.debug("Ignoring unparseable Set-Cookie value from %s", hostname)
            continue
        cookiejar.set_cookie(cookie)
        stored += 1
    return stored


__all__ = [
    "CookieEncodeError",
    "cookie_matches",
    "encode_cookie",
    "match_cookies",
    "parse_set_cookie",
    "store_set_cookies",
]
