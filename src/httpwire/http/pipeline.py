# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Request/redirect pipeline.

One call drives a whole redirect chain: connect, send the request prelude, read the
response head, fold Set-Cookie headers into the jar, then either follow the
redirect on a brand new connection or send the payload and hand the live stream
to the response. The chain is an explicit loop over (method, url, redirects,
payload); every hop behaves exactly as a fresh call would.
"""

from __future__ import annotations

import logging
from http.cookiejar import CookieJar

import httpx

from ..errors import BadUrl, TooManyRedirects
from ..transport.connector import Connector, url_hostname
from ..transport.streams import TransportReader
from .cookies import match_cookies, store_set_cookies
from .models import HttpRequest, HttpResponse, read_response_head
from .payload import Payload, send_payload

logger = logging.getLogger(__name__)

REWRITE_TO_GET = frozenset({301, 302, 303})


def build_prelude(
    request: HttpRequest,
    method: str,
    url: httpx.URL,
    cookie_headers: list[tuple[str, str]],
) -> bytes:
    """Request line, Host (unless the caller set one), caller headers, cookies, blank line."""
    lines = [f"{method} {url.raw_path.decode('ascii')} HTTP/1.1"]
    if not request.has("host"):
        lines.append(f"Host: {url.netloc.decode('ascii')}")
    for name, value in (*request.headers, *cookie_headers):
        lines.append(f"{name}: {value}")
    return ("\r\n".join(lines) + "\r\n\r\n").encode("utf-8")


def resolve_location(url: httpx.URL, location: str) -> httpx.URL:
    """Join a (possibly relative) Location value onto the current URL."""
    try:
        return url.join(location)
    except (httpx.InvalidURL, ValueError) as exc:
        raise BadUrl(f"Bad redirection: {location}") from exc


class RequestPipeline:
    """Executes requests over fresh connections, following redirects."""

    def __init__(self, connector: Connector | None = None):
        self.connector = connector or Connector()

    def execute(
        self,
        request: HttpRequest,
        method: str,
        url: httpx.URL | str,
        redirects: int,
        jar: httpx.Cookies | CookieJar | None = None,
        payload: Payload | None = None,
    ) -> HttpResponse:
        """
        Run the request and return a response that owns the open stream.

        `redirects` is the remaining redirect budget. A redirect received with a
        budget of zero raises TooManyRedirects. Errors are never retried; the
        first one aborts the chain.
        """
        url = httpx.URL(url) if isinstance(url, str) else url
        payload = payload if payload is not None else Payload.empty()

        while True:
            hostname = url_hostname(url) or "localhost"
            is_secure = url.scheme.lower() == "https"
            cookie_headers = match_cookies(jar, hostname, url.path, is_secure) if jar is not None else []

            stream = self.connector.connect(request, url)
            reader = TransportReader(stream)
            try:
                stream.write_all(build_prelude(request, method, url, cookie_headers))

                response = read_response_head(reader, url)
                response.request_method = method

                if jar is not None:
                    store_set_cookies(jar, response.all("set-cookie"), hostname)

                if not response.redirect:
                    send_payload(request, payload, stream)
                    response.attach(reader)
                    return response

                if redirects <= 0:
                    raise TooManyRedirects()
                location = response.header("location") or ""
                next_url = resolve_location(url, location)

                if response.status in REWRITE_TO_GET:
                    # Drain the body into this connection; it is not forwarded.
                    send_payload(request, payload, stream)
                    method = "GET"
                    payload = Payload.empty()
            except BaseException:
                reader.close()
                raise

            reader.close()
            logger.debug("Following %s redirect from %s to %s (%d left)", response.status, url, next_url, redirects - 1)
            url = next_url
            redirects -= 1


__all__ = ["RequestPipeline", "build_prelude", "resolve_location"]
