# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP client abstraction and factory."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Protocol

import httpx

from ..config import HttpSettings, load_http_settings
from .headers import normalize_headers
from .models import HttpRequest, HttpResponse
from .payload import Payload
from .pipeline import RequestPipeline

Body = bytes | str | Payload | None
HeadersArg = Mapping[str, str] | Iterable[tuple[str, str]] | None


class HttpClient(Protocol):
    """Minimal protocol for issuing HTTP requests."""

    def request(self, method: str, url: httpx.URL | str, **kwargs) -> HttpResponse: ...


def _as_payload(body: Body) -> Payload:
    if body is None:
        return Payload.empty()
    if isinstance(body, Payload):
        return body
    if isinstance(body, str):
        return Payload.from_text(body)
    return Payload.from_bytes(body)


class WireClient(HttpClient):
    """
    Synchronous client driving RequestPipeline.

    Each request opens its own connection(s). The client's cookie jar is shared by
    every request it issues unless a jar is passed explicitly.
    """

    def __init__(
        self,
        settings: HttpSettings | None = None,
        pipeline: RequestPipeline | None = None,
        cookies: httpx.Cookies | None = None,
    ):
        self.settings = settings or load_http_settings()
        self.pipeline = pipeline or RequestPipeline()
        self.cookies = cookies if cookies is not None else httpx.Cookies()

    def build_request(self, headers: HeadersArg = None) -> HttpRequest:
        pairs = list(normalize_headers(headers))
        if not any(name.lower() == "user-agent" for name, _ in pairs):
            pairs.append(("User-Agent", self.settings.user_agent))
        return HttpRequest(
            headers=tuple(pairs),
            timeout_connect=self.settings.timeout_connect,
            timeout_read=self.settings.timeout_read,
            timeout_write=self.settings.timeout_write,
        )

    def request(
        self,
        method: str,
        url: httpx.URL | str,
        *,
        headers: HeadersArg = None,
        body: Body = None,
        cookies: httpx.Cookies | None = None,
        max_redirects: int | None = None,
    ) -> HttpResponse:
        redirects = self.settings.max_redirects if max_redirects is None else max_redirects
        return self.pipeline.execute(
            self.build_request(headers),
            method.upper(),
            url,
            redirects,
            cookies if cookies is not None else self.cookies,
            _as_payload(body),
        )

    def get(self, url: httpx.URL | str, **kwargs) -> HttpResponse:
        return self.request("GET", url, **kwargs)

    def post(self, url: httpx.URL | str, **kwargs) -> HttpResponse:
        return self.request("POST", url, **kwargs)


def create_default_http_client(settings: HttpSettings | None = None) -> WireClient:
    """Factory for the default pipeline-backed client."""
    return WireClient(settings or load_http_settings())
