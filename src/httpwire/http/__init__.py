# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP layer exports."""

from .client import HttpClient, WireClient, create_default_http_client
from .cookies import match_cookies, parse_set_cookie, store_set_cookies
from .headers import header_value, header_values, normalize_headers
from .models import HttpRequest, HttpResponse, read_response_head
from .payload import CHUNK_SIZE, Payload, send_payload
from .pipeline import RequestPipeline

__all__ = [
    "CHUNK_SIZE",
    "HttpClient",
    "HttpRequest",
    "HttpResponse",
    "Payload",
    "RequestPipeline",
    "WireClient",
    "create_default_http_client",
    "header_value",
    "header_values",
    "match_cookies",
    "normalize_headers",
    "parse_set_cookie",
    "read_response_head",
    "send_payload",
    "store_set_cookies",
]
