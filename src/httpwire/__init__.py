# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
httpwire package entrypoint.

A synchronous HTTP/1.1 request-execution core: it connects over plain TCP or TLS,
writes the request, follows redirects with per-status method rewriting, keeps a
caller-owned cookie jar up to date, and streams request bodies with fixed or
chunked framing. Responses are returned bound to the live connection so callers
read bodies themselves.
"""

from .config import HttpSettings, load_http_settings
from .errors import (
    BadStatus,
    BadUrl,
    ConnectionFailed,
    DnsFailed,
    ErrorCategory,
    HttpWireError,
    TooManyRedirects,
    UnknownScheme,
)
from .http import (
    HttpClient,
    HttpRequest,
    HttpResponse,
    Payload,
    RequestPipeline,
    WireClient,
    create_default_http_client,
)
from .log import setup_logging
from .transport import Connector
from .version import __version__

__all__ = [
    "BadStatus",
    "BadUrl",
    "ConnectionFailed",
    "Connector",
    "DnsFailed",
    "ErrorCategory",
    "HttpClient",
    "HttpRequest",
    "HttpResponse",
    "HttpSettings",
    "HttpWireError",
    "Payload",
    "RequestPipeline",
    "TooManyRedirects",
    "UnknownScheme",
    "WireClient",
    "create_default_http_client",
    "load_http_settings",
    "setup_logging",
    "__version__",
]
