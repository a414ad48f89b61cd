# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Error taxonomy and exception helpers."""

from __future__ import annotations

import socket
import ssl
from enum import Enum


class ErrorCategory(str, Enum):
    UNKNOWN_SCHEME = "UNKNOWN_SCHEME"
    DNS_FAILED = "DNS_FAILED"
    CONNECTION_FAILED = "CONNECTION_FAILED"
    BAD_URL = "BAD_URL"
    TOO_MANY_REDIRECTS = "TOO_MANY_REDIRECTS"
    BAD_STATUS = "BAD_STATUS"
    TIMEOUT = "TIMEOUT"
    IO_ERROR = "IO_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    NONE = "NONE"


class HttpWireError(Exception):
    """Base class for failures raised by the request pipeline."""

    category: ErrorCategory = ErrorCategory.UNKNOWN_ERROR

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class UnknownScheme(HttpWireError):
    category = ErrorCategory.UNKNOWN_SCHEME


class DnsFailed(HttpWireError):
    category = ErrorCategory.DNS_FAILED


class ConnectionFailed(HttpWireError):
    """Connect refused, timed out or unreachable, or an invalid TLS server name."""

    category = ErrorCategory.CONNECTION_FAILED


class BadUrl(HttpWireError):
    category = ErrorCategory.BAD_URL


class TooManyRedirects(HttpWireError):
    category = ErrorCategory.TOO_MANY_REDIRECTS

    def __init__(self, message: str = "too many redirects"):
        super().__init__(message)


class BadStatus(HttpWireError):
    """The response did not start with a parseable status line."""

    category = ErrorCategory.BAD_STATUS


def categorize_exception(exc: BaseException) -> ErrorCategory:
    """
    Map httpwire and Python I/O exceptions to ErrorCategory.
    """
    if isinstance(exc, HttpWireError):
        return exc.category

    if isinstance(exc, (socket.timeout, TimeoutError)):
        return ErrorCategory.TIMEOUT

    if isinstance(exc, (socket.gaierror, socket.herror)):
        return ErrorCategory.DNS_FAILED

    if isinstance(exc, (ssl.SSLError, ssl.CertificateError, ConnectionError)):
        return ErrorCategory.CONNECTION_FAILED

    if isinstance(exc, OSError):
        return ErrorCategory.IO_ERROR

    return ErrorCategory.UNKNOWN_ERROR


def error_category_to_reason(category: ErrorCategory | None) -> str:
    """User-facing reason string."""
    mapping = {
        ErrorCategory.UNKNOWN_SCHEME: "Unsupported URL scheme",
        ErrorCategory.DNS_FAILED: "DNS resolution failure",
        ErrorCategory.CONNECTION_FAILED: "Could not connect to host",
        ErrorCategory.BAD_URL: "Invalid URL",
        ErrorCategory.TOO_MANY_REDIRECTS: "Redirect limit reached",
        ErrorCategory.BAD_STATUS: "Malformed response from server",
        ErrorCategory.TIMEOUT: "Network timeout",
        ErrorCategory.IO_ERROR: "Network I/O failure",
        ErrorCategory.UNKNOWN_ERROR: "Request failed",
        ErrorCategory.NONE: "",
        None: "",
    }
    return mapping.get(category, "Request failed")


__all__ = [
    "BadStatus",
    "BadUrl",
    "ConnectionFailed",
    "DnsFailed",
    "ErrorCategory",
    "HttpWireError",
    "TooManyRedirects",
    "UnknownScheme",
    "categorize_exception",
    "error_category_to_reason",
]
