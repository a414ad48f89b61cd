# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Connection establishment: scheme dispatch, DNS, timeouts and TLS setup."""

from __future__ import annotations

import ipaddress
import logging
import socket
import ssl
from collections.abc import Callable, Sequence
from functools import lru_cache
from typing import TYPE_CHECKING, Any

import certifi
import httpx
import idna

from ..errors import ConnectionFailed, DnsFailed, UnknownScheme
from .streams import PlainTransport, TlsTransport, Transport, effective_timeout

if TYPE_CHECKING:
    from ..http.models import HttpRequest

logger = logging.getLogger(__name__)

DEFAULT_PORTS = {"http": 80, "https": 443}

# (address family, sockaddr) pairs, in resolver order.
Address = tuple[int, Any]
Resolver = Callable[[str, int], Sequence[Address]]


def resolve_host(hostname: str, port: int) -> list[Address]:
    """Resolve a hostname with getaddrinfo, keeping the resolver's ordering."""
    infos = socket.getaddrinfo(hostname, port, type=socket.SOCK_STREAM)
    return [(family, sockaddr) for family, _type, _proto, _canon, sockaddr in infos]


@lru_cache(maxsize=1)
def default_tls_context() -> ssl.SSLContext:
    """Client TLS context trusting the bundled certifi root set."""
    return ssl.create_default_context(cafile=certifi.where())


def validate_server_name(hostname: str) -> None:
    """Raise ConnectionFailed unless hostname is usable as a TLS server name."""
    try:
        ipaddress.ip_address(hostname)
    except ValueError:
        pass
    else:
        raise ConnectionFailed(f"Invalid TLS name: {hostname}")
    try:
        idna.encode(hostname, uts46=True)
    except idna.IDNAError as exc:
        raise ConnectionFailed(f"Invalid TLS name: {hostname}") from exc


def url_hostname(url: httpx.URL) -> str:
    """ASCII (IDNA-encoded) host of a URL, the form DNS and TLS expect."""
    return url.raw_host.decode("ascii")


class Connector:
    """Opens one fresh transport per call; nothing is pooled or reused."""

    def __init__(self, resolver: Resolver | None = None, tls_context: ssl.SSLContext | None = None):
        self.resolver = resolver or resolve_host
        self._tls_context = tls_context

    @property
    def tls_context(self) -> ssl.SSLContext:
        if self._tls_context is None:
            self._tls_context = default_tls_context()
        return self._tls_context

    def connect(self, request: HttpRequest, url: httpx.URL) -> Transport:
        """Dispatch on the URL scheme and return a connected transport."""
        scheme = url.scheme.lower()
        if scheme == "http":
            return self.connect_http(request, url)
        if scheme == "https":
            return self.connect_https(request, url)
        raise UnknownScheme(url.scheme)

    def connect_http(self, request: HttpRequest, url: httpx.URL) -> PlainTransport:
        hostname = url_hostname(url)
        port = url.port or DEFAULT_PORTS["http"]
        sock = self.connect_host(request, hostname, port)
        return PlainTransport(sock, request.timeout_read, request.timeout_write)

    def connect_https(self, request: HttpRequest, url: httpx.URL) -> TlsTransport:
        hostname = url_hostname(url)
        port = url.port or DEFAULT_PORTS["https"]
        validate_server_name(hostname)
        sock = self.connect_host(request, hostname, port)
        try:
            tls_sock = self.tls_context.wrap_socket(sock, server_hostname=hostname, do_handshake_on_connect=False)
        except (ssl.SSLError, ValueError) as exc:
            sock.close()
            raise ConnectionFailed(str(exc)) from exc
        return TlsTransport(tls_sock, request.timeout_read, request.timeout_write)

    def connect_host(self, request: HttpRequest, hostname: str, port: int) -> socket.socket:
        """Resolve hostname and connect to the first address it yields."""
        try:
            addresses = list(self.resolver(hostname, port))
        except OSError as exc:
            raise DnsFailed(str(exc)) from exc
        if not addresses:
            raise DnsFailed(f"No ip address for {hostname}")

        # First address only; no fallback to the rest.
        family, sockaddr = addresses[0]
        logger.debug("Connecting to %s:%s via %s", hostname, port, sockaddr[0])

        connect_timeout = effective_timeout(request.timeout_connect)
        sock = socket.socket(family, socket.SOCK_STREAM)
        try:
            if connect_timeout is not None:
                sock.settimeout(connect_timeout)
            sock.connect(sockaddr)
        except OSError as exc:
            sock.close()
            raise ConnectionFailed(str(exc) or type(exc).__name__) from exc
        sock.settimeout(None)
        return sock


__all__ = [
    "Connector",
    "DEFAULT_PORTS",
    "default_tls_context",
    "resolve_host",
    "url_hostname",
    "validate_server_name",
]
