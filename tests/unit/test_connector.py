# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import socket

import httpx
import pytest

from httpwire.errors import ConnectionFailed, DnsFailed, UnknownScheme
from httpwire.http.models import HttpRequest
from httpwire.transport.connector import Connector, resolve_host, validate_server_name
from httpwire.transport.streams import PlainTransport, TlsTransport


class CountingResolver:
    def __init__(self, addresses=None, error: Exception | None = None):
        self.addresses = addresses or []
        self.error = error
        self.calls: list[tuple[str, int]] = []

    def __call__(self, hostname: str, port: int):
        self.calls.append((hostname, port))
        if self.error is not None:
            raise self.error
        return self.addresses


@pytest.fixture
def server():
    listener = socket.create_server(("127.0.0.1", 0))
    yield listener
    listener.close()


def _closed_port() -> int:
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()
    return port


def test_unknown_scheme_fails_before_dns():
    resolver = CountingResolver()
    with pytest.raises(UnknownScheme) as exc_info:
        Connector(resolver=resolver).connect(HttpRequest(), httpx.URL("ftp://host/path"))
    assert exc_info.value.message == "ftp"
    assert resolver.calls == []


def test_dns_error_maps_to_dns_failed():
    resolver = CountingResolver(error=socket.gaierror(-2, "Name or service not known"))
    with pytest.raises(DnsFailed, match="Name or service not known"):
        Connector(resolver=resolver).connect(HttpRequest(), httpx.URL("http://nowhere.invalid/"))


def test_empty_resolution_maps_to_dns_failed():
    resolver = CountingResolver(addresses=[])
    with pytest.raises(DnsFailed, match="No ip address for empty.test"):
        Connector(resolver=resolver).connect(HttpRequest(), httpx.URL("http://empty.test/"))


def test_http_connects_to_first_address_with_default_port(server):
    port = server.getsockname()[1]
    resolver = CountingResolver(addresses=[(socket.AF_INET, ("127.0.0.1", port))])
    transport = Connector(resolver=resolver).connect(
        HttpRequest(timeout_connect=2.0, timeout_read=1.5),
        httpx.URL("http://service.test/"),
    )
    try:
        assert isinstance(transport, PlainTransport)
        assert resolver.calls == [("service.test", 80)]
        assert transport.read_timeout == 1.5
        assert transport.write_timeout is None
        assert transport.sock.gettimeout() is None

        conn, _ = server.accept()
        transport.write_all(b"ping")
        assert conn.recv(4) == b"ping"
        conn.close()
    finally:
        transport.close()


def test_explicit_port_is_passed_to_resolver(server):
    port = server.getsockname()[1]
    resolver = CountingResolver(addresses=[(socket.AF_INET, ("127.0.0.1", port))])
    transport = Connector(resolver=resolver).connect(HttpRequest(), httpx.URL(f"http://service.test:{port}/"))
    transport.close()
    assert resolver.calls == [("service.test", port)]


def test_only_first_address_is_tried(server):
    good = ("127.0.0.1", server.getsockname()[1])
    refused = ("127.0.0.1", _closed_port())
    resolver = CountingResolver(addresses=[(socket.AF_INET, refused), (socket.AF_INET, good)])
    with pytest.raises(ConnectionFailed):
        Connector(resolver=resolver).connect(HttpRequest(), httpx.URL("http://service.test/"))


def test_https_rejects_ip_literal_server_name():
    resolver = CountingResolver()
    with pytest.raises(ConnectionFailed, match="Invalid TLS name: 127.0.0.1"):
        Connector(resolver=resolver).connect(HttpRequest(), httpx.URL("https://127.0.0.1/"))
    assert resolver.calls == []


def test_validate_server_name_accepts_dns_names():
    validate_server_name("example.com")
    validate_server_name("localhost")


def test_https_wraps_socket_with_lazy_handshake(server):
    class RecordingContext:
        def __init__(self):
            self.kwargs = None

        def wrap_socket(self, sock, **kwargs):
            self.kwargs = kwargs
            return sock

    context = RecordingContext()
    resolver = CountingResolver(addresses=[(socket.AF_INET, ("127.0.0.1", server.getsockname()[1]))])
    transport = Connector(resolver=resolver, tls_context=context).connect(
        HttpRequest(timeout_write=3.0),
        httpx.URL("https://secure.example.com/"),
    )
    try:
        assert isinstance(transport, TlsTransport)
        assert resolver.calls == [("secure.example.com", 443)]
        assert context.kwargs == {"server_hostname": "secure.example.com", "do_handshake_on_connect": False}
        assert transport.write_timeout == 3.0
        assert transport.read_timeout is None
    finally:
        transport.close()


def test_default_tls_context_verifies_certificates():
    context = Connector().tls_context
    assert context.check_hostname is True


def test_resolve_host_returns_family_and_sockaddr():
    addresses = resolve_host("127.0.0.1", 8080)
    assert addresses
    family, sockaddr = addresses[0]
    assert family == socket.AF_INET
    assert sockaddr == ("127.0.0.1", 8080)


class RecordingSocket:
    instances: list["RecordingSocket"] = []

    def __init__(self, family, kind):
        self.family = family
        self.kind = kind
        self.timeouts: list[float | None] = []
        self.connected_to = None
        self.closed = False
        RecordingSocket.instances.append(self)

    def settimeout(self, value):
        if value is not None and value < 0:
            raise ValueError("Timeout value out of range")
        self.timeouts.append(value)

    def connect(self, sockaddr):
        self.connected_to = sockaddr

    def close(self):
        self.closed = True


@pytest.mark.parametrize(
    ("timeout_connect", "expected_timeouts"),
    [
        (2.0, [2.0, None]),
        (0, [None]),
        (None, [None]),
        (-1, [None]),
    ],
)
def test_connect_timeout_selects_timed_or_untimed_connect(monkeypatch, timeout_connect, expected_timeouts):
    RecordingSocket.instances = []
    monkeypatch.setattr("httpwire.transport.connector.socket.socket", RecordingSocket)
    resolver = CountingResolver(addresses=[(socket.AF_INET, ("192.0.2.10", 80))])

    transport = Connector(resolver=resolver).connect(
        HttpRequest(timeout_connect=timeout_connect),
        httpx.URL("http://timed.test/"),
    )

    [sock] = RecordingSocket.instances
    assert transport.sock is sock
    assert sock.connected_to == ("192.0.2.10", 80)
    # A timed connect sets the timeout first; the socket is always left blocking afterwards.
    assert sock.timeouts == expected_timeouts
