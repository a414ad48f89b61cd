# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Transport streams.

A transport is a duplex byte stream over either a plain TCP socket or a TLS
session wrapping one. Both share the `Transport` protocol so the pipeline and
the payload transmitter never need to know which one they hold.
"""

from __future__ import annotations

import socket
import ssl
from typing import Protocol

READ_CHUNK_SIZE = 64 * 1024


class Transport(Protocol):
    """Minimal protocol for a connected duplex byte stream."""

    def read(self, size: int = READ_CHUNK_SIZE) -> bytes: ...

    def write_all(self, data: bytes) -> None: ...

    def close(self) -> None: ...


def effective_timeout(value: float | None) -> float | None:
    """Map 0, None and negative values to None ("no timeout")."""
    # socket.settimeout(0) switches to non-blocking mode, and negatives raise ValueError.
    if not value or value <= 0:
        return None
    return value


class PlainTransport:
    """Plaintext stream over a connected socket."""

    def __init__(self, sock: socket.socket, read_timeout: float | None = None, write_timeout: float | None = None):
        self.sock = sock
        self.read_timeout = effective_timeout(read_timeout)
        self.write_timeout = effective_timeout(write_timeout)

    def read(self, size: int = READ_CHUNK_SIZE) -> bytes:
        self.sock.settimeout(self.read_timeout)
        return self.sock.recv(size)

    def write_all(self, data: bytes) -> None:
        self.sock.settimeout(self.write_timeout)
        self.sock.sendall(data)

    def close(self) -> None:
        self.sock.close()


class TlsTransport:
    """
    Encrypted stream owning the TLS session and its underlying socket.

    The session is created with `do_handshake_on_connect=False`; OpenSSL runs
    the handshake implicitly on the first read or write.
    """

    def __init__(self, tls_sock: ssl.SSLSocket, read_timeout: float | None = None, write_timeout: float | None = None):
        self.tls_sock = tls_sock
        self.read_timeout = effective_timeout(read_timeout)
        self.write_timeout = effective_timeout(write_timeout)

    def read(self, size: int = READ_CHUNK_SIZE) -> bytes:
        self.tls_sock.settimeout(self.read_timeout)
        try:
            return self.tls_sock.recv(size)
        except ssl.SSLZeroReturnError:
            return b""

    def write_all(self, data: bytes) -> None:
        self.tls_sock.settimeout(self.write_timeout)
        self.tls_sock.sendall(data)

    def close(self) -> None:
        self.tls_sock.close()


class ChunkedWriter:
    """Chunked transfer-coding encoder writing into a transport."""

    def __init__(self, transport: Transport):
        self._transport = transport

    def write_all(self, data: bytes) -> None:
        if not data:
            return
        self._transport.write_all(b"%x\r\n%s\r\n" % (len(data), data))

    def finish(self) -> None:
        self._transport.write_all(b"0\r\n\r\n")


class TransportReader:
    """Buffered reader over a transport, shared by the head parser and the body reader."""

    def __init__(self, transport: Transport):
        self.transport = transport
        self._buffer = bytearray()
        self._eof = False

    def _fill(self) -> bool:
        if self._eof:
            return False
        data = self.transport.read(READ_CHUNK_SIZE)
        if not data:
            self._eof = True
            return False
        self._buffer.extend(data)
        return True

    def readline(self, limit: int = 64 * 1024) -> bytes:
        """Return one line including its trailing LF, or the remaining bytes at EOF."""
        while True:
            idx = self._buffer.find(b"\n")
            if idx >= 0:
                idx += 1
                break
            if len(self._buffer) >= limit or not self._fill():
                idx = min(len(self._buffer), limit)
                break
        line = bytes(self._buffer[:idx])
        del self._buffer[:idx]
        return line

    def read(self, size: int = -1) -> bytes:
        """Read up to `size` bytes (all remaining bytes when negative)."""
        if size < 0:
            while self._fill():
                pass
            data = bytes(self._buffer)
            self._buffer.clear()
            return data
        if not self._buffer:
            self._fill()
        data = bytes(self._buffer[:size])
        del self._buffer[:size]
        return data

    def read_exact(self, size: int) -> bytes:
        out = bytearray()
        while len(out) < size:
            chunk = self.read(size - len(out))
            if not chunk:
                raise ConnectionError(f"connection closed with {size - len(out)} bytes outstanding")
            out.extend(chunk)
        return bytes(out)

    def close(self) -> None:
        self._buffer.clear()
        self.transport.close()


__all__ = [
    "ChunkedWriter",
    "effective_timeout",
    "PlainTransport",
    "READ_CHUNK_SIZE",
    "TlsTransport",
    "Transport",
    "TransportReader",
]
