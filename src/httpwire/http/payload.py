# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Request payloads and their transmission with fixed or chunked framing."""

from __future__ import annotations

import io
from collections.abc import Iterable, Iterator
from typing import Protocol

from ..transport.streams import ChunkedWriter, Transport
from .models import HttpRequest

CHUNK_SIZE = 1024 * 1024


class Readable(Protocol):
    def read(self, size: int = -1) -> bytes: ...


class Writable(Protocol):
    def write_all(self, data: bytes) -> None: ...


class _IterableReader:
    """File-like view over an iterable of byte chunks."""

    def __init__(self, chunks: Iterable[bytes]):
        self._chunks: Iterator[bytes] = iter(chunks)
        self._pending = b""

    def read(self, size: int = -1) -> bytes:
        while not self._pending:
            try:
                self._pending = bytes(next(self._chunks))
            except StopIteration:
                return b""
        if size < 0:
            size = len(self._pending)
        data, self._pending = self._pending[:size], self._pending[size:]
        return data


class Payload:
    """
    Request body: empty, or a byte source with an optional known size.

    A payload is consumed once. On a 301/302/303 redirect it is drained into the
    old connection and the next hop carries `Payload.empty()` instead.
    """

    def __init__(self, source: Readable | None = None, size: int | None = None):
        self._source = source
        self.size = 0 if source is None else size
        self._consumed = False

    @classmethod
    def empty(cls) -> Payload:
        return cls()

    @classmethod
    def from_bytes(cls, data: bytes) -> Payload:
        return cls(io.BytesIO(data), len(data))

    @classmethod
    def from_text(cls, text: str, encoding: str = "utf-8") -> Payload:
        return cls.from_bytes(text.encode(encoding))

    @classmethod
    def from_reader(cls, reader: Readable, size: int | None = None) -> Payload:
        return cls(reader, size)

    @classmethod
    def from_iterable(cls, chunks: Iterable[bytes], size: int | None = None) -> Payload:
        return cls(_IterableReader(chunks), size)

    @property
    def is_empty(self) -> bool:
        return self._source is None

    def into_reader(self) -> tuple[int | None, Readable]:
        if self._consumed:
            raise RuntimeError("payload already consumed")
        self._consumed = True
        return self.size, self._source if self._source is not None else io.BytesIO(b"")


def use_chunked(request: HttpRequest, size: int | None) -> bool:
    """Decide between chunked and fixed framing for a body of `size` bytes."""
    encoding = request.header("transfer-encoding")
    if encoding is not None:
        # An explicit header is obeyed literally.
        return encoding.lower() == "chunked"
    if size is None:
        length = request.header("content-length")
        if length is not None:
            try:
                size = int(length)
            except ValueError:
                size = 0
    if size is None:
        return True
    return size > CHUNK_SIZE


def pipe(reader: Readable, writer: Writable) -> int:
    """Copy reader into writer in CHUNK_SIZE blocks until end of data."""
    total = 0
    while True:
        data = reader.read(CHUNK_SIZE)
        if not data:
            return total
        writer.write_all(data)
        total += len(data)


def send_payload(request: HttpRequest, payload: Payload, stream: Transport) -> int:
    """Write the payload to the stream; returns the number of body bytes sent."""
    size, reader = payload.into_reader()
    if use_chunked(request, size):
        writer = ChunkedWriter(stream)
        total = pipe(reader, writer)
        writer.finish()
        return total
    return pipe(reader, stream)


__all__ = ["CHUNK_SIZE", "Payload", "pipe", "send_payload", "use_chunked"]
