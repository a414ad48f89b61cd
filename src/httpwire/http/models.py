# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP request/response data models consumed by the request pipeline."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

import httpx

from ..errors import BadStatus
from ..transport.streams import READ_CHUNK_SIZE, TransportReader
from .headers import HeaderList, header_value, header_values, parse_header_line

MAX_HEAD_LINES = 256


@dataclass(frozen=True)
class HttpRequest:
    """
    Method-agnostic request descriptor shared by every hop of a redirect chain.

    Headers are ordered (name, value) pairs; duplicates are allowed. Timeouts are
    seconds, with 0 or None meaning no timeout.
    """

    headers: HeaderList = ()
    timeout_connect: float | None = None
    timeout_read: float | None = None
    timeout_write: float | None = None

    def has(self, name: str) -> bool:
        return header_value(self.headers, name) is not None

    def header(self, name: str) -> str | None:
        return header_value(self.headers, name)

    def all(self, name: str) -> list[str]:
        return header_values(self.headers, name)


@dataclass
class HttpResponse:
    """Status line and headers of a response, plus the transport stream once attached."""

    status: int
    reason: str = ""
    http_version: str = "HTTP/1.1"
    headers: HeaderList = ()
    url: httpx.URL | None = None
    request_method: str = "GET"
    _reader: TransportReader | None = field(default=None, repr=False)
    _consumed: bool = field(default=False, repr=False)

    def header(self, name: str) -> str | None:
        return header_value(self.headers, name)

    def all(self, name: str) -> list[str]:
        return header_values(self.headers, name)

    @property
    def redirect(self) -> bool:
        """3xx status carrying a Location header."""
        return 300 <= self.status <= 399 and self.header("location") is not None

    @property
    def stream(self) -> TransportReader | None:
        return self._reader

    def attach(self, reader: TransportReader) -> None:
        """Take exclusive ownership of the transport stream."""
        self._reader = reader

    def _has_body(self) -> bool:
        if self.request_method.upper() == "HEAD":
            return False
        return not (100 <= self.status < 200 or self.status in (204, 304))

    def iter_bytes(self, chunk_size: int = READ_CHUNK_SIZE) -> Iterator[bytes]:
        """Yield the decoded body; the stream is closed once the body ends."""
        if self._consumed:
            raise RuntimeError("response body already consumed")
        self._consumed = True
        reader = self._reader
        if reader is None:
            return
        try:
            if not self._has_body():
                return
            encoding = (self.header("transfer-encoding") or "").lower()
            if "chunked" in encoding:
                yield from _iter_chunked(reader)
                return
            length = self.header("content-length")
            if length is not None and length.isdigit():
                remaining = int(length)
                while remaining > 0:
                    chunk = reader.read(min(chunk_size, remaining))
                    if not chunk:
                        raise ConnectionError(f"connection closed with {remaining} body bytes outstanding")
                    remaining -= len(chunk)
                    yield chunk
                return
            while True:
                chunk = reader.read(chunk_size)
                if not chunk:
                    return
                yield chunk
        finally:
            self.close()

    def read(self) -> bytes:
        return b"".join(self.iter_bytes())

    def text(self, encoding: str = "utf-8") -> str:
        return self.read().decode(encoding, errors="replace")

    def close(self) -> None:
        if self._reader is not None:
            self._reader.close()
            self._reader = None

    def __enter__(self) -> HttpResponse:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def _iter_chunked(reader: TransportReader) -> Iterator[bytes]:
    while True:
        size_line = reader.readline().decode("latin-1").strip()
        if not size_line:
            raise ConnectionError("connection closed inside chunked body")
        try:
            size = int(size_line.split(";", 1)[0], 16)
        except ValueError as exc:
            raise ConnectionError(f"invalid chunk size line: {size_line!r}") from exc
        if size == 0:
            # Trailer section ends at the first empty line.
            while reader.readline().strip():
                pass
            return
        yield reader.read_exact(size)
        reader.readline()


def read_response_head(reader: TransportReader, url: httpx.URL | None = None) -> HttpResponse:
    """Parse the status line and header block from the stream."""
    raw_status = reader.readline()
    if not raw_status:
        raise BadStatus("empty response")
    status_line = raw_status.decode("latin-1").rstrip("\r\n")
    parts = status_line.split(" ", 2)
    if len(parts) < 2 or not parts[0].startswith("HTTP/") or len(parts[1]) != 3 or not parts[1].isdigit():
        raise BadStatus(f"Bad status line: {status_line!r}")

    headers: list[tuple[str, str]] = []
    for _ in range(MAX_HEAD_LINES):
        raw = reader.readline()
        line = raw.decode("latin-1").rstrip("\r\n")
        if not line:
            break
        if line[0] in " \t" and headers:
            name, value = headers[-1]
            headers[-1] = (name, f"{value} {line.strip()}")
            continue
        parsed = parse_header_line(line)
        if parsed is not None:
            headers.append(parsed)
    else:
        raise BadStatus("too many header lines")

    return HttpResponse(
        status=int(parts[1]),
        reason=parts[2] if len(parts) > 2 else "",
        http_version=parts[0],
        headers=tuple(headers),
        url=url,
    )


__all__ = ["HttpRequest", "HttpResponse", "read_response_head"]
