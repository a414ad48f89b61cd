# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import io

import pytest

from httpwire.http.models import HttpRequest
from httpwire.http.payload import CHUNK_SIZE, Payload, send_payload, use_chunked


class RecordingStream:
    def __init__(self):
        self.written = bytearray()
        self.writes = 0

    def read(self, size: int = 65536) -> bytes:  # noqa: ARG002
        return b""

    def write_all(self, data: bytes) -> None:
        self.writes += 1
        self.written.extend(data)

    def close(self) -> None:
        pass


def _send(payload: Payload, headers=()) -> bytes:
    stream = RecordingStream()
    send_payload(HttpRequest(headers=tuple(headers)), payload, stream)
    return bytes(stream.written)


def test_known_small_size_uses_fixed_framing():
    assert _send(Payload.from_bytes(b"0123456789")) == b"0123456789"


def test_unknown_size_uses_chunked_framing():
    payload = Payload.from_iterable([b"abc", b"defghijklmnopq"])
    assert _send(payload) == b"3\r\nabc\r\ne\r\ndefghijklmnopq\r\n0\r\n\r\n"


def test_reader_without_size_is_chunked():
    payload = Payload.from_reader(io.BytesIO(b"hi"))
    assert _send(payload) == b"2\r\nhi\r\n0\r\n\r\n"


def test_explicit_chunked_header_wins_over_known_size():
    payload = Payload.from_bytes(b"abc")
    assert _send(payload, [("Transfer-Encoding", "Chunked")]) == b"3\r\nabc\r\n0\r\n\r\n"


def test_other_transfer_encoding_is_sent_verbatim():
    payload = Payload.from_iterable([b"raw-bytes"])
    assert _send(payload, [("transfer-encoding", "gzip")]) == b"raw-bytes"


def test_content_length_header_selects_fixed_framing_for_unsized_source():
    payload = Payload.from_reader(io.BytesIO(b"data"))
    assert _send(payload, [("Content-Length", "4")]) == b"data"


def test_unparseable_content_length_counts_as_zero():
    request = HttpRequest(headers=(("Content-Length", "nope"),))
    assert use_chunked(request, None) is False


def test_large_payload_is_chunked_in_bounded_blocks():
    data = b"x" * (CHUNK_SIZE + 1)
    stream = RecordingStream()
    send_payload(HttpRequest(), Payload.from_bytes(data), stream)
    written = bytes(stream.written)
    assert written.startswith(b"100000\r\n")
    assert written.endswith(b"\r\n1\r\nx\r\n0\r\n\r\n")
    assert stream.writes == 3


def test_threshold_size_stays_fixed():
    assert use_chunked(HttpRequest(), CHUNK_SIZE) is False
    assert use_chunked(HttpRequest(), CHUNK_SIZE + 1) is True


def test_empty_payload_writes_nothing():
    assert _send(Payload.empty()) == b""


def test_empty_payload_with_chunked_header_writes_terminator():
    assert _send(Payload.empty(), [("Transfer-Encoding", "chunked")]) == b"0\r\n\r\n"


def test_payload_is_consumed_once():
    payload = Payload.from_bytes(b"once")
    _send(payload)
    with pytest.raises(RuntimeError):
        payload.into_reader()


def test_from_text_encodes_and_sizes():
    payload = Payload.from_text("héllo")
    assert payload.size == 6
    assert payload.is_empty is False
    assert Payload.empty().is_empty is True
