# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Header utilities.

HTTP header field names are case-insensitive (RFC 9110). Requests and responses keep
headers as an ordered sequence of (name, value) pairs so duplicates such as
`Set-Cookie` survive, and every lookup goes through these helpers.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

HeaderList = tuple[tuple[str, str], ...]


def normalize_headers(headers: Mapping[str, str] | Iterable[tuple[str, str]] | None) -> HeaderList:
    """Return an ordered tuple of (name, value) string pairs, dropping empty names."""
    if not headers:
        return ()
    items = headers.items() if isinstance(headers, Mapping) else headers
    out: list[tuple[str, str]] = []
    for key, value in items:
        if key is None:
            continue
        name = str(key).strip()
        if not name:
            continue
        out.append((name, "" if value is None else str(value)))
    return tuple(out)


def header_values(headers: Iterable[tuple[str, str]], name: str) -> list[str]:
    """All values for `name`, in order of appearance."""
    lower = name.lower()
    return [value for key, value in headers if key.lower() == lower]


def header_value(headers: Iterable[tuple[str, str]], name: str, default: str | None = None) -> str | None:
    """First value for `name` using case-insensitive matching."""
    lower = name.lower()
    for key, value in headers:
        if key.lower() == lower:
            return value.strip()
    return default


def parse_header_line(line: str) -> tuple[str, str] | None:
    """Split `Name: value`; returns None when the line has no colon or an empty name."""
    name, sep, value = line.partition(":")
    name = name.strip()
    if not sep or not name:
        return None
    return name, value.strip()


__all__ = ["HeaderList", "header_value", "header_values", "normalize_headers", "parse_header_line"]
