# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Logging helpers for httpwire.

A level spec is either a bare level (`DEBUG`) or a comma-separated list mixing one
root level with per-logger overrides, e.g. `WARNING,httpwire.http.pipeline=DEBUG`.
"""

from __future__ import annotations

import logging
import os

DEFAULT_LOG_LEVEL = os.getenv("HTTPWIRE_LOG_LEVEL", "WARNING").upper()


def _level(name: str) -> int:
    value = getattr(logging, name.strip().upper(), None)
    return value if isinstance(value, int) else logging.WARNING


def parse_level_spec(spec: str) -> tuple[int, dict[str, int]]:
    """Split a level spec into the root level and per-logger levels."""
    root = logging.WARNING
    overrides: dict[str, int] = {}
    for part in spec.split(","):
        part = part.strip()
        if not part:
            continue
        name, sep, level = part.partition("=")
        if sep:
            overrides[name.strip()] = _level(level)
        else:
            root = _level(name)
    return root, overrides


def setup_logging(level: str | None = None) -> None:
    """Configure standard logging for CLI/library use."""
    root, overrides = parse_level_spec(level or DEFAULT_LOG_LEVEL)
    logging.basicConfig(
        level=root,
        format="%(levelname)s %(name)s: %(message)s",
    )
    for name, logger_level in overrides.items():
        logging.getLogger(name).setLevel(logger_level)


__all__ = ["parse_level_spec", "setup_logging"]
