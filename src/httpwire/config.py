# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Configuration helpers for httpwire."""

import os
from dataclasses import dataclass

from .version import __version__

DEFAULT_USER_AGENT = f"httpwire/{__version__}"


def _float_env(name: str, default: float) -> float:
    try:
        value = os.getenv(name)
        parsed = float(value) if value is not None else default
    except ValueError:
        return default
    return parsed if parsed >= 0 else default


def _int_env(name: str, default: int) -> int:
    try:
        value = os.getenv(name)
        parsed = int(value) if value is not None else default
    except ValueError:
        return default
    return parsed if parsed >= 0 else default


@dataclass
class HttpSettings:
    """Client defaults. Timeouts are seconds; 0 disables the timeout."""

    timeout_connect: float = 0.0
    timeout_read: float = 0.0
    timeout_write: float = 0.0
    max_redirects: int = 5
    user_agent: str = DEFAULT_USER_AGENT

    @classmethod
    def from_env(cls) -> "HttpSettings":
        """Create settings from environment variables (evaluated at call time)."""
        return cls(
            timeout_connect=_float_env("HTTPWIRE_TIMEOUT_CONNECT", cls.timeout_connect),
            timeout_read=_float_env("HTTPWIRE_TIMEOUT_READ", cls.timeout_read),
            timeout_write=_float_env("HTTPWIRE_TIMEOUT_WRITE", cls.timeout_write),
            max_redirects=_int_env("HTTPWIRE_MAX_REDIRECTS", cls.max_redirects),
            user_agent=os.getenv("HTTPWIRE_USER_AGENT", cls.user_agent),
        )


def load_http_settings() -> HttpSettings:
    """Load HTTP settings from environment with sensible defaults."""
    return HttpSettings.from_env()
