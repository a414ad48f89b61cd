# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Transport exports."""

from .connector import Connector, default_tls_context, resolve_host
from .streams import ChunkedWriter, PlainTransport, TlsTransport, Transport, TransportReader

__all__ = [
    "ChunkedWriter",
    "Connector",
    "PlainTransport",
    "TlsTransport",
    "Transport",
    "TransportReader",
    "default_tls_context",
    "resolve_host",
]
