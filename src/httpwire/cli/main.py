# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""httpwire CLI."""

from __future__ import annotations

import argparse
import sys

from ..config import HttpSettings, load_http_settings
from ..errors import categorize_exception, error_category_to_reason
from ..http import HttpResponse, create_default_http_client
from ..http.headers import parse_header_line
from ..log import setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="httpwire: issue one HTTP/1.1 request and print the response")
    parser.add_argument("url", help="Target URL (http or https)")
    parser.add_argument("-X", "--method", default=None, help="Request method (default GET, or POST with --data)")
    parser.add_argument(
        "-H",
        "--header",
        action="append",
        default=[],
        metavar="'Name: value'",
        help="Extra request header; may be repeated",
    )
    parser.add_argument("-d", "--data", default=None, help="Request body")
    parser.add_argument("--max-redirects", type=int, default=None, help="Redirect budget")
    parser.add_argument("--connect-timeout", type=float, default=None, help="Connect timeout in seconds")
    parser.add_argument("--read-timeout", type=float, default=None, help="Read timeout in seconds")
    parser.add_argument(
        "-i",
        "--include",
        action="store_true",
        help="Print the status line and response headers before the body",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level, optionally per logger, e.g. WARNING,httpwire.http.pipeline=DEBUG (default from HTTPWIRE_LOG_LEVEL)",
    )
    return parser


def _parse_headers(raw_headers: list[str]) -> list[tuple[str, str]]:
    headers = []
    for raw in raw_headers:
        parsed = parse_header_line(raw)
        if parsed is None:
            raise ValueError(f"invalid header: {raw!r}")
        headers.append(parsed)
    return headers


def _print_head(response: HttpResponse) -> None:
    print(f"{response.http_version} {response.status} {response.reason}".rstrip())
    for name, value in response.headers:
        print(f"{name}: {value}")
    print()


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    settings: HttpSettings = load_http_settings()
    if args.connect_timeout is not None:
        settings.timeout_connect = args.connect_timeout
    if args.read_timeout is not None:
        settings.timeout_read = args.read_timeout

    try:
        headers = _parse_headers(args.header)
    except ValueError as exc:
        parser.error(str(exc))

    method = args.method or ("POST" if args.data is not None else "GET")
    client = create_default_http_client(settings)
    try:
        with client.request(
            method,
            args.url,
            headers=headers,
            body=args.data,
            max_redirects=args.max_redirects,
        ) as response:
            if args.include:
                _print_head(response)
                sys.stdout.flush()
            for chunk in response.iter_bytes():
                sys.stdout.buffer.write(chunk)
            sys.stdout.buffer.flush()
    except Exception as exc:  # noqa: BLE001
        reason = error_category_to_reason(categorize_exception(exc))
        print(f"error: {reason}: {exc}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
