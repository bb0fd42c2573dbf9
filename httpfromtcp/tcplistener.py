"""A TCP listener that prints every HTTP request it receives."""

from __future__ import annotations

import argparse
import socket
from collections.abc import Sequence

from httpfromtcp.request import Request, RequestError, request_from_reader

DEFAULT_PORT = 42069


def format_request(request: Request) -> str:
    """Render a parsed request as a human-readable report."""
    line = request.request_line
    lines = [
        "Request line:",
        f"- Method: {line.method}",
        f"- Target: {line.request_target}",
        f"- Version: {line.http_version}",
        "Headers:",
    ]
    lines.extend(f"- {name}: {value}" for name, value in request.headers.items())
    lines.append("Body:")
    lines.append(bytes(request.body).decode("utf-8", "replace"))
    return "\n".join(lines) + "\n"


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Print HTTP requests received over TCP.")
    parser.add_argument("--host", default="", help="address to listen on")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT, help="port to listen on")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    try:
        listener = socket.create_server((args.host, args.port))
    except OSError as exc:
        print(f"Unable to listen on TCP port: {exc}")
        return 1

    with listener:
        while True:
            try:
                conn, address = listener.accept()
            except OSError as exc:
                print(f"Unable to accept connection: {exc}")
                return 1
            with conn:
                print(f"Connection: {address[0]}:{address[1]} has been accepted")
                try:
                    request = request_from_reader(conn)
                except RequestError:
                    print("Unable to generate request from connection")
                    return 1
                print(format_request(request), end="", flush=True)


if __name__ == "__main__":
    raise SystemExit(main())