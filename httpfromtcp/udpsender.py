"""Send lines typed on standard input as UDP datagrams."""

from __future__ import annotations

import argparse
import socket
import sys
from collections.abc import Iterable, Iterator, Sequence
from typing import TextIO

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 42069
PROMPT = "> "


def send_lines(
    lines: Iterable[str | bytes], host: str = DEFAULT_HOST, port: int = DEFAULT_PORT
) -> int:
    """Send each line as one datagram; return how many were sent."""
    family, sock_type, proto, _, address = socket.getaddrinfo(
        host, port, type=socket.SOCK_DGRAM
    )[0]
    sent = 0
    with socket.socket(family, sock_type, proto) as sock:
        sock.connect(address)
        for line in lines:
            payload = line.encode("utf-8") if isinstance(line, str) else bytes(line)
            sock.send(payload)
            sent += 1
    return sent


def _prompted_lines(stream: TextIO) -> Iterator[str]:
    while True:
        print(PROMPT, end="", flush=True)
        line = stream.readline()
        if not line:
            return
        yield line


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Send standard input lines over UDP.")
    parser.add_argument("--host", default=DEFAULT_HOST, help="destination host")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT, help="destination port")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    try:
        send_lines(_prompted_lines(sys.stdin), args.host, args.port)
    except OSError as exc:
        print(f"UDP connection attempt failed: {exc}")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())