"""An HTTP server with fixed HTML pages and a chunked httpbin proxy."""

from __future__ import annotations

import argparse
import logging
import signal
import threading
import urllib.error
import urllib.request
from collections.abc import Sequence

from httpfromtcp.headers import Headers
from httpfromtcp.request import Request
from httpfromtcp.response import ResponseWriter, StatusCode
from httpfromtcp.server import Writable, serve

logger = logging.getLogger(__name__)

DEFAULT_PORT = 42069
HTTPBIN_PREFIX = "/httpbin/"
HTTPBIN_URL = "https://httpbin.org/"
_PROXY_CHUNK_SIZE = 1028
_SKIPPED_UPSTREAM_HEADERS = frozenset({"content-length", "transfer-encoding"})

_BAD_REQUEST_PAGE = """<html>
  <head>
    <title>400 Bad Request</title>
  </head>
  <body>
    <h1>Bad Request</h1>
    <p>Your request honestly kinda sucked.</p>
  </body>
</html>"""

_SERVER_ERROR_PAGE = """<html>
  <head>
    <title>500 Internal Server Error</title>
  </head>
  <body>
    <h1>Internal Server Error</h1>
    <p>Okay, you know what? This one is on me.</p>
  </body>
</html>"""

_OK_PAGE = """<html>
  <head>
    <title>200 OK</title>
  </head>
  <body>
    <h1>Success!</h1>
    <p>Your request was an absolute banger.</p>
  </body>
</html>"""

_PAGES = {
    "/yourproblem": (StatusCode.BAD_REQUEST, _BAD_REQUEST_PAGE),
    "/myproblem": (StatusCode.INTERNAL_SERVER_ERROR, _SERVER_ERROR_PAGE),
}


def route(stream: Writable, request: Request) -> None:
    """Send ``/httpbin/`` targets to the proxy and everything else to the pages."""
    if request.request_line.request_target.startswith(HTTPBIN_PREFIX):
        proxy_httpbin(stream, request)
    else:
        serve_default(stream, request)


def default_response(request: Request) -> tuple[StatusCode, Headers, bytes]:
    """Choose the page for ``request``; return status, headers and body.

    The response headers are the request's headers plus connection,
    content type and content length fields.
    """
    status, page = _PAGES.get(
        request.request_line.request_target, (StatusCode.OK, _OK_PAGE)
    )
    body = page.encode("utf-8")
    headers = Headers(request.headers)
    headers["Connection"] = "close"
    headers["Content-Type"] = "text/html"
    headers["Content-Length"] = str(len(body))
    return status, headers, body


def serve_default(stream: Writable, request: Request) -> None:
    """Write the fixed HTML response for ``request``."""
    status, headers, body = default_response(request)
    writer = ResponseWriter(stream)
    writer.write_status_line(status)
    writer.write_headers(headers)
    writer.write_body(body)


def _open_upstream(url: str):
    try:
        return urllib.request.urlopen(url)
    except urllib.error.HTTPError as exc:
        return exc


def proxy_httpbin(stream: Writable, request: Request) -> None:
    """Fetch the target from httpbin and relay it with a chunked body."""
    target = request.request_line.request_target
    if not target.startswith(HTTPBIN_PREFIX):
        raise ValueError(f"target does not start with {HTTPBIN_PREFIX}: {target}")
    url = HTTPBIN_URL + target[len(HTTPBIN_PREFIX):]

    with _open_upstream(url) as upstream:
        headers = Headers()
        for name, value in upstream.headers.items():
            if name.lower() not in _SKIPPED_UPSTREAM_HEADERS:
                headers.setdefault(name, value)
        headers["Transfer-Encoding"] = "chunked"

        writer = ResponseWriter(stream)
        writer.write_status_line(upstream.status)
        writer.write_headers(headers)
        for chunk in iter(lambda: upstream.read(_PROXY_CHUNK_SIZE), b""):
            writer.write_chunked_body(chunk)
        writer.write_chunked_body_done()


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Serve HTTP over raw TCP.")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT, help="port to listen on")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(message)s")
    try:
        server = serve(args.port, route)
    except OSError as exc:
        logger.error("Error starting server: %s", exc)
        return 1

    stop = threading.Event()

    def _request_stop(signum, frame):
        stop.set()

    previous = {
        sig: signal.signal(sig, _request_stop) for sig in (signal.SIGINT, signal.SIGTERM)
    }
    try:
        with server:
            logger.info("Server started on port %d", args.port)
            while not stop.wait(0.5):
                pass
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)
    logger.info("Server gracefully stopped")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())