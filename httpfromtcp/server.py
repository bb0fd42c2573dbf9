"""A threaded TCP server that parses HTTP requests and hands them to a handler."""

from __future__ import annotations

import logging
import socket
import threading
from collections.abc import Callable
from typing import Protocol

from httpfromtcp.request import Request, RequestError, request_from_reader
from httpfromtcp.response import ResponseWriter, StatusCode

logger = logging.getLogger(__name__)

_POLL_INTERVAL = 0.1


class Writable(Protocol):
    def write(self, data: bytes) -> int: ...


Handler = Callable[[Writable, Request], None]


class _ConnectionStream:
    """A minimal binary stream that sends everything written to a socket."""

    def __init__(self, conn: socket.socket) -> None:
        self._conn = conn

    def write(self, data: bytes) -> int:
        self._conn.sendall(data)
        return len(data)


class Server:
    """Accepts connections on ``listener`` in a background thread.

    Each connection is served in its own thread: the request is parsed and
    passed to ``handler`` together with a writable stream for the response.
    Malformed requests are answered with 400 Bad Request.
    """

    def __init__(self, listener: socket.socket, handler: Handler) -> None:
        self._listener = listener
        self._handler = handler
        self._closed = threading.Event()
        listener.settimeout(_POLL_INTERVAL)
        self._thread = threading.Thread(
            target=self._accept_loop, name="httpfromtcp-accept", daemon=True
        )
        self._thread.start()

    @property
    def address(self) -> tuple:
        return self._listener.getsockname()

    @property
    def port(self) -> int:
        return self.address[1]

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def close(self) -> None:
        """Stop accepting connections and close the listening socket."""
        if self._closed.is_set():
            return
        self._closed.set()
        if self._thread is not threading.current_thread():
            self._thread.join()
        self._listener.close()

    def __enter__(self) -> Server:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _accept_loop(self) -> None:
        while not self._closed.is_set():
            try:
                conn, _ = self._listener.accept()
            except socket.timeout:
                continue
            except OSError as exc:
                if not self._closed.is_set():
                    logger.error("Unable to accept connection: %s", exc)
                    self._closed.wait(_POLL_INTERVAL)
                continue
            conn.settimeout(None)
            threading.Thread(target=self._handle, args=(conn,), daemon=True).start()

    def _handle(self, conn: socket.socket) -> None:
        with conn:
            stream = _ConnectionStream(conn)
            try:
                try:
                    request = request_from_reader(conn)
                except RequestError as exc:
                    ResponseWriter(stream).write_error(StatusCode.BAD_REQUEST, str(exc))
                    return
                self._handler(stream, request)
            except OSError as exc:
                logger.error("Connection error: %s", exc)
            except Exception:
                logger.exception("Handler failed")


def serve(port: int, handler: Handler) -> Server:
    """Listen on ``port`` on all interfaces and start serving with ``handler``."""
    listener = socket.create_server(("", port))
    return Server(listener, handler)