"""Writing HTTP/1.1 responses to a byte stream."""

from __future__ import annotations

import enum
from collections.abc import Mapping
from typing import BinaryIO

from httpfromtcp.headers import Headers

_ENCODING = "utf-8"
_ERRORS = "surrogateescape"


class StatusCode(enum.IntEnum):
    OK = 200
    BAD_REQUEST = 400
    INTERNAL_SERVER_ERROR = 500


_STATUS_LINES = {
    StatusCode.OK: b"HTTP/1.1 200 OK\r\n",
    StatusCode.BAD_REQUEST: b"HTTP/1.1 400 Bad Request\r\n",
    StatusCode.INTERNAL_SERVER_ERROR: b"HTTP/1.1 500 Internal Server Error\r\n",
}


class WriterState(enum.Enum):
    STATUS_LINE = enum.auto()
    HEADERS = enum.auto()
    BODY = enum.auto()
    COMPLETE = enum.auto()


def get_default_headers(content_length: int) -> Headers:
    """Headers for a plain-text response of the given length."""
    headers = Headers()
    headers["Content-Length"] = str(content_length)
    headers["Connection"] = "close"
    headers["Content-Type"] = "text/plain"
    return headers


def _encode(text: str) -> bytes:
    return text.encode(_ENCODING, _ERRORS)


class ResponseWriter:
    """Writes the parts of a response to a binary stream.

    ``state`` records which part of the response comes next; errors from
    the stream propagate to the caller.
    """

    def __init__(self, stream: BinaryIO) -> None:
        self.stream = stream
        self.state = WriterState.STATUS_LINE

    def _write(self, data: bytes) -> int:
        self.stream.write(data)
        return len(data)

    def write_status_line(self, status_code: int) -> None:
        """Write the status line; unknown codes write nothing."""
        try:
            line = _STATUS_LINES[StatusCode(status_code)]
        except ValueError:
            line = b""
        self._write(line)
        self.state = WriterState.HEADERS

    def write_headers(self, headers: Mapping[str, str]) -> None:
        """Write the header fields followed by the blank separator line."""
        block = "".join(f"{name}: {value}\r\n" for name, value in headers.items())
        self._write(_encode(block + "\r\n"))
        self.state = WriterState.BODY

    def write_body(self, data: bytes) -> int:
        """Write raw body bytes and return how many were written."""
        return self._write(bytes(data))

    def write_error(self, code: int, message: str) -> None:
        """Write a complete plain-text response carrying ``message``."""
        body = _encode(message)
        self.write_status_line(code)
        headers = Headers()
        headers["Content-Type"] = "text/plain"
        headers["Content-Length"] = str(len(body))
        self.write_headers(headers)
        self._write(body)
        self.state = WriterState.COMPLETE

    def write_chunked_body(self, data: bytes) -> int:
        """Write one chunk of a chunked body; returns bytes written."""
        data = bytes(data)
        chunk = f"{len(data):X}\r\n".encode("ascii") + data + b"\r\n"
        return self._write(chunk)

    def write_chunked_body_done(self) -> int:
        """Write the terminating zero-length chunk."""
        written = self._write(b"0\r\n\r\n")
        self.state = WriterState.COMPLETE
        return written

    def write_trailers(self, headers: Mapping[str, str]) -> None:
        """Write the last chunk followed by trailer fields."""
        block = "0\r\n" + "".join(f"{name}: {value}\n" for name, value in headers.items())
        self._write(_encode(block + "\r\n"))
        self.state = WriterState.COMPLETE