"""Incremental parsing of HTTP/1.1 requests."""

from __future__ import annotations

import enum
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from httpfromtcp.headers import HeaderError, Headers

CRLF = b"\r\n"
_READ_SIZE = 4096
_ENCODING = "utf-8"
_ERRORS = "surrogateescape"


class RequestError(ValueError):
    """Raised when a request is malformed or ends too early."""


class RequestState(enum.Enum):
    INITIALIZED = enum.auto()
    PARSING_HEADERS = enum.auto()
    PARSING_BODY = enum.auto()
    DONE = enum.auto()


@dataclass
class RequestLine:
    method: str = ""
    request_target: str = ""
    http_version: str = ""

    @classmethod
    def _from_string(cls, line: str) -> RequestLine:
        parts = line.split(" ")
        if len(parts) != 3:
            raise RequestError(f"poorly formatted request-line: {line}")
        method, target, version = parts
        if not all("A" <= char <= "Z" for char in method):
            raise RequestError(f"invalid method: {method}")
        version_parts = version.split("/")
        if version_parts[0] != "HTTP":
            raise RequestError(f"invalid HTTP version: {version_parts[0]}")
        if len(version_parts) < 2 or version_parts[1] != "1.1":
            raise RequestError(f"invalid HTTP version: {version}")
        return cls(method=method, request_target=target, http_version=version_parts[1])


@dataclass
class Request:
    """A request being parsed, or fully parsed once ``state`` is DONE."""

    request_line: RequestLine = field(default_factory=RequestLine)
    headers: Headers = field(default_factory=Headers)
    body: bytearray = field(default_factory=bytearray)
    status: int = 0
    state: RequestState = RequestState.INITIALIZED

    def feed(self, data: bytes) -> int:
        """Parse as much of ``data`` as possible; return bytes consumed."""
        data = bytes(data)
        consumed = 0
        while self.state is not RequestState.DONE:
            before = self.state
            step = self._parse_single(data[consumed:])
            consumed += step
            if step == 0 and self.state is before:
                break
        return consumed

    def _parse_single(self, data: bytes) -> int:
        if self.state is RequestState.INITIALIZED:
            return self._parse_request_line(data)
        if self.state is RequestState.PARSING_HEADERS:
            try:
                consumed, done = self.headers.parse(data)
            except HeaderError as exc:
                raise RequestError(str(exc)) from exc
            if done:
                self.state = RequestState.PARSING_BODY
            return consumed
        if self.state is RequestState.PARSING_BODY:
            return self._parse_body(data)
        raise RequestError(f"unknown parser state: {self.state}")

    def _parse_request_line(self, data: bytes) -> int:
        end = data.find(CRLF)
        if end == -1:
            return 0
        line = data[:end].decode(_ENCODING, _ERRORS)
        self.request_line = RequestLine._from_string(line)
        self.state = RequestState.PARSING_HEADERS
        return end + len(CRLF)

    def _parse_body(self, data: bytes) -> int:
        declared = self.headers.get("Content-Length")
        if not declared:
            self.state = RequestState.DONE
            return 0
        try:
            content_length = int(declared)
        except ValueError:
            self.state = RequestState.DONE
            return 0
        if content_length < 0:
            raise RequestError(f"invalid Content-Length: {content_length}")

        self.body += data
        if len(self.body) > content_length:
            raise RequestError(
                f"body length {len(self.body)} is greater than "
                f"Content-Length {content_length} in headers"
            )
        if len(self.body) == content_length:
            self.state = RequestState.DONE
        return len(data)


def _read_function(reader: Any) -> Callable[[int], bytes]:
    for name in ("recv", "read1", "read"):
        method = getattr(reader, name, None)
        if callable(method):
            return method
    raise TypeError("reader must provide recv(), read1() or read()")


def request_from_reader(reader: Any) -> Request:
    """Read and parse one request from a socket or binary stream.

    Raises RequestError if the data is malformed or the stream ends
    before the request is complete.
    """
    read = _read_function(reader)
    request = Request()
    pending = bytearray()
    while request.state is not RequestState.DONE:
        chunk = read(_READ_SIZE)
        if not chunk:
            raise RequestError("unexpected end of stream before the request was complete")
        pending += chunk
        consumed = request.feed(pending)
        del pending[:consumed]
    return request