import io
import socket
from email.message import Message
from unittest import mock
from urllib.error import HTTPError

import pytest

from httpfromtcp.headers import Headers
from httpfromtcp.httpserver import (
    default_response,
    proxy_httpbin,
    route,
    serve_default,
)
from httpfromtcp.request import Request, RequestLine
from httpfromtcp.response import StatusCode
from httpfromtcp.server import serve


def _request(target, headers=None):
    return Request(
        request_line=RequestLine("GET", target, "1.1"),
        headers=Headers(headers or {}),
    )


class _FakeUpstream:
    def __init__(self, body, status=200, headers=()):
        self._body = io.BytesIO(body)
        self.status = status
        self.headers = Message()
        for name, value in headers:
            self.headers[name] = value

    def read(self, size=-1):
        return self._body.read(size)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


def _decode_chunked(data):
    body = b""
    sizes = []
    while True:
        size_line, _, rest = data.partition(b"\r\n")
        size = int(size_line, 16)
        sizes.append(size)
        if size == 0:
            return body, sizes, rest
        body += rest[:size]
        assert rest[size:size + 2] == b"\r\n"
        data = rest[size + 2:]


def _split(output):
    head, _, body = output.partition(b"\r\n\r\n")
    lines = head.split(b"\r\n")
    return lines[0], lines[1:], body


@pytest.mark.parametrize(
    "target, status, title",
    [
        ("/yourproblem", StatusCode.BAD_REQUEST, b"<title>400 Bad Request</title>"),
        ("/myproblem", StatusCode.INTERNAL_SERVER_ERROR, b"<title>500 Internal Server Error</title>"),
        ("/", StatusCode.OK, b"<title>200 OK</title>"),
        ("/anything/else", StatusCode.OK, b"<title>200 OK</title>"),
    ],
)
def test_default_response_pages(target, status, title):
    got_status, headers, body = default_response(_request(target))
    assert got_status == status
    assert title in body
    assert headers["Content-Length"] == str(len(body))
    assert headers["Connection"] == "close"
    assert headers["Content-Type"] == "text/html"


def test_default_response_keeps_request_headers():
    request = _request("/", {"host": "localhost:42069"})
    _, headers, _ = default_response(request)
    assert headers["host"] == "localhost:42069"
    assert dict(request.headers) == {"host": "localhost:42069"}


def test_serve_default_writes_full_response():
    stream = io.BytesIO()
    serve_default(stream, _request("/yourproblem"))
    status_line, header_lines, body = _split(stream.getvalue())
    assert status_line == b"HTTP/1.1 400 Bad Request"
    assert f"Content-Length: {len(body)}".encode() in header_lines
    assert b"Content-Type: text/html" in header_lines
    assert b"<p>Your request honestly kinda sucked.</p>" in body


def test_route_uses_default_pages():
    stream = io.BytesIO()
    route(stream, _request("/myproblem"))
    assert stream.getvalue().startswith(b"HTTP/1.1 500 Internal Server Error\r\n")


def test_proxy_relays_chunked_body():
    upstream = _FakeUpstream(
        b"hello",
        headers=[("Content-Type", "application/json"), ("Content-Length", "5")],
    )
    stream = io.BytesIO()
    with mock.patch("urllib.request.urlopen", return_value=upstream) as opener:
        proxy_httpbin(stream, _request("/httpbin/stream/1"))
    opener.assert_called_once_with("https://httpbin.org/stream/1")
    status_line, header_lines, body = _split(stream.getvalue())
    assert status_line == b"HTTP/1.1 200 OK"
    assert b"Content-Type: application/json" in header_lines
    assert b"Transfer-Encoding: chunked" in header_lines
    assert not any(line.lower().startswith(b"content-length") for line in header_lines)
    assert body == b"5\r\nhello\r\n0\r\n\r\n"


def test_proxy_splits_large_body_into_chunks():
    payload = bytes(range(256)) * 20
    stream = io.BytesIO()
    with mock.patch("urllib.request.urlopen", return_value=_FakeUpstream(payload)):
        proxy_httpbin(stream, _request("/httpbin/bytes"))
    _, _, body = _split(stream.getvalue())
    decoded, sizes, trailing = _decode_chunked(body)
    assert decoded == payload
    assert sizes[-1] == 0
    assert len(sizes) > 2
    assert max(sizes) <= 1028
    assert trailing == b"\r\n"


def test_proxy_relays_upstream_error_status():
    hdrs = Message()
    hdrs["Content-Type"] = "text/html"
    error = HTTPError(
        "https://httpbin.org/status/500", 500, "INTERNAL SERVER ERROR", hdrs, io.BytesIO(b"")
    )
    stream = io.BytesIO()
    with mock.patch("urllib.request.urlopen", side_effect=error):
        proxy_httpbin(stream, _request("/httpbin/status/500"))
    output = stream.getvalue()
    assert output.startswith(b"HTTP/1.1 500 Internal Server Error\r\n")
    assert output.endswith(b"\r\n\r\n0\r\n\r\n")


def test_proxy_rejects_target_without_prefix():
    with pytest.raises(ValueError):
        proxy_httpbin(io.BytesIO(), _request("/get"))


def test_route_sends_httpbin_targets_to_proxy():
    stream = io.BytesIO()
    with mock.patch("urllib.request.urlopen", return_value=_FakeUpstream(b"ok")) as opener:
        route(stream, _request("/httpbin/get"))
    opener.assert_called_once_with("https://httpbin.org/get")
    assert stream.getvalue().endswith(b"2\r\nok\r\n0\r\n\r\n")


def test_route_over_tcp():
    with serve(0, route) as srv:
        with socket.create_connection(("127.0.0.1", srv.port), timeout=5) as client:
            client.sendall(b"GET /yourproblem HTTP/1.1\r\nHost: localhost\r\n\r\n")
            client.shutdown(socket.SHUT_WR)
            chunks = []
            while True:
                chunk = client.recv(4096)
                if not chunk:
                    break
                chunks.append(chunk)
    reply = b"".join(chunks)
    status_line, header_lines, body = _split(reply)
    assert status_line == b"HTTP/1.1 400 Bad Request"
    assert b"host: localhost" in header_lines
    assert f"Content-Length: {len(body)}".encode() in header_lines
    assert body.endswith(b"</html>")