# httpfromtcp

An HTTP/1.1 server written straight on top of TCP sockets. It uses only the
standard library. The package has these modules:

- **`httpfromtcp.headers`**: `Headers` is a `dict` of header fields. Its
  `parse(data)` method reads at most one header line and returns
  `(consumed, done)`. Field names are lower-cased and checked against the
  token characters. A repeated field is joined onto the earlier value with
  `", "`. `get(key, default="")` looks a field up without regard to case.
  A malformed line raises `HeaderError`.
- **`httpfromtcp.request`**: an incremental request parser.
  - `Request.feed(data)` parses as much of `data` as it can and returns the
    number of bytes it consumed.
  - `request_from_reader(reader)` reads one whole request from a socket or
    binary stream. The object passed in needs a `recv`, `read1` or `read`
    method. A whole request is the request line, the headers and a body sized
    by `Content-Length`.
  - Bad input raises `RequestError`, and so does a stream that ends too early.
  - A parsed `Request` holds the following:
    - `request_line`, a `RequestLine` with `method`, `request_target` and
      `http_version`
    - `headers`
    - `body`, a `bytearray`
    - `state`, a `RequestState`
- **`httpfromtcp.response`**: `ResponseWriter(stream)` writes the parts of a
  response to any object with a `write` method. It can write these parts:
  - a status line
  - a header block
  - a plain body
  - chunks of a chunked body, and the final chunk that ends it
  - trailers
  - a complete plain-text error response

  `writer.state` is a `WriterState` value that records which part comes next.
  The module also provides `StatusCode` (200, 400 and 500) and
  `get_default_headers(content_length)`. `write_status_line` writes nothing
  for a status code outside those three.
- **`httpfromtcp.server`**: `serve(port, handler)` listens on all interfaces
  and returns a running `Server`.
  - Each connection is handled in its own thread. The request is parsed and
    passed to `handler(stream, request)`. The handler writes the response to
    `stream`, and the connection closes when the handler returns.
  - If the request does not parse, the server itself answers
    `400 Bad Request` with the error message as the body.
  - `Server` has `address`, `port` and `closed` properties and a `close()`
    method. It also works as a context manager.
- **`httpfromtcp.httpserver`**: the bundled demo application. It has these
  functions:
  - `route`
  - `default_response`
  - `serve_default`
  - `proxy_httpbin`
  - `main`
- **`httpfromtcp.tcplistener`**: a listener that prints each request it
  receives. `format_request(request)` renders the printed report.
- **`httpfromtcp.udpsender`**: sends lines as UDP datagrams.
  `send_lines(lines, host="127.0.0.1", port=42069)` sends each line as one
  datagram and returns how many it sent.

## Installation

```
pip install .
```

To install with the test dependencies and run the tests:

```
pip install ".[test]"
pytest
```

## Commands

By default every command listens on, or sends to, port 42069. Use `--port` to
change the port.

```
httpfromtcp-server [--port PORT]
```

Runs the demo HTTP server. The response depends on the path:

- `/yourproblem` returns an HTML `400` page.
- `/myproblem` returns an HTML `500` page.
- A path beginning with `/httpbin/` is fetched from `https://httpbin.org/`
  with the prefix removed.
  - The reply is relayed with chunked transfer encoding.
  - The upstream `Content-Length` and `Transfer-Encoding` headers are dropped.
  - The status line is written only when the upstream status is 200, 400 or
    500.
- Any other path returns an HTML `200` page.

The HTML pages echo back the request's headers, with `Connection: close`,
`Content-Type: text/html` and `Content-Length` added. Stop the server with
Ctrl-C or SIGTERM.

```
httpfromtcp-listener [--host HOST] [--port PORT]
```

Accepts TCP connections one at a time. It parses each one as an HTTP request
and prints the request line, the headers and the body. It sends no reply. It
exits if a connection does not carry a valid, complete request. This is handy
for looking at what a client really sends, for example:

```
curl -X POST -d 'hello' localhost:42069/submit
```

```
httpfromtcp-udpsender [--host HOST] [--port PORT]
```

Reads lines from standard input after a `> ` prompt and sends each line as a
UDP datagram. The default host is `127.0.0.1`. The command stops at end of
input.

## Using the library

### Writing your own server

```python
from httpfromtcp.response import ResponseWriter, StatusCode, get_default_headers
from httpfromtcp.server import serve


def hello(stream, request):
    body = f"you asked for {request.request_line.request_target}\n".encode()
    writer = ResponseWriter(stream)
    writer.write_status_line(StatusCode.OK)
    writer.write_headers(get_default_headers(len(body)))
    writer.write_body(body)


with serve(8080, hello):
    input("serving on port 8080, press Enter to stop\n")
```

### Parsing a request

```python
import io

from httpfromtcp.request import request_from_reader

raw = (
    b"POST /submit HTTP/1.1\r\n"
    b"Host: localhost:42069\r\n"
    b"Content-Length: 13\r\n"
    b"\r\n"
    b"hello world!\n"
)
request = request_from_reader(io.BytesIO(raw))
print(request.request_line.method)   # POST
print(request.headers.get("Host"))   # localhost:42069
print(bytes(request.body))           # b'hello world!\n'
```

### Writing a chunked response

```python
import io

from httpfromtcp.response import ResponseWriter, StatusCode

out = io.BytesIO()
writer = ResponseWriter(out)
writer.write_status_line(StatusCode.OK)
writer.write_headers({"Transfer-Encoding": "chunked"})
writer.write_chunked_body(b"hello")
writer.write_chunked_body_done()
```

## What it does not do

- Only `HTTP/1.1` request lines are accepted.
- Request bodies are read only when `Content-Length` is given. Without that
  header the body is ignored, and chunked request bodies are not decoded.
- Each connection carries a single request and response. There is no
  keep-alive and no pipelining.
- `ResponseWriter` knows the reason phrases for 200, 400 and 500 only.
- There is no TLS, no static file serving and no routing beyond the demo
  paths listed above.