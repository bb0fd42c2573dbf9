"""HTTP header field parsing."""

from __future__ import annotations

CRLF = b"\r\n"

_TOKEN_CHARS = frozenset(b"abcdefghijklmnopqrstuvwxyz0123456789!#$%&'*+-.^_`|~")


class HeaderError(ValueError):
    """Raised when a header line is malformed."""


class Headers(dict):
    """Header fields keyed by lower-cased field name."""

    def parse(self, data: bytes) -> tuple[int, bool]:
        """Parse at most one header line from ``data``.

        Returns ``(consumed, done)``. ``consumed`` is 0 when no complete
        line is available yet. ``done`` is true when the blank line that
        ends the header section was consumed.
        """
        data = bytes(data)
        end = data.find(CRLF)
        if end == -1:
            return 0, False
        if end == 0:
            return len(CRLF), True

        line = data[:end]
        colon = line.find(b":")
        if colon == -1:
            raise HeaderError("invalid format: colon not found")
        if colon > 0 and line[colon - 1 : colon] == b" ":
            raise HeaderError("invalid format: whitespace between field name and colon")

        name_bytes = line[:colon].strip().lower()
        if not set(name_bytes) <= _TOKEN_CHARS:
            raise HeaderError("field name contains invalid characters")
        name = name_bytes.decode("ascii")
        value = line[colon + 1 :].strip().decode("utf-8", "surrogateescape")

        existing = super().get(name)
        self[name] = value if existing is None else f"{existing}, {value}"
        return end + len(CRLF), False

    def get(self, key: str, default: str = "") -> str:
        """Look up a field case-insensitively."""
        return super().get(key.lower(), default)