"""Read and parse HTTP/1.1 responses carrying a JSON body.

The parser works on the raw bytes received from the socket: it checks the
status-line prefix, pulls out the status code, collects the header block
and decodes whatever follows the blank line as JSON.
"""

import json
import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from httperrors import HttpParseError, ParseIntError, SerializeError, Utf8Error

logger = logging.getLogger(__name__)

RECV_BUFFER_SIZE = 1024
STATUS_PREFIX = b"HTTP/1.1 "
MAX_STATUS = 0xFFFF

_STATUS_PATTERN = re.compile(r"\+?[0-9]+")


class ByteCursor:
    """Read position over an immutable byte buffer."""

    def __init__(self, data, pos=0):
        self.data = bytes(data)
        self.pos = pos

    def startswith(self, prefix):
        return self.data.startswith(prefix, self.pos)

    def skip(self, count):
        if self.pos + count > len(self.data):
            raise HttpParseError(f"cannot skip {count} bytes at offset {self.pos}")
        self.pos += count

    def advance_past(self, delimiter):
        """Return the bytes up to ``delimiter`` and move past the delimiter.

        Raises HttpParseError when the delimiter does not occur in the rest
        of the buffer; the position is left unchanged in that case.
        """
        end = self.data.find(delimiter, self.pos)
        if end == -1:
            raise HttpParseError(f"expected {delimiter!r} after offset {self.pos}")
        chunk = self.data[self.pos:end]
        self.pos = end + len(delimiter)
        return chunk

    def rest(self):
        return self.data[self.pos:]


class Headers(Mapping):
    """Response header fields with case-insensitive lookup.

    Repeated fields are folded into one comma-separated value, keeping the
    spelling of the first occurrence.
    """

    def __init__(self, pairs=()):
        self._fields = {}
        self._last = None
        for name, value in pairs:
            self.add(name, value)

    def add(self, name, value):
        key = name.lower()
        if key in self._fields:
            name, existing = self._fields[key]
            value = f"{existing}, {value}"
        self._fields[key] = (name, value)
        self._last = key

    def extend_last(self, more):
        """Append an obs-fold continuation to the most recent field."""
        if self._last is None:
            return False
        if more:
            name, value = self._fields[self._last]
            self._fields[self._last] = (name, f"{value} {more}" if value else more)
        return True

    def __getitem__(self, name):
        return self._fields[name.lower()][1]

    def __contains__(self, name):
        return isinstance(name, str) and name.lower() in self._fields

    def __iter__(self):
        return (name for name, _ in self._fields.values())

    def __len__(self):
        return len(self._fields)

    def __repr__(self):
        return f"Headers({dict(self.items())!r})"


@dataclass(frozen=True)
class Response:
    """Parsed response: status code, decoded JSON body and headers."""

    status: int
    body: Any
    headers: Headers = field(default_factory=Headers)


def _strip_cr(line):
    return line[:-1] if line.endswith(b"\r") else line


def _decode_field(raw):
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        return raw.decode("latin-1")


def parse_status(token):
    """Parse the status token of a status line as an unsigned 16-bit integer."""
    try:
        text = token.decode("utf-8")
    except UnicodeDecodeError as err:
        raise Utf8Error(str(err)) from err

    if not _STATUS_PATTERN.fullmatch(text):
        reason = "cannot parse integer from empty string" if not text else "invalid digit found in string"
        raise ParseIntError(f"{reason}: {text!r}")

    status = int(text)
    if status > MAX_STATUS:
        raise ParseIntError(f"number too large to fit in target type: {text!r}")
    return status


def parse_headers(cursor):
    """Consume header lines up to and including the blank line.

    Continuation lines (leading space or tab) extend the previous field;
    other lines without a colon are skipped.
    """
    headers = Headers()
    while True:
        line = _strip_cr(cursor.advance_past(b"\n"))
        if not line:
            return headers
        if line[:1] in (b" ", b"\t"):
            if headers.extend_last(_decode_field(line.strip())):
                continue
        name, sep, value = line.partition(b":")
        if not sep:
            logger.debug("Skipping header line without colon: %r", line)
            continue
        headers.add(_decode_field(name.strip()), _decode_field(value.strip()))


def decode_body(raw):
    try:
        return json.loads(raw)
    except ValueError as err:
        # JSONDecodeError and UnicodeDecodeError both land here
        raise SerializeError(str(err)) from err


def parse_response(data):
    """Parse a complete raw response buffer.

    Raises:
        HttpParseError: missing ``HTTP/1.1`` prefix or broken header block.
        Utf8Error: status token is not UTF-8.
        ParseIntError: status token is not a valid status number.
        SerializeError: body is not valid JSON.
    """
    cursor = ByteCursor(data)
    if not cursor.startswith(STATUS_PREFIX):
        raise HttpParseError(f"response does not start with {STATUS_PREFIX.decode()!r}")
    cursor.skip(len(STATUS_PREFIX))

    status_line = _strip_cr(cursor.advance_past(b"\n"))
    status = parse_status(status_line.split(b" ", 1)[0])

    headers = parse_headers(cursor)
    body = decode_body(cursor.rest())
    logger.debug("Parsed response: status=%d, %d header(s)", status, len(headers))
    return Response(status=status, body=body, headers=headers)


def find_body_start(data):
    """Return the offset just past the blank line, or None if not received yet."""
    cursor = ByteCursor(data)
    try:
        cursor.advance_past(b"\n")
        while _strip_cr(cursor.advance_past(b"\n")):
            pass
    except HttpParseError:
        return None
    return cursor.pos


def content_length(head):
    """Extract Content-Length from a raw header block, if usable."""
    for line in head.split(b"\n")[1:]:
        name, sep, value = line.partition(b":")
        if sep and name.strip().lower() == b"content-length":
            try:
                length = int(value.strip())
            except ValueError:
                return None
            return length if length >= 0 else None
    return None


def read_response(sock, bufsize=RECV_BUFFER_SIZE):
    """Accumulate a full response from ``sock``.

    Reads until the header block is complete. If it declares a
    Content-Length, reading stops once that many body bytes arrived;
    otherwise it continues until the peer closes the connection. A peer
    that closes early yields whatever was received.
    """
    data = bytearray()
    head_seen = False
    expected = None

    while expected is None or len(data) < expected:
        chunk = sock.recv(bufsize)
        if not chunk:
            break
        data += chunk

        if not head_seen:
            body_start = find_body_start(data)
            if body_start is not None:
                head_seen = True
                length = content_length(bytes(data[:body_start]))
                if length is not None:
                    expected = body_start + length

    logger.debug("Read %d response bytes", len(data))
    return bytes(data)
