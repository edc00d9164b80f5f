"""Build JSON HTTP/1.1 requests and send them over a raw socket.

    response = Request("http://localhost:8000/test").post({"test": "aa"})
    print(response.status, response.body)

Every send opens a fresh connection, writes the request, reads the
complete response from the same connection and closes it.
"""

import json
import logging
import socket
from contextlib import closing
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Optional
from urllib.parse import urlsplit

from httperrors import NoHostStringError, ParseUrlError, ResolveError, SerializeError
from httpresponse import Response, parse_response, read_response

logger = logging.getLogger(__name__)

DEFAULT_PORT = 8000
HTTP_VERSION = "HTTP/1.1"
CONTENT_TYPE = "application/json"


class Method(Enum):
    GET = "GET"
    POST = "POST"


@dataclass(frozen=True)
class Location:
    """Target address of a request, as parsed from a URL string."""

    scheme: str
    host: Optional[str]
    port: Optional[int]
    path: str = "/"
    query: str = ""

    @classmethod
    def parse(cls, url):
        try:
            parsed = urlsplit(url)
            port = parsed.port
        except ValueError as err:
            raise ParseUrlError(str(err)) from err
        if not parsed.scheme:
            raise ParseUrlError(f"relative URL without a base: {url!r}")
        return cls(
            scheme=parsed.scheme,
            host=parsed.hostname or None,
            port=port,
            path=parsed.path or "/",
            query=parsed.query,
        )

    @property
    def target(self):
        return f"{self.path}?{self.query}" if self.query else self.path

    @property
    def host_header(self):
        # IPv6 literals keep their brackets on the wire
        return f"[{self.host}]" if self.host and ":" in self.host else self.host

    @property
    def address(self):
        if not self.host:
            raise NoHostStringError()
        return self.host, self.port or DEFAULT_PORT


def encode_payload(payload):
    """Serialize a payload as compact UTF-8 JSON."""
    try:
        text = json.dumps(payload, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError) as err:
        raise SerializeError(str(err)) from err
    return text.encode("utf-8")


def build_request(location, method, payload=None):
    """Return the exact bytes to write for a request.

    GET requests carry ``Content-Length: 0`` and no body; POST requests
    carry the compact JSON encoding of ``payload`` (``None`` is ``null``).
    """
    if not location.host:
        raise NoHostStringError()

    body = encode_payload(payload) if method is Method.POST else b""
    head = (
        f"{method.value} {location.target} {HTTP_VERSION}\r\n"
        f"Host: {location.host_header}\r\n"
        f"Content-Type: {CONTENT_TYPE}\r\n"
        f"Content-Length: {len(body)}\r\n\r\n"
    )
    return head.encode("utf-8") + body


@dataclass(frozen=True)
class Request:
    """A GET or POST request to a single location.

    Requests are immutable: ``post`` sends a POST copy and leaves the
    receiver untouched, so one Request can be sent any number of times.
    """

    location: Location
    method: Method = Method.GET
    payload: Any = None

    def __init__(self, location, method=Method.GET, payload=None):
        if not isinstance(location, Location):
            location = Location.parse(location)
        object.__setattr__(self, "location", location)
        object.__setattr__(self, "method", method)
        object.__setattr__(self, "payload", payload)

    def with_payload(self, payload):
        return replace(self, method=Method.POST, payload=payload)

    def to_bytes(self):
        return build_request(self.location, self.method, self.payload)

    def get(self):
        return replace(self, method=Method.GET, payload=None).send()

    def post(self, payload):
        return self.with_payload(payload).send()

    def send(self):
        """Write this request on a new connection and parse the reply."""
        data = self.to_bytes()
        address = self.location.address
        logger.debug("%s %s -> %s:%d", self.method.value, self.location.target, *address)

        try:
            with closing(socket.create_connection(address)) as s:
                s.sendall(data)
                logger.debug("Sent %d request bytes", len(data))
                raw = read_response(s)
        except OSError as err:
            raise ResolveError(str(err)) from err

        return parse_response(raw)


def get(url):
    return Request(url).get()


def post(url, payload):
    return Request(url).post(payload)
