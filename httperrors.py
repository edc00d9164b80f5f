"""Error kinds raised by the raw-socket HTTP client.

Every failure surfaces as one subclass of HttpClientError, so callers can
tell which stage of the request/response cycle went wrong.
"""


class HttpClientError(Exception):
    """Base class for every client failure."""

    kind = "Http client error"

    def __str__(self):
        detail = super().__str__()
        return f"{self.kind}: {detail}" if detail else self.kind


class SerializeError(HttpClientError):
    """JSON payload could not be encoded, or the body could not be decoded."""

    kind = "Serialize error"


class ResolveError(HttpClientError):
    """Resolving, connecting, writing or reading failed."""

    kind = "Resolve error"


class Utf8Error(HttpClientError):
    """Status token is not valid UTF-8."""

    kind = "Utf8 error"


class ParseIntError(HttpClientError):
    """Status token is not an unsigned 16-bit decimal."""

    kind = "ParseInt error"


class ParseUrlError(HttpClientError):
    """Location string is not a usable URL."""

    kind = "ParseUrl error"


class NoHostStringError(HttpClientError):
    """Location has no host component."""

    kind = "No host string"


class HttpParseError(HttpClientError):
    """Response is not a well-formed HTTP/1.1 message."""

    kind = "Http parse error"
