"""Shared fixtures: scripted sockets, a raw TCP responder and the Flask JSON server."""

import socket
import threading

import pytest

from httpresponse import read_response


class ScriptedSocket:
    """Stand-in for a connected socket that replays canned ``recv`` chunks."""

    def __init__(self, chunks) -> None:
        self.chunks = list(chunks)
        self.recv_sizes: list[int] = []

    def recv(self, bufsize: int) -> bytes:
        self.recv_sizes.append(bufsize)
        return self.chunks.pop(0) if self.chunks else b""


class RawServer:
    """Accept ``connections`` clients, record each request and send ``reply``.

    With ``keep_open`` the connection stays up after the reply until
    ``release`` is set, so clients must stop reading on their own.
    """

    def __init__(self, reply: bytes, connections: int = 1, keep_open: bool = False) -> None:
        self.reply = reply
        self.connections = connections
        self.keep_open = keep_open
        self.requests: list[bytes] = []
        self.release = threading.Event()
        self.listener = socket.create_server(("127.0.0.1", 0))
        self.port = self.listener.getsockname()[1]
        self.thread = threading.Thread(target=self._serve, daemon=True)

    @property
    def url(self) -> str:
        return f"http://127.0.0.1:{self.port}"

    def _serve(self) -> None:
        with self.listener:
            for _ in range(self.connections):
                conn, _ = self.listener.accept()
                with conn:
                    self.requests.append(read_response(conn))
                    conn.sendall(self.reply)
                    if self.keep_open:
                        self.release.wait(5)

    def join(self) -> None:
        self.release.set()
        self.thread.join(5)


@pytest.fixture
def raw_server():
    """Factory starting RawServer instances; all are joined on teardown."""
    servers = []

    def start(reply: bytes, **kwargs) -> RawServer:
        server = RawServer(reply, **kwargs)
        server.thread.start()
        servers.append(server)
        return server

    yield start
    for server in servers:
        server.join()


@pytest.fixture
def closed_port() -> int:
    """A localhost port with nothing listening on it."""
    with socket.create_server(("127.0.0.1", 0)) as s:
        return s.getsockname()[1]


@pytest.fixture(scope="session")
def json_server():
    """Run the Flask JSON test server on an ephemeral port; yields its base URL."""
    from werkzeug.serving import make_server

    from test_server.local_json_server import app

    server = make_server("127.0.0.1", 0, app, threaded=True)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield f"http://127.0.0.1:{server.server_port}"
    server.shutdown()
    thread.join(5)


def json_reply(body: bytes, status: bytes = b"200 OK", extra: bytes = b"") -> bytes:
    """Raw HTTP/1.1 response with a Content-Length matching ``body``."""
    return (
        b"HTTP/1.1 " + status + b"\r\n"
        b"Content-Type: application/json\r\n"
        b"Content-Length: " + str(len(body)).encode() + b"\r\n" + extra + b"\r\n" + body
    )


def json_reply_of_size(total: int) -> bytes:
    """A json_reply exactly ``total`` bytes long, padded with a JSON string body."""
    for n in range(total):
        reply = json_reply(b'"' + b"x" * n + b'"')
        if len(reply) == total:
            return reply
    raise ValueError(f"cannot build a reply of {total} bytes")
