"""
Pytest configuration and shared fixtures for camel checker tests.
"""

from collections.abc import Generator
import json
import socketserver
import threading
from typing import Any

import pytest

from camel_check.utils.connector import Connection, Endpoint, EndpointDirectory


class FakeSocket:
    """Scripted stand-in for a connected socket.

    ``recv`` hands out the scripted data in pieces of at most ``chunk_size``
    bytes and returns ``b""`` once everything was delivered.
    """

    def __init__(self, data: bytes = b"", chunk_size: int | None = None, send_limit: int | None = None):
        self._data = bytearray(data)
        self.chunk_size = chunk_size
        self.send_limit = send_limit
        self.sent = bytearray()
        self.recv_calls = 0
        self.closed = False

    def recv(self, size: int) -> bytes:
        self.recv_calls += 1
        if self.chunk_size is not None:
            size = min(size, self.chunk_size)
        chunk = bytes(self._data[:size])
        del self._data[:size]
        return chunk

    def send(self, data: bytes) -> int:
        if self.send_limit is not None:
            data = data[: self.send_limit]
            self.send_limit -= len(data)
        self.sent.extend(data)
        return len(data)

    def close(self) -> None:
        self.closed = True


def http_response(
    payload: Any,
    status: str = "200 OK",
    headers: dict[str, str] | None = None,
    content_length: int | None = None,
) -> bytes:
    """Build raw HTTP/1.1 response bytes with a JSON (or raw) body."""
    if isinstance(payload, bytes):
        body = payload
    elif isinstance(payload, str):
        body = payload.encode("utf-8")
    else:
        body = json.dumps(payload).encode("utf-8")

    head = f"HTTP/1.1 {status}\r\nContent-Type: application/json\r\n"
    if content_length is None:
        content_length = len(body)
    if content_length >= 0:
        head += f"Content-Length: {content_length}\r\n"
    for name, value in (headers or {}).items():
        head += f"{name}: {value}\r\n"
    return head.encode("latin-1") + b"\r\n" + body


@pytest.fixture
def fake_socket() -> type[FakeSocket]:
    """The FakeSocket class, for tests that script their own data."""
    return FakeSocket


@pytest.fixture
def make_connection():
    """Build a Connection over a FakeSocket preloaded with response bytes."""

    def factory(data: bytes = b"", chunk_size: int | None = None, send_limit: int | None = None):
        sock = FakeSocket(data, chunk_size=chunk_size, send_limit=send_limit)
        return Connection(sock), sock

    return factory


class FakeCamel:
    """In-memory camel backend: accounts, sessions and a config store."""

    def __init__(self, token: str = "abc123"):
        self.token = token
        self.users = {"princess": "password"}
        self.sessions: set[str] = set()
        self.config: dict[str, dict[str, Any]] = {}
        self.status = "200 OK"
        self.requests: list[dict[str, Any]] = []

    def dispatch(self, request: dict[str, Any], cookie: str | None) -> dict[str, Any]:
        request_id = request.get("id")
        method = request.get("method")
        params = request.get("params") or {}

        if method == "auth":
            if self.users.get(params.get("username")) == params.get("password"):
                self.sessions.add(self.token)
                return {"jsonrpc": "2.0", "result": {"session": self.token}, "id": request_id}
            return _rpc_error(request_id, -32000, "Invalid credentials")

        if cookie not in self.sessions:
            return _rpc_error(request_id, -32001, "Not authenticated")

        if method == "config.edit":
            for key, value in params.items():
                if value is None:
                    self.config.pop(key, None)
                else:
                    self.config[key] = {"value": value, "flags": []}
            return {"jsonrpc": "2.0", "result": {"config.edit": "success"}, "id": request_id}

        if method == "config.load":
            return {"jsonrpc": "2.0", "result": dict(self.config), "id": request_id}

        return _rpc_error(request_id, -32601, "Method not found")


def _rpc_error(request_id: Any, code: int, message: str) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "error": {"code": code, "message": message}, "id": request_id}


def _parse_cookie(header: str | None) -> str | None:
    if not header:
        return None
    for part in header.split(";"):
        name, _, value = part.strip().partition("=")
        if name == "portal":
            return value or None
    return None


class FakeCamelHandler(socketserver.StreamRequestHandler):
    """Serves one request per connection, then closes it."""

    def handle(self) -> None:
        request_line = self.rfile.readline()
        if not request_line:
            return

        headers: dict[str, str] = {}
        while True:
            line = self.rfile.readline()
            if line in (b"\r\n", b"\n", b""):
                break
            name, _, value = line.decode("latin-1").partition(":")
            headers[name.strip().lower()] = value.strip()

        camel: FakeCamel = self.server.camel  # type: ignore[attr-defined]

        if "content-length" not in headers:
            self._respond("405 Method Not Allowed", {"error": "POST required"})
            return

        body = self.rfile.read(int(headers["content-length"]))
        # Camel requests carry a CRLF CRLF trailer after the body
        self.rfile.read(4)

        request = json.loads(body)
        cookie = _parse_cookie(headers.get("cookie"))
        camel.requests.append({"request_line": request_line, "headers": headers, "body": request})

        self._respond(camel.status, camel.dispatch(request, cookie))

    def _respond(self, status: str, payload: dict[str, Any]) -> None:
        data = json.dumps(payload).encode("utf-8")
        head = (
            f"HTTP/1.1 {status}\r\n"
            "Content-Type: application/json\r\n"
            f"Content-Length: {len(data)}\r\n"
            "Connection: close\r\n"
            "\r\n"
        )
        self.wfile.write(head.encode("latin-1") + data)


class FakeCamelServer(socketserver.ThreadingTCPServer):
    allow_reuse_address = True
    daemon_threads = True

    def __init__(self, camel: FakeCamel):
        super().__init__(("127.0.0.1", 0), FakeCamelHandler)
        self.camel = camel


@pytest.fixture
def fake_camel() -> FakeCamel:
    return FakeCamel()


@pytest.fixture
def camel_server(fake_camel: FakeCamel) -> Generator[FakeCamelServer, None, None]:
    """Run a fake camel server on an ephemeral port."""
    server = FakeCamelServer(fake_camel)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield server
    finally:
        server.shutdown()
        server.server_close()
        thread.join(timeout=5)


@pytest.fixture
def camel_directory(camel_server: FakeCamelServer) -> EndpointDirectory:
    """Endpoint directory with only the fake server's plain endpoint."""
    host, port = camel_server.server_address[:2]
    return EndpointDirectory([Endpoint(host, port, secure=False)])
