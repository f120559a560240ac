"""
Camel session handling: authentication and command submission.

A login exchanges credentials for a session token, which later commands carry
as the ``portal`` cookie.
"""

import json
import logging
from typing import Any

from camel_check import config
from camel_check.errors import JsonParseFailed, MissingField
from camel_check.utils.body_framer import read_body
from camel_check.utils.connector import Connection, EndpointDirectory, connect
from camel_check.utils.http_scanner import read_response_head
from camel_check.utils.request_formatter import write_command, write_login

logger = logging.getLogger(__name__)

_MISSING = object()


def lookup_path(document: Any, path: list[Any]) -> Any:
    """Follow a key path through nested objects and arrays.

    Integer path elements index arrays; everything else is an object key.

    Returns:
        The value at the path, or a private sentinel when it does not resolve.
        Use ``get_field`` unless you need to tell "absent" apart cheaply.
    """
    current = document
    for key in path:
        if isinstance(current, dict) and not isinstance(key, int) and key in current:
            current = current[key]
        elif isinstance(current, list) and isinstance(key, int) and -len(current) <= key < len(current):
            current = current[key]
        else:
            return _MISSING
    return current


def has_field(document: Any, path: list[Any]) -> bool:
    return lookup_path(document, path) is not _MISSING


def get_field(document: Any, path: list[Any]) -> Any:
    """Return the value at ``path``.

    Raises:
        MissingField: If any key along the path is absent. A JSON-RPC
            ``error`` member of the document is attached when present.
    """
    value = lookup_path(document, path)
    if value is _MISSING:
        rpc_error = document.get("error") if isinstance(document, dict) else None
        raise MissingField(list(path), rpc_error=rpc_error)
    return value


def parse_json(body: bytes) -> Any:
    """Decode a response body.

    Raises:
        JsonParseFailed: If the body is not UTF-8 JSON
    """
    text = body.decode("utf-8", errors="replace")
    try:
        return json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise JsonParseFailed(f"Invalid JSON response: {e}", text) from e


def read_json_response(connection: Connection) -> Any:
    """Read one complete response and decode its body."""
    head = read_response_head(connection.reader)
    body = read_body(connection.reader, head.content_length)
    return parse_json(body)


def login(connection: Connection, request_id: int, username: str, password: str) -> str:
    """Authenticate and return the session token.

    Args:
        connection: Open connection to a camel server
        request_id: JSON-RPC id of the auth call
        username: Account name
        password: Account password

    Returns:
        The value of ``result.session``

    Raises:
        ShortWrite, StreamExhausted, NonSuccessStatus, MissingContentLength,
        EmptyBody, JsonParseFailed, MissingField
    """
    write_login(connection, request_id, username, password)
    document = read_json_response(connection)

    token = get_field(document, ["result", "session"])
    if not isinstance(token, str) or not token:
        raise MissingField(["result", "session"], rpc_error=document.get("error"))

    logger.info("Authenticated as %s", username)
    return token


def submit(
    connection: Connection,
    command: str | bytes | dict[str, Any],
    token: str | None,
    keep_alive: bool = True,
) -> Any:
    """Send a command and return the decoded response document.

    The document is returned as is; checking ``result`` or ``error`` is up
    to the caller.
    """
    write_command(connection, command, token, keep_alive)
    return read_json_response(connection)


class CamelSession:
    """A logged-in conversation with one camel server.

    Every call opens its own connection and closes it before returning, so a
    dropped keep-alive connection never affects the next command.
    """

    def __init__(
        self,
        secure: bool = False,
        directory: EndpointDirectory | None = None,
        timeout: float | None = None,
    ):
        """Initialize the session.

        Args:
            secure: Talk to the TLS endpoint
            directory: Endpoints to choose from; defaults to the configured ones
            timeout: Connect timeout in seconds
        """
        self.secure = secure
        self.directory = directory
        self.timeout = timeout
        self.token: str | None = None

    @property
    def authenticated(self) -> bool:
        return self.token is not None

    def connect(self) -> Connection:
        return connect(self.secure, self.directory, self.timeout)

    def login(
        self,
        request_id: int = 1,
        username: str = config.DEFAULT_CREDENTIALS["username"],
        password: str = config.DEFAULT_CREDENTIALS["password"],
    ) -> str:
        """Log in and keep the token for later commands."""
        with self.connect() as connection:
            self.token = login(connection, request_id, username, password)
        return self.token

    def submit(self, command: str | bytes | dict[str, Any], keep_alive: bool = True) -> Any:
        """Submit a command with the current token."""
        with self.connect() as connection:
            return submit(connection, command, self.token, keep_alive)
