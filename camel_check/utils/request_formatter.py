"""
Rendering and writing of camel HTTP requests.

The request text is fixed apart from the substituted values; servers under
test are checked against exactly these bytes.
"""

import json
import logging
from typing import Any

from camel_check.config import CAMEL_HOST_HEADER, CAMEL_PATH, SESSION_COOKIE_NAME
from camel_check.errors import ShortWrite

logger = logging.getLogger(__name__)

LOGIN_TEMPLATE = (
    "POST {path} HTTP/1.1\r\n"
    "Host: {host}\r\n"
    "Accept: */*\r\n"
    "Content-Length: {length}\r\n"
    "Content-Type: application/x-www-form-urlencoded\r\n"
    "\r\n"
    "{body}\r\n"
    "\r\n"
)

COMMAND_TEMPLATE = (
    "POST {path} HTTP/1.1\r\n"
    "Host: {host}\r\n"
    "Accept: */*\r\n"
    "Content-Length: {length}\r\n"
    "Content-Type: application/x-www-form-urlencoded\r\n"
    "Cookie: {cookie_name}={cookie};\r\n"
    "Connection: {connection}\r\n"
    "\r\n"
    "{body}\r\n"
    "\r\n"
)


def dump_json(value: Any) -> str:
    """Serialize without insignificant whitespace, keeping non-ASCII text as UTF-8."""
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def login_body(request_id: int, username: str, password: str) -> str:
    """Build the JSON-RPC auth call."""
    return dump_json(
        {
            "id": request_id,
            "method": "auth",
            "params": {"username": username, "password": password},
        }
    )


def _command_text(command: str | bytes | dict[str, Any]) -> str:
    if isinstance(command, bytes):
        return command.decode("utf-8")
    if isinstance(command, str):
        return command
    return dump_json(command)


def render_login(request_id: int, username: str, password: str) -> bytes:
    """Render the complete login request.

    Args:
        request_id: JSON-RPC id of the auth call
        username: Account name
        password: Account password

    Returns:
        Request bytes ready for the wire
    """
    body = login_body(request_id, username, password)
    return LOGIN_TEMPLATE.format(
        path=CAMEL_PATH,
        host=CAMEL_HOST_HEADER,
        length=len(body.encode("utf-8")),
        body=body,
    ).encode("utf-8")


def render_command(
    command: str | bytes | dict[str, Any], cookie: str | None, keep_alive: bool = True
) -> bytes:
    """Render the complete request for a JSON-RPC command.

    Args:
        command: Serialized JSON command, or a mapping to serialize
        cookie: Session token; an empty cookie value is sent when None
        keep_alive: Ask the server to keep the connection open

    Returns:
        Request bytes ready for the wire
    """
    body = _command_text(command)
    return COMMAND_TEMPLATE.format(
        path=CAMEL_PATH,
        host=CAMEL_HOST_HEADER,
        length=len(body.encode("utf-8")),
        cookie_name=SESSION_COOKIE_NAME,
        cookie=cookie or "",
        connection="keep-alive" if keep_alive else "close",
        body=body,
    ).encode("utf-8")


def write_request(connection: Any, request: bytes) -> int:
    """Write a rendered request and check every byte went out.

    Args:
        connection: Object with a ``write(bytes) -> int`` method
        request: Rendered request bytes

    Returns:
        Number of bytes written

    Raises:
        ShortWrite: If the transport reports a different byte count
    """
    written = connection.write(request)
    if written != len(request):
        raise ShortWrite(len(request), written)

    logger.debug("Wrote %d request bytes", written)
    return written


def write_login(connection: Any, request_id: int, username: str, password: str) -> int:
    """Render and write the login request."""
    return write_request(connection, render_login(request_id, username, password))


def write_command(
    connection: Any,
    command: str | bytes | dict[str, Any],
    cookie: str | None,
    keep_alive: bool = True,
) -> int:
    """Render and write a command request."""
    return write_request(connection, render_command(command, cookie, keep_alive))
