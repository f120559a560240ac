"""
Endpoint lookup and connection setup for camel servers.
"""

from dataclasses import dataclass
import logging
import socket
import ssl
from typing import Any

from camel_check import config
from camel_check.errors import ConnectFailed, NoEndpointAvailable, SecureUpgradeFailed
from camel_check.utils.line_reader import LineReader

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Endpoint:
    """A listening server endpoint."""

    host: str
    port: int
    protocol: str = config.HTTP_PROTOCOL
    secure: bool = False


class EndpointDirectory:
    """Known endpoints, looked up by protocol and security mode."""

    def __init__(self, endpoints: list[Endpoint] | None = None):
        self._endpoints: list[Endpoint] = list(endpoints or [])

    @classmethod
    def from_config(cls) -> "EndpointDirectory":
        """Build the directory from the configured host and ports."""
        return cls(
            [
                Endpoint(config.CAMEL_HOST, config.CAMEL_PORT, secure=False),
                Endpoint(config.CAMEL_HOST, config.CAMEL_TLS_PORT, secure=True),
            ]
        )

    def add(self, endpoint: Endpoint) -> None:
        self._endpoints.append(endpoint)

    def get_by_protocol(self, protocol: str, secure: bool) -> Endpoint | None:
        """Return the first endpoint matching protocol and mode, if any."""
        for endpoint in self._endpoints:
            if endpoint.protocol == protocol and endpoint.secure == secure:
                return endpoint
        return None

    def __len__(self) -> int:
        return len(self._endpoints)


class Connection:
    """An open byte stream to a server with a line reader on top.

    Use as a context manager so the socket is closed on every exit path.
    """

    def __init__(self, sock: Any, endpoint: Endpoint | None = None, chunk_size: int | None = None):
        """Wrap a connected socket.

        Args:
            sock: Connected socket (plain or TLS) or any object offering
                ``recv``, ``send`` and ``close``
            endpoint: Endpoint the socket is connected to
            chunk_size: Largest single raw read
        """
        self._sock = sock
        self.endpoint = endpoint
        self.reader = LineReader(self._recv, chunk_size)
        self.closed = False

    def _recv(self, size: int) -> bytes:
        try:
            return self._sock.recv(size)
        except OSError as e:
            logger.warning("Read failed, treating as end of stream: %s", e)
            return b""

    @property
    def line(self) -> bytes:
        return self.reader.line

    @property
    def buffer(self) -> bytes:
        return self.reader.buffer

    def read_line(self) -> int:
        return self.reader.read_line()

    def read(self, limit: int | None = None) -> int:
        return self.reader.read(limit)

    def write(self, data: bytes) -> int:
        """Send ``data`` and return how many bytes the transport accepted."""
        total = 0
        try:
            while total < len(data):
                sent = self._sock.send(data[total:])
                if sent <= 0:
                    break
                total += sent
        except OSError as e:
            logger.warning("Write failed after %d of %d bytes: %s", total, len(data), e)
        return total

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        try:
            self._sock.close()
        except OSError as e:
            logger.debug("Error closing socket: %s", e)

    def __enter__(self) -> "Connection":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()


def create_tls_context(verify: bool | None = None) -> ssl.SSLContext:
    """Create the client TLS context.

    Args:
        verify: Verify the server certificate; defaults to CAMEL_TLS_VERIFY
    """
    verify = config.CAMEL_TLS_VERIFY if verify is None else verify
    context = ssl.create_default_context()
    if not verify:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    return context


def connect(
    secure: bool = False,
    directory: EndpointDirectory | None = None,
    timeout: float | None = None,
    tls_context: ssl.SSLContext | None = None,
) -> Connection:
    """Look up an HTTP endpoint and open a connection to it.

    Args:
        secure: Connect to a TLS endpoint and perform the handshake
        directory: Endpoints to choose from; defaults to the configured ones
        timeout: Socket timeout in seconds
        tls_context: TLS context to use instead of the default one

    Returns:
        An open connection

    Raises:
        NoEndpointAvailable: If no endpoint matches the mode
        ConnectFailed: If the TCP connect fails
        SecureUpgradeFailed: If the TLS handshake fails
    """
    if directory is None:
        directory = EndpointDirectory.from_config()
    endpoint = directory.get_by_protocol(config.HTTP_PROTOCOL, secure)
    if endpoint is None:
        raise NoEndpointAvailable(config.HTTP_PROTOCOL, secure)

    timeout = config.TIMEOUT_CONSTANTS["connect"] if timeout is None else timeout
    try:
        sock = socket.create_connection((endpoint.host, endpoint.port), timeout=timeout)
    except OSError as e:
        raise ConnectFailed(endpoint.host, endpoint.port, e) from e

    if secure:
        context = tls_context or create_tls_context()
        try:
            sock = context.wrap_socket(sock, server_hostname=endpoint.host)
        except (ssl.SSLError, OSError) as e:
            sock.close()
            raise SecureUpgradeFailed(endpoint.host, endpoint.port, e) from e

    sock.settimeout(config.TIMEOUT_CONSTANTS["read"])
    logger.debug("Connected to %s:%d (%s)", endpoint.host, endpoint.port, "TLS" if secure else "TCP")
    return Connection(sock, endpoint)
