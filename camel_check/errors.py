"""
Exception hierarchy for the camel checker.

Every failure the protocol layer can report has its own class so callers can
tell a missing endpoint from a short write or a wrong value.
"""

from typing import Any


class CamelCheckError(Exception):
    """Base class for all camel checker errors.

    Attributes:
        message: A human-readable error message.
        context: Optional dictionary with debugging metadata.
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            return f"{self.message} (context: {self.context})"
        return self.message


class NoEndpointAvailable(CamelCheckError):
    """Raised when the endpoint directory has nothing for the requested mode."""

    def __init__(self, protocol: str, secure: bool) -> None:
        mode = "TLS" if secure else "TCP"
        super().__init__(
            f"There were no {protocol} servers available for {mode} connections.",
            context={"protocol": protocol, "secure": secure},
        )
        self.protocol = protocol
        self.secure = secure


class ConnectFailed(CamelCheckError):
    """Raised when the transport connect fails."""

    def __init__(self, host: str, port: int, underlying_error: Exception | None = None) -> None:
        ctx: dict[str, Any] = {"host": host, "port": port}
        if underlying_error:
            ctx["underlying_error"] = str(underlying_error)
        super().__init__(f"Could not connect to {host}:{port}", context=ctx)
        self.underlying_error = underlying_error


class SecureUpgradeFailed(CamelCheckError):
    """Raised when the TLS handshake fails. The raw socket is already closed."""

    def __init__(self, host: str, port: int, underlying_error: Exception | None = None) -> None:
        ctx: dict[str, Any] = {"host": host, "port": port}
        if underlying_error:
            ctx["underlying_error"] = str(underlying_error)
        super().__init__(f"TLS handshake with {host}:{port} failed", context=ctx)
        self.underlying_error = underlying_error


class StreamExhausted(CamelCheckError):
    """Raised when the peer stops sending before the response is complete."""


class ShortWrite(CamelCheckError):
    """Raised when fewer bytes were written than the rendered request holds."""

    def __init__(self, expected: int, written: int) -> None:
        super().__init__(
            f"Short write: {written} of {expected} bytes",
            context={"expected": expected, "written": written},
        )
        self.expected = expected
        self.written = written


class NonSuccessStatus(CamelCheckError):
    """Raised when the response status is outside the 2xx class."""

    def __init__(self, status_code: int | None, status_line: str) -> None:
        super().__init__(
            f"Unsuccessful HTTP status: {status_line}",
            context={"status_code": status_code},
        )
        self.status_code = status_code
        self.status_line = status_line


class MissingContentLength(CamelCheckError):
    """Raised when the response carries no usable Content-Length header."""


class EmptyBody(CamelCheckError):
    """Raised when the response body is declared or read as empty."""


class JsonParseFailed(CamelCheckError):
    """Raised when the response body is not valid JSON."""

    def __init__(self, message: str, body: str) -> None:
        super().__init__(message, context={"json": body})
        self.body = body


class MissingField(CamelCheckError):
    """Raised when a key path does not resolve in a JSON document."""

    def __init__(self, path: list[Any], rpc_error: Any = None) -> None:
        ctx: dict[str, Any] = {"path": path}
        if rpc_error is not None:
            ctx["rpc_error"] = rpc_error
        super().__init__(f"Missing field: {format_path(path)}", context=ctx)
        self.path = path
        self.rpc_error = rpc_error


class ValueMismatch(CamelCheckError):
    """Raised when a value in a JSON document differs from the expected one."""

    def __init__(self, path: list[Any], expected: Any, actual: Any) -> None:
        super().__init__(
            f"Value mismatch at {format_path(path)}",
            context={"expected": expected, "actual": actual},
        )
        self.path = path
        self.expected = expected
        self.actual = actual


class ScenarioConfigError(CamelCheckError):
    """Raised when a scenario fixture cannot be read or is invalid."""

    def __init__(self, message: str, config_path: str | None = None) -> None:
        ctx = {"config_path": config_path} if config_path else None
        super().__init__(message, context=ctx)
        self.config_path = config_path


def format_path(path: list[Any]) -> str:
    """Render a key path for messages, e.g. ``result -> config.edit``."""
    return " -> ".join(str(key) for key in path) or "<root>"
