"""
Response head scanning: status line and headers.

Both scanners consume lines from a LineReader and leave its cursor at the
first byte after what they consumed.
"""

from dataclasses import dataclass, field
import logging

from camel_check.errors import MissingContentLength, NonSuccessStatus, StreamExhausted
from camel_check.utils.line_reader import CRLF, LF, LineReader

logger = logging.getLogger(__name__)

STATUS_PREFIX = b"HTTP/1.1"


@dataclass(frozen=True)
class StatusLine:
    """A tokenized HTTP status line."""

    version: str
    status_code: int | None
    reason: str
    raw: str

    @property
    def success(self) -> bool:
        """True when the status code is in the 2xx class."""
        return self.status_code is not None and self.status_code // 100 == 2


@dataclass(frozen=True)
class HttpResponseHead:
    """Status and framing information read ahead of a response body."""

    status: StatusLine
    content_length: int
    headers: dict[str, str] = field(default_factory=dict)


def parse_status_line(line: bytes) -> StatusLine:
    """Split a status line on its first two spaces.

    The code must be exactly three digits; anything else leaves
    ``status_code`` as None, which never counts as success.

    Args:
        line: Raw status line, terminator optional

    Returns:
        The tokenized status line
    """
    text = line.decode("latin-1").rstrip("\r\n")
    parts = text.split(" ", 2)
    version = parts[0]
    code_text = parts[1] if len(parts) > 1 else ""
    reason = parts[2] if len(parts) > 2 else ""

    status_code = int(code_text) if len(code_text) == 3 and code_text.isdigit() else None
    return StatusLine(version=version, status_code=status_code, reason=reason, raw=text)


def read_status_line(reader: LineReader) -> StatusLine:
    """Consume lines until one starts with ``HTTP/1.1``.

    Raises:
        StreamExhausted: If a read yields 2 bytes or fewer before the
            status line shows up
    """
    while not reader.line.startswith(STATUS_PREFIX):
        if reader.read_line() <= 2:
            raise StreamExhausted("Stream ended before an HTTP status line was found")

    status = parse_status_line(reader.line)
    logger.debug("Status line: %s", status.raw)
    return status


def scan_status(reader: LineReader) -> bool:
    """Find the status line and report whether it is a 2xx status.

    Raises:
        StreamExhausted: If no status line arrives
    """
    return read_status_line(reader).success


def scan_headers(reader: LineReader) -> dict[str, str]:
    """Consume header lines up to and including the blank terminator line.

    Args:
        reader: Reader positioned just after the status line

    Returns:
        Header values keyed by lowercased name; repeated names keep the last value

    Raises:
        StreamExhausted: If the stream ends before the blank line
    """
    headers: dict[str, str] = {}
    while True:
        if reader.read_line() <= 0:
            raise StreamExhausted("Stream ended inside the response headers")
        if reader.line in (CRLF, LF):
            return headers

        name, sep, value = reader.line.decode("latin-1").partition(":")
        if sep:
            headers[name.strip().lower()] = value.strip()
        else:
            logger.debug("Ignoring malformed header line: %r", reader.line)


def content_length_from(headers: dict[str, str]) -> int:
    """Return the declared Content-Length, or 0 when absent or unusable."""
    value = headers.get("content-length", "")
    try:
        length = int(value)
    except ValueError:
        return 0
    return max(length, 0)


def get_content_length(reader: LineReader) -> int:
    """Scan the headers and return the declared body length (0 if none)."""
    return content_length_from(scan_headers(reader))


def read_response_head(reader: LineReader) -> HttpResponseHead:
    """Read the status line and headers of one response.

    Raises:
        StreamExhausted: If the stream ends early
        NonSuccessStatus: If the status is not 2xx
        MissingContentLength: If no positive Content-Length was declared
    """
    status = read_status_line(reader)
    if not status.success:
        raise NonSuccessStatus(status.status_code, status.raw)

    headers = scan_headers(reader)
    content_length = content_length_from(headers)
    if content_length <= 0:
        raise MissingContentLength(
            "Response did not declare a positive Content-Length",
            context={"content-length": headers.get("content-length")},
        )

    logger.debug("Response declares %d body bytes", content_length)
    return HttpResponseHead(status=status, content_length=content_length, headers=headers)
