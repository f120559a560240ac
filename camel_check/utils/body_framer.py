"""
Content-Length framed body reading.
"""

import logging

from camel_check.config import BUFFER_CONSTANTS
from camel_check.errors import EmptyBody, StreamExhausted
from camel_check.utils.line_reader import LineReader

logger = logging.getLogger(__name__)


class BodyBuffer:
    """Append-only byte buffer that knows how many bytes it is waiting for."""

    def __init__(self, target: int, append_hint: int | None = None):
        """Initialize the buffer.

        Args:
            target: Number of bytes the body should hold
            append_hint: Most bytes taken by a single append
        """
        self.target = target
        self.append_hint = append_hint or BUFFER_CONSTANTS["append_hint"]
        self._data = bytearray()

    def __len__(self) -> int:
        return len(self._data)

    @property
    def remaining(self) -> int:
        return max(self.target - len(self._data), 0)

    @property
    def complete(self) -> bool:
        """True once the buffer holds ``target`` bytes."""
        return len(self._data) >= self.target

    def next_read_size(self) -> int:
        """Bytes to request for the next append."""
        return min(self.remaining, self.append_hint)

    def append(self, data: bytes) -> int:
        """Append one read's worth of bytes.

        Returns:
            Number of bytes appended

        Raises:
            ValueError: If ``data`` is larger than the append hint or
                would overshoot the target
        """
        if len(data) > self.append_hint:
            raise ValueError(f"Append of {len(data)} bytes exceeds hint {self.append_hint}")
        if len(data) > self.remaining:
            raise ValueError(f"Append of {len(data)} bytes overshoots target by {len(data) - self.remaining}")
        self._data.extend(data)
        return len(data)

    def getvalue(self) -> bytes:
        return bytes(self._data)


def read_body(reader: LineReader, declared_length: int) -> bytes:
    """Read exactly ``declared_length`` body bytes.

    Blank lines already buffered at the cursor are dropped first; the body
    then starts at the same cursor. Reads never ask for more than the bytes
    still missing, so anything the peer sends afterwards stays in the reader.

    Args:
        reader: Reader positioned after the header terminator line
        declared_length: Value of the Content-Length header

    Returns:
        The body bytes

    Raises:
        EmptyBody: If the declared length is not positive or nothing was read
        StreamExhausted: If the stream ends before the body is complete
    """
    if declared_length <= 0:
        raise EmptyBody("Response declared an empty body")

    reader.skip_blank_lines()

    body = BodyBuffer(declared_length)
    while not body.complete:
        if reader.read(body.next_read_size()) <= 0:
            raise StreamExhausted(
                "Stream ended before the response body was complete",
                context={"expected": declared_length, "received": len(body)},
            )
        body.append(reader.buffer)

    data = body.getvalue()
    if not data:
        raise EmptyBody("Response body was empty")

    logger.debug("Read %d body bytes", len(data))
    return data
