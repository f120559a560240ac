"""
Line-oriented reading over a raw byte stream.
"""

from collections.abc import Callable
import logging

from camel_check.config import BUFFER_CONSTANTS
from camel_check.errors import StreamExhausted

logger = logging.getLogger(__name__)

CRLF = b"\r\n"
LF = b"\n"


class LineReader:
    """Splits the bytes returned by a raw read primitive into lines.

    Bytes that arrive past the end of the current line stay buffered for the
    next call, so lines may be split over any number of raw reads. The same
    buffer feeds ``read``, which means line scanning and body reads share one
    cursor.

    Attributes:
        line: The most recently delimited line, terminator included. Only
            valid until the next read.
        buffer: The bytes handed out by the most recent ``read``.
    """

    def __init__(
        self,
        recv: Callable[[int], bytes],
        chunk_size: int | None = None,
        max_line: int | None = None,
    ):
        """Initialize the reader.

        Args:
            recv: Raw read primitive; takes a maximum size and returns the
                bytes read, or ``b""`` at end of stream
            chunk_size: Largest number of bytes requested per raw read
            max_line: Longest line accepted, terminator included
        """
        self._recv = recv
        self._chunk_size = chunk_size or BUFFER_CONSTANTS["recv_chunk"]
        self._max_line = max_line or BUFFER_CONSTANTS["max_line"]
        self._pending = bytearray()
        self.line = b""
        self.buffer = b""

    @property
    def pending(self) -> int:
        """Number of bytes received but not yet handed out."""
        return len(self._pending)

    def read_line(self) -> int:
        """Read up to and including the next line terminator.

        Returns:
            Length of the new ``line`` in bytes, or 0 if the stream ended
            before a terminator arrived. Unterminated bytes stay buffered.

        Raises:
            StreamExhausted: If ``max_line`` bytes arrive without
                a terminator
        """
        while True:
            end = self._pending.find(LF)
            if end >= 0:
                self.line = bytes(self._pending[: end + 1])
                del self._pending[: end + 1]
                return len(self.line)

            if len(self._pending) >= self._max_line:
                raise StreamExhausted(
                    "Line exceeds the maximum length without a terminator",
                    context={"max_line": self._max_line, "pending": len(self._pending)},
                )

            chunk = self._recv(self._chunk_size)
            if not chunk:
                logger.debug("End of stream with %d unterminated bytes", len(self._pending))
                self.line = b""
                return 0
            self._pending.extend(chunk)

    def read(self, limit: int | None = None) -> int:
        """Read raw bytes into ``buffer``, draining buffered bytes first.

        Args:
            limit: Upper bound on the number of bytes returned

        Returns:
            Number of bytes placed in ``buffer``; 0 at end of stream
        """
        size = self._chunk_size if limit is None else min(limit, self._chunk_size)
        if size <= 0:
            self.buffer = b""
            return 0

        if self._pending:
            self.buffer = bytes(self._pending[:size])
            del self._pending[:size]
        else:
            self.buffer = self._recv(size)
        return len(self.buffer)

    def skip_blank_lines(self) -> int:
        """Drop bare terminators sitting at the cursor without blocking.

        Returns:
            Number of blank lines dropped
        """
        skipped = 0
        while True:
            if self._pending.startswith(CRLF):
                del self._pending[: len(CRLF)]
            elif self._pending.startswith(LF):
                del self._pending[: len(LF)]
            else:
                return skipped
            skipped += 1
