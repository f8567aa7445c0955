"""A flow-controlled, in-order, in-memory byte stream."""

from __future__ import annotations

from typing import Any

__all__ = ["ByteStream"]


def _as_bytes(data: Any) -> bytes:
    if isinstance(data, str):
        return data.encode()
    return bytes(data)


class ByteStream:
    """Bytes are written on the input side and read from the output side.

    The stream holds at most ``capacity`` unread bytes. The writer can end the
    input, after which no more bytes are accepted.
    """

    def __init__(self, capacity: int) -> None:
        if capacity < 0:
            raise ValueError("ByteStream capacity must be non-negative")
        self._capacity = capacity
        self._buffer = bytearray()
        self._input_ended = False
        self._error = False
        self._bytes_written = 0
        self._bytes_read = 0

    # Input side

    def write(self, data: Any) -> int:
        """Write as many bytes as fit and return how many were accepted."""
        if self._input_ended:
            return 0
        accepted = _as_bytes(data)[: self.remaining_capacity()]
        self._buffer.extend(accepted)
        self._bytes_written += len(accepted)
        return len(accepted)

    def remaining_capacity(self) -> int:
        """How many more bytes the stream has room for."""
        return self._capacity - len(self._buffer)

    def end_input(self) -> None:
        """Signal that the writer has reached the end of the stream."""
        self._input_ended = True

    def set_error(self) -> None:
        """Mark the stream as having suffered an error."""
        self._error = True

    # Output side

    def peek_output(self, length: int) -> bytes:
        """Copy up to ``length`` bytes from the front without removing them."""
        return bytes(self._buffer[: max(length, 0)])

    def pop_output(self, length: int) -> None:
        """Remove up to ``length`` bytes from the front."""
        count = min(max(length, 0), len(self._buffer))
        del self._buffer[:count]
        self._bytes_read += count

    def read(self, length: int) -> bytes:
        """Copy and then remove up to ``length`` bytes from the front."""
        data = self.peek_output(length)
        self.pop_output(length)
        return data

    def input_ended(self) -> bool:
        """True once the writer has ended the input."""
        return self._input_ended

    def error(self) -> bool:
        """True if the stream has suffered an error."""
        return self._error

    def buffer_size(self) -> int:
        """How many bytes can currently be read."""
        return len(self._buffer)

    def buffer_empty(self) -> bool:
        """True if no bytes are waiting to be read."""
        return not self._buffer

    def eof(self) -> bool:
        """True once input has ended and every byte has been read."""
        return self._input_ended and not self._buffer

    # Accounting

    def bytes_written(self) -> int:
        """Total number of bytes accepted by write()."""
        return self._bytes_written

    def bytes_read(self) -> int:
        """Total number of bytes removed from the output side."""
        return self._bytes_read