"""Parsing and writing network-byte-order integers."""

from __future__ import annotations

import enum
from typing import Any

from sponge.buffer import Buffer

__all__ = ["ParseResult", "as_string", "NetParser", "pack_u32", "pack_u16", "pack_u8"]


class ParseResult(enum.IntEnum):
    """The result of parsing or unparsing an IP datagram or TCP segment."""

    NO_ERROR = 0
    BAD_CHECKSUM = 1
    PACKET_TOO_SHORT = 2
    WRONG_IP_VERSION = 3
    HEADER_TOO_SHORT = 4
    TRUNCATED_PACKET = 5

    def __str__(self) -> str:
        return _LABELS[self]


_LABELS = {
    ParseResult.NO_ERROR: "NoError",
    ParseResult.BAD_CHECKSUM: "BadChecksum",
    ParseResult.PACKET_TOO_SHORT: "PacketTooShort",
    ParseResult.WRONG_IP_VERSION: "WrongIPVersion",
    ParseResult.HEADER_TOO_SHORT: "HeaderTooShort",
    ParseResult.TRUNCATED_PACKET: "TruncatedPacket",
}


def as_string(result: ParseResult) -> str:
    """A short name for a ParseResult, such as ``"NoError"``."""
    return _LABELS[ParseResult(result)]


class NetParser:
    """Reads big-endian integers from the front of a Buffer, recording the first shortfall.

    ``result`` holds the outcome so far and may be set by callers that detect
    higher-level errors.
    """

    def __init__(self, buffer: Any) -> None:
        if isinstance(buffer, Buffer):
            self._buffer = buffer._copy()
        else:
            self._buffer = Buffer(buffer)
        self.result = ParseResult.NO_ERROR

    def buffer(self) -> Buffer:
        """The unparsed remainder."""
        return self._buffer._copy()

    def error(self) -> bool:
        """True once any error has been recorded."""
        return self.result != ParseResult.NO_ERROR

    def _check_size(self, size: int) -> None:
        if size > len(self._buffer):
            self.result = ParseResult.PACKET_TOO_SHORT

    def _parse_int(self, size: int) -> int:
        self._check_size(size)
        if self.error():
            return 0
        value = int.from_bytes(self._buffer.view()[:size], "big")
        self._buffer.remove_prefix(size)
        return value

    def u32(self) -> int:
        """Parse a 32-bit big-endian integer (0 on error)."""
        return self._parse_int(4)

    def u16(self) -> int:
        """Parse a 16-bit big-endian integer (0 on error)."""
        return self._parse_int(2)

    def u8(self) -> int:
        """Parse an 8-bit integer (0 on error)."""
        return self._parse_int(1)

    def remove_prefix(self, n: int) -> None:
        """Skip ``n`` bytes, recording an error if there are not enough."""
        self._check_size(n)
        if self.error():
            return
        self._buffer.remove_prefix(n)


def pack_u32(value: int) -> bytes:
    """A 32-bit integer in network byte order (truncated to 32 bits)."""
    return (value & 0xFFFFFFFF).to_bytes(4, "big")


def pack_u16(value: int) -> bytes:
    """A 16-bit integer in network byte order (truncated to 16 bits)."""
    return (value & 0xFFFF).to_bytes(2, "big")


def pack_u8(value: int) -> bytes:
    """An 8-bit integer (truncated to 8 bits)."""
    return (value & 0xFF).to_bytes(1, "big")