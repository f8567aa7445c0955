"""System-call error handling, timing, randomness, checksums and hexdumps."""

from __future__ import annotations

import os
import random
import sys
import time
from typing import Any, Callable, TextIO

__all__ = [
    "TaggedError",
    "UnixError",
    "InternetChecksum",
    "system_call",
    "get_random_generator",
    "timestamp_ms",
    "format_hexdump",
    "hexdump",
]

_PROGRAM_START = time.monotonic()


class TaggedError(OSError):
    """An OSError that also records what was being attempted."""

    def __init__(self, attempt: str, code: int, message: str) -> None:
        super().__init__(code, message)
        self.attempt = attempt
        self.code = code
        self.message = message

    def __str__(self) -> str:
        return f"{self.attempt}: {self.message}"


class UnixError(TaggedError):
    """A TaggedError for a failed system call, described by its errno."""

    def __init__(self, attempt: str, code: int) -> None:
        super().__init__(attempt, code, os.strerror(code))


def system_call(attempt: str, func: Callable[..., Any], *args: Any, errno_mask: int = 0) -> Any:
    """Call ``func(*args)``, turning an OSError into a UnixError tagged with ``attempt``.

    If the failure's errno equals a non-zero ``errno_mask``, None is returned instead.
    """
    try:
        return func(*args)
    except OSError as exc:
        code = exc.errno if exc.errno is not None else 0
        if errno_mask and code == errno_mask:
            return None
        raise UnixError(attempt, code) from exc


def get_random_generator() -> random.Random:
    """Return a random generator seeded from the operating system's entropy source."""
    return random.Random(int.from_bytes(os.urandom(64), "big"))


def timestamp_ms() -> int:
    """Milliseconds elapsed since the program started."""
    return int((time.monotonic() - _PROGRAM_START) * 1000)


class InternetChecksum:
    """The Internet checksum (one's-complement sum of 16-bit big-endian words)."""

    def __init__(self, initial_sum: int = 0) -> None:
        self._sum = initial_sum & 0xFFFFFFFF
        self._parity = False

    def add(self, data: Any) -> None:
        """Add bytes to the running sum; odd lengths carry over between calls."""
        for byte in bytes(data):
            value = byte if self._parity else byte << 8
            self._sum = (self._sum + value) & 0xFFFFFFFF
            self._parity = not self._parity

    def value(self) -> int:
        """The checksum in host order: zero when run over data with a correct checksum."""
        total = self._sum
        while total > 0xFFFF:
            total = (total >> 16) + (total & 0xFFFF)
        return ~total & 0xFFFF


def _printable(byte: int) -> str:
    return chr(byte) if 0x20 <= byte < 0x7F else "."


def format_hexdump(data: Any, indent: int = 0) -> str:
    """Render bytes as a hexdump: offset, hex words, printable characters."""
    data = bytes(data)
    pad = " " * indent
    parts: list[str] = []
    chars: list[str] = []
    for printed, byte in enumerate(data):
        if printed % 16 == 0:
            if printed:
                parts.append("    " + "".join(chars) + "\n")
                chars = []
            parts.append(f"{pad}{printed:08x}:    ")
        elif printed % 2 == 0:
            parts.append(" ")
        parts.append(f"{byte:02x}")
        chars.append(_printable(byte))
    remainder = (16 - len(data) % 16) % 16
    parts.append(" " * (2 * remainder + remainder // 2 + 4) + ("".join(chars) or " "))
    parts.append("\n\n")
    return "".join(parts)


def hexdump(data: Any, indent: int = 0, file: TextIO | None = None) -> None:
    """Write a hexdump of ``data`` to ``file`` (standard output by default)."""
    out = sys.stdout if file is None else file
    out.write(format_hexdump(data, indent))
    out.flush()