"""A reference-counted handle to a kernel file descriptor."""

from __future__ import annotations

import os
import sys
from typing import Any

from sponge.buffer import BufferViewList
from sponge.util import system_call

__all__ = ["FileDescriptor"]

_MAX_READ = 1024 * 1024


class _FDWrapper:
    """Shared state for one kernel descriptor; closes it when the last handle goes away."""

    __slots__ = ("fd", "eof", "closed", "read_count", "write_count")

    def __init__(self, fd: int) -> None:
        if fd < 0:
            raise ValueError(f"invalid fd number:{fd}")
        self.fd = fd
        self.eof = False
        self.closed = False
        self.read_count = 0
        self.write_count = 0

    def close(self) -> None:
        system_call("close", os.close, self.fd)
        self.eof = True
        self.closed = True

    def __del__(self) -> None:
        try:
            if not self.closed:
                self.close()
        except Exception as exc:  # never raise from a finaliser
            print(f"Exception destructing FDWrapper: {exc}", file=sys.stderr)


class FileDescriptor:
    """A handle on a file descriptor that tracks EOF and counts reads and writes.

    Handles made with duplicate() share the descriptor and its counters; the
    descriptor is closed when the last handle is released, or by close().
    """

    def __init__(self, fd: int) -> None:
        self._internal = _FDWrapper(fd)

    @classmethod
    def _sharing(cls, wrapper: _FDWrapper) -> "FileDescriptor":
        handle = cls.__new__(cls)
        handle._internal = wrapper
        return handle

    def _register_read(self) -> None:
        self._internal.read_count += 1

    def _register_write(self) -> None:
        self._internal.write_count += 1

    def read(self, limit: int | None = None) -> bytes:
        """Read up to ``limit`` bytes (at most 1 MiB per call); fewer may be returned."""
        size = _MAX_READ if limit is None else min(_MAX_READ, limit)
        data = system_call("read", os.read, self.fd_num(), size)
        if size > 0 and not data:
            self._internal.eof = True
        if len(data) > size:
            raise RuntimeError("read() read more than requested")
        self._register_read()
        return data

    def write(self, data: Any, write_all: bool = True) -> int:
        """Write bytes, a buffer or a buffer list; with ``write_all`` keep going until all is written."""
        pending = [view for view in BufferViewList(data).as_iovecs() if len(view)] if not isinstance(
            data, BufferViewList
        ) else [view for view in data.as_iovecs() if len(view)]
        total = 0
        while True:
            remaining = sum(len(view) for view in pending)
            written = system_call("writev", os.writev, self.fd_num(), pending)
            if written == 0 and remaining != 0:
                raise RuntimeError("write returned 0 given non-empty input buffer")
            if written > remaining:
                raise RuntimeError("write wrote more than length of input buffer")
            self._register_write()
            total += written
            pending = _drop_prefix(pending, written)
            if not (write_all and pending):
                return total

    def close(self) -> None:
        """Close the underlying descriptor."""
        self._internal.close()

    def duplicate(self) -> "FileDescriptor":
        """Another handle on the same descriptor, sharing its state."""
        return type(self)._sharing(self._internal)

    def set_blocking(self, blocking_state: bool) -> None:
        """Make the descriptor blocking (True) or non-blocking (False)."""
        system_call("fcntl", os.set_blocking, self.fd_num(), blocking_state)

    def fd_num(self) -> int:
        """The kernel's descriptor number."""
        return self._internal.fd

    def eof(self) -> bool:
        """True once a read has returned no data."""
        return self._internal.eof

    def closed(self) -> bool:
        """True once the descriptor has been closed."""
        return self._internal.closed

    def read_count(self) -> int:
        """Number of reads performed through any handle."""
        return self._internal.read_count

    def write_count(self) -> int:
        """Number of writes performed through any handle."""
        return self._internal.write_count

    def __enter__(self) -> "FileDescriptor":
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        if not self.closed():
            self.close()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(fd={self.fd_num()}, closed={self.closed()})"


def _drop_prefix(views: list[memoryview], n: int) -> list[memoryview]:
    result = list(views)
    while n > 0 and result:
        front = result[0]
        if n < len(front):
            result[0] = front[n:]
            n = 0
        else:
            n -= len(front)
            result.pop(0)
    return result