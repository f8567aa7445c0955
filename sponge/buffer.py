"""Shared read-only byte buffers that can cheaply drop bytes from the front."""

from __future__ import annotations

from collections import deque
from typing import Any, Union

__all__ = ["Buffer", "BufferList", "BufferViewList"]


def _as_bytes(data: Any) -> bytes:
    if isinstance(data, str):
        return data.encode()
    return bytes(data)


class Buffer:
    """An immutable byte string that can discard bytes from its front without copying."""

    __slots__ = ("_storage", "_offset")

    def __init__(self, data: Any = b"") -> None:
        storage = _as_bytes(data)
        self._storage: bytes | None = storage if storage else None
        self._offset = 0

    def _copy(self) -> "Buffer":
        other = Buffer()
        other._storage = self._storage
        other._offset = self._offset
        return other

    def view(self) -> memoryview:
        """A zero-copy view of the remaining bytes."""
        if self._storage is None:
            return memoryview(b"")
        return memoryview(self._storage)[self._offset:]

    def __len__(self) -> int:
        if self._storage is None:
            return 0
        return len(self._storage) - self._offset

    def __getitem__(self, index: int) -> int:
        if index < 0 or index >= len(self):
            raise IndexError("Buffer index out of range")
        return self._storage[self._offset + index]  # type: ignore[index]

    def __bytes__(self) -> bytes:
        return bytes(self.view())

    def __repr__(self) -> str:
        return f"Buffer({bytes(self)!r})"

    def remove_prefix(self, n: int) -> None:
        """Discard the first ``n`` bytes."""
        if n < 0 or n > len(self):
            raise IndexError("Buffer.remove_prefix")
        self._offset += n
        if self._storage is not None and self._offset == len(self._storage):
            self._storage = None
            self._offset = 0


_BufferSource = Union["BufferList", Buffer, bytes, bytearray, memoryview, str]


class BufferList:
    """A discontiguous byte string made of Buffers, for prepending headers without copying."""

    def __init__(self, data: _BufferSource | None = None) -> None:
        self._buffers: deque[Buffer] = deque()
        if data is None:
            return
        if isinstance(data, BufferList):
            self.append(data)
        elif isinstance(data, Buffer):
            self._buffers.append(data._copy())
        else:
            self._buffers.append(Buffer(data))

    def buffers(self) -> tuple[Buffer, ...]:
        """The underlying Buffers, in order."""
        return tuple(self._buffers)

    def append(self, other: _BufferSource) -> None:
        """Append the Buffers of another BufferList (or a single buffer)."""
        source = other if isinstance(other, BufferList) else BufferList(other)
        self._buffers.extend(buf._copy() for buf in source._buffers)

    def to_buffer(self) -> Buffer:
        """Return the single contiguous Buffer; a multi-buffer list raises ValueError."""
        if not self._buffers:
            return Buffer()
        if len(self._buffers) == 1:
            return self._buffers[0]._copy()
        raise ValueError(
            "BufferList: please use concatenate() to combine a multi-Buffer BufferList into one Buffer"
        )

    def remove_prefix(self, n: int) -> None:
        """Discard the first ``n`` bytes across the Buffers."""
        while n > 0:
            if not self._buffers:
                raise IndexError("BufferList.remove_prefix")
            front = self._buffers[0]
            if n < len(front):
                front.remove_prefix(n)
                n = 0
            else:
                n -= len(front)
                self._buffers.popleft()

    def __len__(self) -> int:
        return sum(len(buf) for buf in self._buffers)

    def concatenate(self) -> bytes:
        """Copy all bytes into a single bytes object."""
        return b"".join(buf.view() for buf in self._buffers)


class BufferViewList:
    """A temporary, non-owning view of a discontiguous byte string."""

    def __init__(self, data: Any) -> None:
        self._views: deque[memoryview] = deque()
        if isinstance(data, BufferList):
            self._views.extend(buf.view() for buf in data.buffers())
        elif isinstance(data, Buffer):
            self._views.append(data.view())
        elif isinstance(data, str):
            self._views.append(memoryview(data.encode()))
        else:
            self._views.append(memoryview(data).cast("B"))

    def remove_prefix(self, n: int) -> None:
        """Discard the first ``n`` bytes across the views."""
        while n > 0:
            if not self._views:
                raise IndexError("BufferViewList.remove_prefix")
            front = self._views[0]
            if n < len(front):
                self._views[0] = front[n:]
                n = 0
            else:
                n -= len(front)
                self._views.popleft()

    def __len__(self) -> int:
        return sum(len(view) for view in self._views)

    def as_iovecs(self) -> list[memoryview]:
        """The views as a list suitable for scatter/gather calls such as ``os.writev``."""
        return list(self._views)