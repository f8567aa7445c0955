"""Network sockets on top of FileDescriptor: UDP, TCP and Unix-domain streams."""

from __future__ import annotations

import functools
import socket
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterator, Optional

from sponge.address import Address
from sponge.buffer import BufferViewList
from sponge.file_descriptor import FileDescriptor
from sponge.util import system_call

__all__ = ["Socket", "ReceivedDatagram", "UDPSocket", "TCPSocket", "LocalStreamSocket"]

_MSG_TRUNC = getattr(socket, "MSG_TRUNC", 0)


class Socket(FileDescriptor):
    """Base class for network sockets; normally used through a subclass."""

    def __init__(self, domain: int, type: int, fd: Optional[FileDescriptor] = None) -> None:
        if fd is None:
            sock = system_call("socket", socket.socket, domain, type)
            super().__init__(sock.detach())
            return
        # take over the given handle's shared descriptor state
        self._internal = fd._internal
        with self._borrowed() as sock:
            if sock.family != domain:
                raise RuntimeError("socket domain mismatch")
            actual_type = system_call("getsockopt", sock.getsockopt, socket.SOL_SOCKET, socket.SO_TYPE)
            if actual_type != type:
                raise RuntimeError("socket type mismatch")

    @contextmanager
    def _borrowed(self) -> Iterator[socket.socket]:
        """A temporary socket object over this descriptor that never closes it."""
        sock = system_call("socket", functools.partial(socket.socket, fileno=self.fd_num()))
        try:
            yield sock
        finally:
            sock.detach()

    def _get_address(self, name_of_function: str) -> Address:
        with self._borrowed() as sock:
            sockaddr = system_call(name_of_function, getattr(sock, name_of_function))
            return Address(sock.family, sockaddr)

    def _setsockopt(self, level: int, option: int, value: Any) -> None:
        with self._borrowed() as sock:
            system_call("setsockopt", sock.setsockopt, level, option, value)

    def bind(self, address: Address) -> None:
        """Bind to a local address, usually before listen/accept."""
        with self._borrowed() as sock:
            system_call("bind", sock.bind, address.sockaddr)

    def connect(self, address: Address) -> None:
        """Connect to a peer address."""
        with self._borrowed() as sock:
            system_call("connect", sock.connect, address.sockaddr)

    def shutdown(self, how: int) -> None:
        """Shut down reading (SHUT_RD), writing (SHUT_WR) or both (SHUT_RDWR)."""
        with self._borrowed() as sock:
            system_call("shutdown", sock.shutdown, how)
        if how == socket.SHUT_RD:
            self._register_read()
        elif how == socket.SHUT_WR:
            self._register_write()
        elif how == socket.SHUT_RDWR:
            self._register_read()
            self._register_write()
        else:
            raise ValueError("Socket.shutdown() called with invalid `how`")

    def local_address(self) -> Address:
        """The socket's local address."""
        return self._get_address("getsockname")

    def peer_address(self) -> Address:
        """The address of the connected peer."""
        return self._get_address("getpeername")

    def set_reuseaddr(self) -> None:
        """Allow the local address to be reused sooner (SO_REUSEADDR)."""
        self._setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)


@dataclass
class ReceivedDatagram:
    """A received datagram and the address it came from."""

    source_address: Address
    payload: bytes


def _sendmsg(sock: socket.socket, payload: Any, destination: Optional[Address]) -> None:
    views = payload if isinstance(payload, BufferViewList) else BufferViewList(payload)
    iovecs = views.as_iovecs()
    if destination is None:
        sent = system_call("sendmsg", sock.sendmsg, iovecs)
    else:
        sent = system_call("sendmsg", sock.sendmsg, iovecs, [], 0, destination.sockaddr)
    if sent != len(views):
        raise RuntimeError("datagram payload too big for sendmsg()")


class UDPSocket(Socket):
    """An IPv4 UDP socket."""

    def __init__(self, fd: Optional[FileDescriptor] = None) -> None:
        super().__init__(socket.AF_INET, socket.SOCK_DGRAM, fd)

    def recv(self, mtu: int = 65536) -> ReceivedDatagram:
        """Receive one datagram; raises RuntimeError if it is larger than ``mtu``."""
        buffer = bytearray(mtu)
        with self._borrowed() as sock:
            length, source = system_call("recvfrom", sock.recvfrom_into, buffer, mtu, _MSG_TRUNC)
            family = sock.family
        if length > mtu:
            raise RuntimeError("recvfrom (oversized datagram)")
        self._register_read()
        return ReceivedDatagram(Address(family, source), bytes(buffer[:length]))

    def sendto(self, destination: Address, payload: Any) -> None:
        """Send a datagram to ``destination``."""
        with self._borrowed() as sock:
            _sendmsg(sock, payload, destination)
        self._register_write()

    def send(self, payload: Any) -> None:
        """Send a datagram to the connected peer."""
        with self._borrowed() as sock:
            _sendmsg(sock, payload, None)
        self._register_write()


class TCPSocket(Socket):
    """An IPv4 TCP socket."""

    def __init__(self, fd: Optional[FileDescriptor] = None) -> None:
        super().__init__(socket.AF_INET, socket.SOCK_STREAM, fd)

    def listen(self, backlog: int = 16) -> None:
        """Mark the socket as accepting connections."""
        with self._borrowed() as sock:
            system_call("listen", sock.listen, backlog)

    def accept(self) -> "TCPSocket":
        """Wait for and return a new connection."""
        self._register_read()
        with self._borrowed() as sock:
            conn, _ = system_call("accept", sock.accept)
        return TCPSocket(FileDescriptor(conn.detach()))


class LocalStreamSocket(Socket):
    """A Unix-domain stream socket built from an existing descriptor."""

    def __init__(self, fd: FileDescriptor) -> None:
        super().__init__(socket.AF_UNIX, socket.SOCK_STREAM, fd)