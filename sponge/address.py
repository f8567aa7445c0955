"""Socket addresses and name resolution."""

from __future__ import annotations

import socket
from typing import Any

from sponge.util import TaggedError

__all__ = ["Address"]

_INET_FAMILIES = (socket.AF_INET, socket.AF_INET6)


class Address:
    """A socket address: an address family and the matching Python sockaddr."""

    def __init__(self, family: int, sockaddr: Any) -> None:
        self.family = family
        self.sockaddr = tuple(sockaddr) if isinstance(sockaddr, list) else sockaddr

    @classmethod
    def _lookup(cls, node: str, service: str, flags: int) -> "Address":
        try:
            results = socket.getaddrinfo(node, service, socket.AF_INET, 0, 0, flags)
        except socket.gaierror as exc:
            code = exc.errno if exc.errno is not None else 0
            raise TaggedError(f"getaddrinfo({node}, {service})", code, exc.strerror or str(exc)) from exc
        if not results:
            raise RuntimeError("getaddrinfo returned successfully but with no results")
        family, _, _, _, sockaddr = results[0]
        return cls(family, sockaddr)

    @classmethod
    def resolve(cls, hostname: str, service: str) -> "Address":
        """Resolve a hostname and a service name (e.g. "http") to an IPv4 address."""
        return cls._lookup(hostname, service, socket.AI_ALL)

    @classmethod
    def from_ip_port(cls, ip: str, port: int) -> "Address":
        """Build from a dotted-quad string and a numeric port, without name lookups."""
        if not 0 <= port <= 0xFFFF:
            raise ValueError(f"port out of range: {port}")
        return cls._lookup(ip, str(port), socket.AI_NUMERICHOST | socket.AI_NUMERICSERV)

    def ip_port(self) -> tuple[str, int]:
        """The numeric IP address string and the port."""
        if self.family not in _INET_FAMILIES:
            raise TaggedError("getnameinfo", socket.EAI_FAMILY, "address family not supported")
        try:
            host, service = socket.getnameinfo(
                self.sockaddr, socket.NI_NUMERICHOST | socket.NI_NUMERICSERV
            )
        except socket.gaierror as exc:
            code = exc.errno if exc.errno is not None else 0
            raise TaggedError("getnameinfo", code, exc.strerror or str(exc)) from exc
        return host, int(service)

    def ip(self) -> str:
        """The numeric IP address string, e.g. "18.243.0.1"."""
        return self.ip_port()[0]

    def port(self) -> int:
        """The port number."""
        return self.ip_port()[1]

    def ipv4_numeric(self) -> int:
        """The IPv4 address as an integer in host order."""
        if self.family != socket.AF_INET:
            raise ValueError("ipv4_numeric called on non-IPV4 address")
        return int.from_bytes(socket.inet_aton(self.sockaddr[0]), "big")

    def __str__(self) -> str:
        ip, port = self.ip_port()
        return f"{ip}:{port}"

    def __repr__(self) -> str:
        return f"Address({self.family!r}, {self.sockaddr!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Address):
            return NotImplemented
        return self.family == other.family and self.sockaddr == other.sockaddr

    def __hash__(self) -> int:
        return hash((self.family, self.sockaddr))