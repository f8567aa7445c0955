"""Networking building blocks: byte streams, buffers, wire parsers, checksums, addresses, file descriptors, sockets, a TUN handle and a poll-based event loop."""

__version__ = "0.1.0"