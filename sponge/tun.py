"""A file descriptor for an existing Linux TUN device."""

from __future__ import annotations

import fcntl
import os
import struct

from sponge.file_descriptor import FileDescriptor
from sponge.util import system_call

__all__ = ["TunFD"]

CLONEDEV = "/dev/net/tun"
TUNSETIFF = 0x400454CA
IFF_TUN = 0x0001
IFF_NO_PI = 0x1000
IFNAMSIZ = 16


def _ifreq(devname: str) -> bytes:
    """A ``struct ifreq`` naming ``devname`` (null-terminated) with TUN, no-packet-info flags."""
    name = devname.encode()[: IFNAMSIZ - 1]
    return struct.pack(f"{IFNAMSIZ}sH22x", name, IFF_TUN | IFF_NO_PI)


class TunFD(FileDescriptor):
    """Opens a persistent TUN device that was created beforehand.

    Create the device first, as root, with
    ``ip tuntap add mode tun user <username> name <devname>``.
    """

    def __init__(self, devname: str) -> None:
        super().__init__(system_call("open", os.open, CLONEDEV, os.O_RDWR))
        try:
            system_call("ioctl", fcntl.ioctl, self.fd_num(), TUNSETIFF, _ifreq(devname))
        except BaseException:
            self.close()
            raise