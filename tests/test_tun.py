import errno
import os
import struct
from unittest import mock

import pytest

from sponge.tun import CLONEDEV, IFF_NO_PI, IFF_TUN, TUNSETIFF, TunFD, _ifreq
from sponge.util import UnixError


def test_ifreq_layout():
    request = _ifreq("tun144")
    assert len(request) == 40
    assert request[:16] == b"tun144".ljust(16, b"\0")
    assert struct.unpack_from("H", request, 16)[0] == IFF_TUN | IFF_NO_PI


def test_ifreq_truncates_long_names_and_keeps_terminator():
    request = _ifreq("x" * 30)
    assert request[:15] == b"x" * 15
    assert request[15] == 0


def test_tunfd_opens_clone_device_and_configures_it():
    read_fd, write_fd = os.pipe()
    try:
        with mock.patch("sponge.tun.os.open", return_value=read_fd) as fake_open, mock.patch(
            "sponge.tun.fcntl.ioctl", return_value=0
        ) as fake_ioctl:
            tun = TunFD("tun144")
        fake_open.assert_called_once_with(CLONEDEV, os.O_RDWR)
        fake_ioctl.assert_called_once_with(read_fd, TUNSETIFF, _ifreq("tun144"))
        assert tun.fd_num() == read_fd
        tun.close()
        assert tun.closed()
    finally:
        os.close(write_fd)


def test_open_failure_raises_unix_error():
    failure = FileNotFoundError(errno.ENOENT, "missing")
    with mock.patch("sponge.tun.os.open", side_effect=failure):
        with pytest.raises(UnixError) as info:
            TunFD("tun144")
    assert info.value.attempt == "open"
    assert info.value.code == errno.ENOENT


def test_ioctl_failure_raises_and_closes_descriptor():
    read_fd, write_fd = os.pipe()
    try:
        failure = PermissionError(errno.EPERM, "denied")
        with mock.patch("sponge.tun.os.open", return_value=read_fd), mock.patch(
            "sponge.tun.fcntl.ioctl", side_effect=failure
        ):
            with pytest.raises(UnixError) as info:
                TunFD("tun144")
        assert info.value.attempt == "ioctl"
        with pytest.raises(OSError):
            os.fstat(read_fd)
    finally:
        os.close(write_fd)