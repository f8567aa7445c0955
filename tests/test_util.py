import errno
import io
import os

import pytest

from sponge.util import (
    InternetChecksum,
    TaggedError,
    UnixError,
    format_hexdump,
    get_random_generator,
    hexdump,
    system_call,
    timestamp_ms,
)


def test_tagged_error_message_and_fields():
    err = TaggedError("getaddrinfo(host, svc)", -2, "lookup failed")
    assert str(err) == "getaddrinfo(host, svc): lookup failed"
    assert err.attempt == "getaddrinfo(host, svc)"
    assert err.code == -2


def test_unix_error_uses_strerror():
    err = UnixError("close", errno.EBADF)
    assert str(err) == "close: " + os.strerror(errno.EBADF)
    assert err.errno == errno.EBADF
    assert isinstance(err, OSError)


def test_system_call_raises_tagged():
    with pytest.raises(UnixError) as info:
        system_call("close", os.close, -1)
    assert info.value.code == errno.EBADF
    assert str(info.value).startswith("close: ")


def test_system_call_errno_mask_returns_none():
    assert system_call("close", os.close, -1, errno_mask=errno.EBADF) is None


def test_system_call_mask_other_errno_still_raises():
    with pytest.raises(UnixError):
        system_call("close", os.close, -1, errno_mask=errno.EAGAIN)


def test_system_call_returns_value():
    r, w = os.pipe()
    try:
        dup = system_call("dup", os.dup, r)
        assert dup >= 0 and dup not in (r, w)
        os.close(dup)
    finally:
        os.close(r)
        os.close(w)


def test_random_generators_differ():
    a = get_random_generator()
    b = get_random_generator()
    seq_a = [a.getrandbits(64) for _ in range(4)]
    seq_b = [b.getrandbits(64) for _ in range(4)]
    assert seq_a != seq_b
    assert all(0 <= x < 2**64 for x in seq_a)


def test_timestamp_monotonic():
    first = timestamp_ms()
    second = timestamp_ms()
    assert 0 <= first <= second


def test_checksum_worked_example():
    header = bytes.fromhex("450000730000400040110000c0a80001c0a800c7")
    check = InternetChecksum()
    check.add(header)
    assert check.value() == 0xB861


def test_checksum_verifies_to_zero():
    header = bytearray(bytes.fromhex("450000730000400040110000c0a80001c0a800c7"))
    check = InternetChecksum()
    check.add(header)
    value = check.value()
    header[10] = value >> 8
    header[11] = value & 0xFF
    verify = InternetChecksum()
    verify.add(header)
    assert verify.value() == 0


def test_checksum_split_odd_lengths():
    whole = InternetChecksum()
    whole.add(b"\x01\x02\x03\x04\x05")
    split = InternetChecksum()
    split.add(b"\x01")
    split.add(b"\x02\x03")
    split.add(memoryview(b"\x04\x05"))
    assert whole.value() == split.value()


def test_checksum_initial_sum_matches_prefix():
    prefix = InternetChecksum()
    prefix.add(b"\x12\x34")
    seeded = InternetChecksum(0x1234)
    assert prefix.value() == seeded.value()


def test_checksum_empty():
    assert InternetChecksum().value() == 0xFFFF


def test_hexdump_short_line():
    assert format_hexdump(b"AB") == "00000000:    4142" + " " * 39 + "AB\n\n"


def test_hexdump_full_and_partial_lines():
    data = bytes(range(0x41, 0x41 + 17))
    text = format_hexdump(data, indent=2)
    lines = text.split("\n")
    assert lines[0].startswith("  00000000:    4142 4344")
    assert lines[0].endswith("    " + data[:16].decode())
    assert lines[1].startswith("  00000010:    51")
    assert lines[1].endswith(data[16:].decode())
    assert text.endswith("\n\n")


def test_hexdump_nonprintable_dots():
    text = format_hexdump(b"\x00a\xff")
    assert text.rstrip("\n").endswith(".a.")


def test_hexdump_alignment_of_characters():
    one = format_hexdump(b"x").split("\n")[0]
    full = format_hexdump(b"y" * 16).split("\n")[0]
    assert one.index("x", len("00000000:    78")) == full.index("yyyy")


def test_hexdump_writes_to_file():
    out = io.StringIO()
    hexdump(b"hello world", indent=4, file=out)
    assert out.getvalue() == format_hexdump(b"hello world", 4)