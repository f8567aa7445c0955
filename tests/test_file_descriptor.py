import errno
import os

import pytest

from sponge.buffer import Buffer, BufferList, BufferViewList
from sponge.file_descriptor import FileDescriptor
from sponge.util import UnixError


@pytest.fixture
def pipe():
    read_fd, write_fd = os.pipe()
    reader = FileDescriptor(read_fd)
    writer = FileDescriptor(write_fd)
    yield reader, writer
    for handle in (reader, writer):
        if not handle.closed():
            handle.close()


def test_write_then_read(pipe):
    reader, writer = pipe
    assert writer.write(b"hello") == 5
    assert reader.read() == b"hello"


def test_read_respects_limit(pipe):
    reader, writer = pipe
    writer.write(b"abcdef")
    assert reader.read(2) == b"ab"
    assert reader.read(10) == b"cdef"


def test_counters(pipe):
    reader, writer = pipe
    writer.write(b"x")
    writer.write(b"y")
    reader.read()
    assert writer.write_count() == 2
    assert reader.read_count() == 1
    assert reader.write_count() == 0


def test_eof_after_writer_closes(pipe):
    reader, writer = pipe
    writer.write(b"z")
    writer.close()
    assert reader.read() == b"z"
    assert not reader.eof()
    assert reader.read() == b""
    assert reader.eof()


def test_zero_limit_read_does_not_set_eof(pipe):
    reader, writer = pipe
    writer.close()
    assert reader.read(0) == b""
    assert not reader.eof()


def test_write_buffer_list(pipe):
    reader, writer = pipe
    payload = BufferList(b"head")
    payload.append(BufferList(Buffer(b"-body")))
    assert writer.write(payload) == 9
    assert reader.read() == b"head-body"


def test_write_view_list_is_not_consumed(pipe):
    reader, writer = pipe
    views = BufferViewList(b"abc")
    writer.write(views)
    assert len(views) == 3
    assert reader.read() == b"abc"


def test_write_string(pipe):
    reader, writer = pipe
    writer.write("text")
    assert reader.read() == b"text"


def test_duplicate_shares_state(pipe):
    reader, writer = pipe
    copy = reader.duplicate()
    assert copy.fd_num() == reader.fd_num()
    writer.write(b"q")
    copy.read()
    assert reader.read_count() == 1
    copy.close()
    assert reader.closed()


def test_close_sets_flags(pipe):
    reader, _ = pipe
    reader.close()
    assert reader.closed()
    assert reader.eof()


def test_double_close_raises(pipe):
    reader, _ = pipe
    reader.close()
    with pytest.raises(UnixError) as info:
        reader.close()
    assert info.value.code == errno.EBADF
    assert info.value.attempt == "close"


def test_nonblocking_read_on_empty_pipe(pipe):
    reader, _ = pipe
    reader.set_blocking(False)
    with pytest.raises(UnixError) as info:
        reader.read()
    assert info.value.code == errno.EAGAIN
    reader.set_blocking(True)
    assert os.get_blocking(reader.fd_num()) is True


def test_invalid_fd_number():
    with pytest.raises(ValueError):
        FileDescriptor(-1)


def test_context_manager_closes():
    read_fd, write_fd = os.pipe()
    with FileDescriptor(write_fd) as writer:
        writer.write(b"ok")
    assert writer.closed()
    with FileDescriptor(read_fd) as reader:
        assert reader.read() == b"ok"
    assert reader.closed()


def test_descriptor_closed_when_released():
    read_fd, write_fd = os.pipe()
    handle = FileDescriptor(write_fd)
    del handle
    reader = FileDescriptor(read_fd)
    assert reader.read() == b""
    assert reader.eof()
    reader.close()