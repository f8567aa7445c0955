# sponge

Small building blocks for network software in Python on POSIX systems. The
package has no dependencies outside the standard library.

## Modules

### `sponge.byte_stream`

`ByteStream(capacity)` is a finite, flow-controlled, in-memory byte stream.
It holds at most `capacity` unread bytes.

Writer side:

- `write(data)` accepts as many bytes as fit and returns that count. It
  returns 0 once the input has ended.
- `remaining_capacity()`
- `end_input()`
- `set_error()`

Reader side:

- `peek_output(n)`
- `pop_output(n)`
- `read(n)`
- `buffer_size()`
- `buffer_empty()`
- `input_ended()`
- `eof()`: true once the input has ended and every byte has been read.
- `error()`

Accounting: `bytes_written()` and `bytes_read()`.

### `sponge.buffer`

Byte buffers that can drop bytes from the front without copying.

- `Buffer(data)` supports `len()`, indexing, `bytes()`, `view()` (a
  `memoryview`) and `remove_prefix(n)`.
- `BufferList(data)` holds a discontiguous byte string made of Buffers, for
  example headers in front of a payload. Its members are:
  - `buffers()`
  - `append(other)`
  - `remove_prefix(n)`
  - `len()`
  - `concatenate()`, which returns `bytes`.
  - `to_buffer()`, which raises `ValueError` when the list holds more than one
    Buffer.
- `BufferViewList(data)` is a non-owning view. Its `as_iovecs()` returns a list
  of `memoryview`s, ready for scatter/gather calls such as `os.writev`.

`remove_prefix` past the end raises `IndexError`.

### `sponge.parser`

- `NetParser(buffer)` reads big-endian integers with `u8()`, `u16()` and
  `u32()`, and skips bytes with `remove_prefix(n)`.
  - A shortfall does not raise. It sets `result` to
    `ParseResult.PACKET_TOO_SHORT`, `error()` becomes true, and the reads
    return 0.
  - `buffer()` returns the unparsed remainder.
- `ParseResult` is an `IntEnum` with these members:
  - `NO_ERROR`
  - `BAD_CHECKSUM`
  - `PACKET_TOO_SHORT`
  - `WRONG_IP_VERSION`
  - `HEADER_TOO_SHORT`
  - `TRUNCATED_PACKET`

  `str()` and `as_string()` give names such as `"PacketTooShort"`.
- `pack_u8`, `pack_u16` and `pack_u32` write integers in network byte order,
  truncated to their width.

### `sponge.util`

- `InternetChecksum(initial_sum=0)` computes the one's-complement Internet
  checksum.
  - `add(data)` can be called several times. An odd-length chunk carries its
    byte parity over to the next call.
  - `value()` returns the checksum. Over data that already holds a correct
    checksum it returns 0.
- `format_hexdump(data, indent=0)` returns a hexdump: offset, hex words, and
  printable characters. `hexdump(data, indent=0, file=None)` writes the same
  text to standard output or to `file`.
- `timestamp_ms()` gives milliseconds since the module was loaded, from a
  monotonic clock.
- `get_random_generator()` returns a `random.Random` seeded from `os.urandom`.
- `system_call(attempt, func, *args, errno_mask=0)` calls `func(*args)`.
  - An `OSError` from the call becomes a `UnixError` tagged with `attempt`.
  - If the failure's errno equals `errno_mask`, it returns `None` instead.
- `TaggedError` and `UnixError` are subclasses of `OSError`.

### `sponge.address`

`Address(family, sockaddr)` holds a socket address. There are two ways to
build an IPv4 address:

- `Address.from_ip_port("127.0.0.1", 8080)` does no name lookups.
- `Address.resolve("localhost", "http")` resolves the host and service names.

Resolution failures raise `TaggedError`.

Accessors:

- `ip_port()`
- `ip()`
- `port()`
- `ipv4_numeric()`, the address as an integer.
- `str()`, for example `"127.0.0.1:8080"`.

Addresses compare equal and hash by family and sockaddr.

### `sponge.file_descriptor`

`FileDescriptor(fd)` is a handle on an OS descriptor.

- `duplicate()` returns another handle that shares the same descriptor, EOF
  flag and counters. The descriptor is closed by `close()`, on leaving a
  `with` block, or when the last handle is released.
- `read(limit=None)` reads at most 1 MiB per call and sets `eof()` when the
  read returns no data.
- `write(data, write_all=True)` accepts `bytes`, a `Buffer`, a `BufferList` or
  a `BufferViewList`, and writes with `os.writev`.
- `set_blocking(flag)` switches blocking mode.
- Accessors: `fd_num()`, `eof()`, `closed()`, `read_count()` and
  `write_count()`.

### `sponge.eventloop`

`EventLoop` polls file descriptors with `select.poll`.

`add_rule(fd, direction, callback, interest=None, cancel=None)` registers a
rule. `direction` is `Direction.IN` or `Direction.OUT`.

`wait_next_event(timeout_ms)` polls once, runs the callbacks of the ready
rules, and returns a `Result`:

- `Result.SUCCESS`
- `Result.TIMEOUT`
- `Result.EXIT`, when nothing is left to poll or the wait was interrupted.

A rule is cancelled, and its `cancel` callback is run, when its descriptor:

- is closed,
- reaches EOF (for reading), or
- hangs up.

`wait_next_event` raises `RuntimeError` in two cases:

- on a poll error;
- when a callback neither reads nor writes its descriptor and is still
  interested (a busy wait).

### `sponge.sockets`

These classes are subclasses of `FileDescriptor`.

- `TCPSocket`:
  - `listen(backlog=16)`
  - `accept()`
- `UDPSocket`:
  - `recv(mtu=65536)` returns a `ReceivedDatagram` with `source_address` and
    `payload`. It raises `RuntimeError` for an oversized datagram.
  - `sendto(address, payload)`
  - `send(payload)`
- `LocalStreamSocket(fd)` wraps an existing Unix-domain stream descriptor.

All sockets have these methods:

- `bind`
- `connect`
- `shutdown(how)`: the counters are updated for `socket.SHUT_RD`, `SHUT_WR` and
  `SHUT_RDWR`. Any other `how` raises `ValueError`.
- `local_address`
- `peer_address`
- `set_reuseaddr`

When a socket is built from an existing descriptor, its domain and type are
checked.

### `sponge.tun`

`TunFD(devname)` opens an existing persistent Linux TUN device through
`/dev/net/tun`. It is set up without packet information. Create the device
first, as root:

```
ip tuntap add mode tun user <username> name <devname>
```

## Example

```python
from sponge.byte_stream import ByteStream
from sponge.util import InternetChecksum

stream = ByteStream(8)
stream.write(b"hello, world")   # returns 8: only what fits is accepted
stream.read(5)                  # b"hello"
stream.end_input()

checksum = InternetChecksum()
checksum.add(b"\x45\x00\x00\x1c")
print(hex(checksum.value()))
```

## What it does not do

The package supplies the pieces a user-space TCP stack is built from, but not
the stack itself. It has no:

- TCP sender or receiver;
- stream reassembler;
- connection state machine;
- IPv4 or TCP header types.

It installs no command-line programs.

## Running the tests

```
pip install -e .[test]
pytest
```