"""Waits for readiness on file descriptors and runs the matching callbacks."""

from __future__ import annotations

import enum
import errno
import select
from dataclasses import dataclass
from typing import Callable, Optional

from sponge.file_descriptor import FileDescriptor
from sponge.util import UnixError, system_call

__all__ = ["Direction", "Result", "EventLoop"]


class Direction(enum.IntEnum):
    """Whether a rule waits for its descriptor to become readable or writable."""

    IN = select.POLLIN
    OUT = select.POLLOUT


class Result(enum.Enum):
    """The outcome of one EventLoop.wait_next_event call."""

    SUCCESS = enum.auto()
    TIMEOUT = enum.auto()
    EXIT = enum.auto()


@dataclass(eq=False)
class _Rule:
    fd: FileDescriptor
    direction: Direction
    callback: Callable[[], None]
    interest: Callable[[], bool]
    cancel: Callable[[], None]

    def service_count(self) -> int:
        if self.direction is Direction.IN:
            return self.fd.read_count()
        return self.fd.write_count()


def _always_interested() -> bool:
    return True


def _do_nothing() -> None:
    return None


class EventLoop:
    """Holds rules (descriptor, direction, callbacks) and polls them.

    A rule is cancelled, and its ``cancel`` callback run, when its descriptor
    is closed, reaches EOF (for reading), or hangs up.
    """

    def __init__(self) -> None:
        self._rules: list[_Rule] = []

    def add_rule(
        self,
        fd: FileDescriptor,
        direction: Direction,
        callback: Callable[[], None],
        interest: Optional[Callable[[], bool]] = None,
        cancel: Optional[Callable[[], None]] = None,
    ) -> None:
        """Run ``callback`` whenever ``fd`` is ready in ``direction`` and ``interest()`` is true."""
        self._rules.append(
            _Rule(
                fd=fd.duplicate(),
                direction=Direction(direction),
                callback=callback,
                interest=interest if interest is not None else _always_interested,
                cancel=cancel if cancel is not None else _do_nothing,
            )
        )

    def _cancel(self, rule: _Rule) -> None:
        rule.cancel()
        self._rules.remove(rule)

    def wait_next_event(self, timeout_ms: int) -> Result:
        """Poll once and run the callbacks of the ready rules.

        Returns EXIT when no rule is left to poll (or the wait was interrupted),
        TIMEOUT when nothing became ready in time, and SUCCESS otherwise.
        Raises RuntimeError on a polling error or when a callback neither
        serviced its descriptor nor lost interest (a busy wait).
        """
        polled: list[tuple[_Rule, int]] = []
        something_to_poll = False
        for rule in list(self._rules):
            if (rule.direction is Direction.IN and rule.fd.eof()) or rule.fd.closed():
                self._cancel(rule)
                continue
            if rule.interest():
                polled.append((rule, int(rule.direction)))
                something_to_poll = True
            else:
                # still registered so that errors are reported
                polled.append((rule, 0))

        if not something_to_poll:
            return Result.EXIT

        masks: dict[int, int] = {}
        for rule, events in polled:
            fd_num = rule.fd.fd_num()
            masks[fd_num] = masks.get(fd_num, 0) | events
        poller = select.poll()
        for fd_num, mask in masks.items():
            poller.register(fd_num, mask)

        try:
            ready = system_call("poll", poller.poll, timeout_ms)
        except UnixError as exc:
            if exc.code == errno.EINTR:
                return Result.EXIT
            revents: dict[int, int] = {}
        else:
            if not ready:
                return Result.TIMEOUT
            revents = dict(ready)

        for rule, events in polled:
            rev = revents.get(rule.fd.fd_num(), 0)
            if rev & (select.POLLERR | select.POLLNVAL):
                raise RuntimeError("EventLoop: error on polled file descriptor")

            poll_ready = bool(rev & events)
            poll_hup = bool(rev & select.POLLHUP)
            if poll_hup and events and not poll_ready:
                # only a hangup: nothing more will ever be read or written
                self._cancel(rule)
                continue

            if poll_ready:
                count_before = rule.service_count()
                rule.callback()
                if count_before == rule.service_count() and rule.interest():
                    raise RuntimeError(
                        "EventLoop: busy wait detected: callback did not read/write fd and is still interested"
                    )

        return Result.SUCCESS