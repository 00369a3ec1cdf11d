"""A file descriptor together with the events it watches and their handlers."""

from __future__ import annotations

import enum
import weakref
from typing import Any, Callable, Optional, Protocol, Union

Callback = Optional[Callable[[], Any]]


class Event(enum.IntFlag):
    """Readiness events a channel can watch for or receive."""

    IN = 0x001
    PRI = 0x002
    OUT = 0x004
    ERR = 0x008
    HUP = 0x010
    RDHUP = 0x2000
    ET = 1 << 31


class _Loop(Protocol):
    def update_channel(self, channel: "Channel") -> None: ...

    def remove_channel(self, channel: "Channel") -> None: ...


class Channel:
    """Dispatches the events of one file descriptor to its callbacks.

    The channel neither owns nor closes its descriptor.
    """

    def __init__(self, loop: _Loop, fd: Union[int, Any]) -> None:
        self.loop = loop
        self.fd: int = fd if isinstance(fd, int) else fd.fileno()
        self.in_poll = False
        self.events = Event(0)
        self.revents = Event(0)
        self.read_callback: Callback = None
        self.write_callback: Callback = None
        self.close_callback: Callback = None
        self.error_callback: Callback = None
        self._tie: Optional[weakref.ref] = None

    def enable_et(self) -> None:
        """Ask for edge-triggered notification (takes effect on the next update)."""
        self.events |= Event.ET

    def enable_reading(self) -> None:
        self.events |= Event.IN
        self.loop.update_channel(self)

    def disable_reading(self) -> None:
        self.events &= ~Event.IN
        self.loop.update_channel(self)

    def enable_writing(self) -> None:
        self.events |= Event.OUT
        self.loop.update_channel(self)

    def disable_writing(self) -> None:
        self.events &= ~Event.OUT
        self.loop.update_channel(self)

    def disable_all(self) -> None:
        self.events = Event(0)
        self.loop.update_channel(self)

    def remove(self) -> None:
        """Stop watching all events and leave the loop."""
        self.disable_all()
        self.loop.remove_channel(self)

    def tie(self, obj: Any) -> None:
        """Only handle events while ``obj`` is still alive."""
        self._tie = weakref.ref(obj)

    def handle_event(self) -> None:
        """Run the callback matching the received events."""
        if self._tie is not None:
            guard = self._tie()
            if guard is None:
                return
            self._dispatch()
        else:
            self._dispatch()

    @staticmethod
    def _call(callback: Callback) -> None:
        if callback is not None:
            callback()

    def _dispatch(self) -> None:
        revents = self.revents
        if revents & Event.RDHUP:
            self._call(self.close_callback)
        elif revents & (Event.IN | Event.PRI):
            self._call(self.read_callback)
        elif revents & Event.OUT:
            self._call(self.write_callback)
        else:
            self._call(self.error_callback)