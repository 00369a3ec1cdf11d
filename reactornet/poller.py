"""Readiness polling for a set of channels."""

from __future__ import annotations

import errno
import selectors
import time
from typing import Dict, List, Optional

from reactornet.channel import Channel, Event

MAX_EVENTS = 100

_READ_EVENTS = Event.IN | Event.PRI | Event.RDHUP


def _selector_mask(events: Event) -> int:
    mask = 0
    if events & _READ_EVENTS:
        mask |= selectors.EVENT_READ
    if events & Event.OUT:
        mask |= selectors.EVENT_WRITE
    return mask


def _to_events(mask: int) -> Event:
    events = Event(0)
    if mask & selectors.EVENT_READ:
        events |= Event.IN
    if mask & selectors.EVENT_WRITE:
        events |= Event.OUT
    return events


class Poller:
    """Watches channels and reports the ones that became ready.

    Notification is level-triggered. A channel with no events stays
    registered but is never reported.
    """

    def __init__(self) -> None:
        self._selector = selectors.DefaultSelector()
        self._channels: Dict[int, Channel] = {}

    def _apply(self, channel: Channel) -> None:
        fd = channel.fd
        mask = _selector_mask(channel.events)
        try:
            key: Optional[selectors.SelectorKey] = self._selector.get_key(fd)
        except KeyError:
            key = None
        if not mask:
            if key is not None:
                self._selector.unregister(fd)
        elif key is None:
            self._selector.register(fd, mask, channel)
        else:
            self._selector.modify(fd, mask, channel)

    def update_channel(self, channel: Channel) -> None:
        """Add ``channel`` or change the events it watches."""
        fd = channel.fd
        if channel.in_poll:
            if fd not in self._channels:
                raise OSError(errno.ENOENT, f"channel for fd {fd} is not registered")
        elif fd in self._channels:
            raise OSError(errno.EEXIST, f"fd {fd} is already registered")
        self._channels[fd] = channel
        self._apply(channel)
        channel.in_poll = True

    def remove_channel(self, channel: Channel) -> None:
        """Stop watching ``channel`` if it is registered."""
        if not channel.in_poll:
            return
        fd = channel.fd
        if fd not in self._channels:
            raise OSError(errno.ENOENT, f"channel for fd {fd} is not registered")
        try:
            self._selector.unregister(fd)
        except KeyError:
            pass
        del self._channels[fd]
        channel.in_poll = False

    def poll(self, timeout: Optional[float] = None) -> List[Channel]:
        """Wait up to ``timeout`` seconds (None: forever) and return ready channels.

        Each returned channel has its ``revents`` set. An empty list means
        the wait timed out.
        """
        if not self._selector.get_map():
            if timeout:
                time.sleep(timeout)
            return []
        ready = self._selector.select(timeout)
        channels = []
        for key, mask in ready[:MAX_EVENTS]:
            channel: Channel = key.data
            channel.revents = _to_events(mask)
            channels.append(channel)
        return channels

    def close(self) -> None:
        self._selector.close()
        self._channels.clear()