"""An event loop that polls channels, runs queued tasks and expires idle connections."""

from __future__ import annotations

import socket
import threading
import time
from collections import deque
from typing import Any, Callable, Deque, Dict, Optional

from reactornet.channel import Channel
from reactornet.poller import Poller


class EventLoop:
    """Runs in one thread, dispatching ready channels.

    Other threads hand work to it with :meth:`queue_in_loop`. An alarm first
    goes off after ``time_out`` seconds and then every ``time_tval`` seconds;
    in a sub loop it drops connections idle longer than ``time_out`` and
    reports each one's fd to ``time_callback``. Connections need an ``fd``
    attribute and an ``is_timeout(now, seconds)`` method.
    """

    def __init__(
        self,
        main_loop: bool,
        time_tval: int = 30,
        time_out: int = 80,
        poll_timeout: float = 10.0,
    ) -> None:
        self.main_loop = main_loop
        self.time_tval = time_tval
        self.time_out = time_out
        self.poll_timeout = poll_timeout
        self.epoll_timeout_callback: Optional[Callable[["EventLoop"], Any]] = None
        self.time_callback: Optional[Callable[[int], Any]] = None

        self._poller = Poller()
        self._thread_id: Optional[int] = None
        self._tasks: Deque[Callable[[], Any]] = deque()
        self._task_lock = threading.Lock()
        self._calling_functors = False
        self._stop = False

        self._wake_r, self._wake_w = socket.socketpair()
        self._wake_r.setblocking(False)
        self._wake_w.setblocking(False)
        self._wake_channel = Channel(self, self._wake_r)
        self._wake_channel.read_callback = self.handle_wakeup
        self._wake_channel.enable_reading()

        self._next_alarm = time.monotonic() + time_out
        self._conn_lock = threading.Lock()
        self._connections: Dict[int, Any] = {}
        self._closed = False

    @property
    def connections(self) -> Dict[int, Any]:
        """A snapshot of the connections kept by this loop, keyed by fd."""
        with self._conn_lock:
            return dict(self._connections)

    def run(self) -> None:
        """Poll and dispatch events until :meth:`stop` is called."""
        self._thread_id = threading.get_ident()
        while not self._stop:
            wait = max(0.0, min(self.poll_timeout, self._next_alarm - time.monotonic()))
            channels = self._poller.poll(wait)
            alarm = time.monotonic() >= self._next_alarm
            for channel in channels:
                channel.handle_event()
            if alarm:
                self.handle_time()
            if not channels and not alarm and self.epoll_timeout_callback is not None:
                self.epoll_timeout_callback(self)

    def stop(self) -> None:
        """Ask the loop to stop and wake it so it notices at once."""
        self._stop = True
        self.wakeup()

    def update_channel(self, channel: Channel) -> None:
        self._poller.update_channel(channel)

    def remove_channel(self, channel: Channel) -> None:
        self._poller.remove_channel(channel)

    def is_in_loop_thread(self) -> bool:
        return self._thread_id == threading.get_ident()

    def queue_in_loop(self, fn: Callable[[], Any]) -> None:
        """Queue ``fn`` to run in the loop thread."""
        with self._task_lock:
            self._tasks.append(fn)
        if not self.is_in_loop_thread() or self._calling_functors:
            self.wakeup()

    def wakeup(self) -> None:
        """Make the loop's poll return."""
        try:
            self._wake_w.send(b"\x01")
        except OSError:
            pass

    def handle_wakeup(self) -> None:
        """Drain the wake-up signal and run every queued task."""
        try:
            while self._wake_r.recv(4096):
                pass
        except OSError:
            pass
        self._calling_functors = True
        try:
            while True:
                with self._task_lock:
                    if not self._tasks:
                        break
                    fn = self._tasks.popleft()
                fn()
        finally:
            self._calling_functors = False

    def handle_time(self) -> None:
        """Re-arm the alarm and, in a sub loop, drop idle connections."""
        self._next_alarm = time.monotonic() + self.time_tval
        if self.main_loop:
            return
        now = int(time.time())
        with self._conn_lock:
            expired = [
                fd for fd, conn in self._connections.items() if conn.is_timeout(now, self.time_out)
            ]
            for fd in expired:
                del self._connections[fd]
        if self.time_callback is not None:
            for fd in expired:
                self.time_callback(fd)

    def new_connection(self, conn: Any) -> None:
        """Keep ``conn`` so it can be expired when idle."""
        with self._conn_lock:
            self._connections[conn.fd] = conn

    def close(self) -> None:
        """Release the poller and the wake-up sockets."""
        if self._closed:
            return
        self._closed = True
        self._wake_channel.remove()
        self._poller.close()
        self._wake_r.close()
        self._wake_w.close()