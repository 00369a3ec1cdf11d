"""A multi-reactor TCP server: one accepting loop and several I/O loops."""

from __future__ import annotations

import threading
from typing import Any, Callable, Dict, List, Optional

from reactornet.acceptor import Acceptor
from reactornet.connection import Connection
from reactornet.event_loop import EventLoop
from reactornet.tcp_socket import Socket
from reactornet.thread_pool import ThreadPool

ConnectionCallback = Optional[Callable[[Connection], Any]]


class TcpServer:
    """Accepts clients on the main loop and spreads them over ``thread_num`` sub loops.

    A connection goes to sub loop ``fd % thread_num``. The user callbacks are
    plain attributes and may be left as None.
    """

    def __init__(
        self,
        ip: str,
        port: int,
        thread_num: int = 3,
        time_tval: int = 30,
        time_out: int = 80,
    ) -> None:
        if thread_num < 1:
            raise ValueError("thread_num must be at least 1")
        self.thread_num = thread_num

        self.new_connection_callback: ConnectionCallback = None
        self.close_connection_callback: ConnectionCallback = None
        self.error_connection_callback: ConnectionCallback = None
        self.message_callback: Optional[Callable[[Connection, bytes], Any]] = None
        self.send_complete_callback: ConnectionCallback = None
        self.timeout_callback: Optional[Callable[[EventLoop], Any]] = None

        self._lock = threading.Lock()
        self._connections: Dict[int, Connection] = {}
        self._started = False
        self._main_released = False

        self.main_loop = EventLoop(True, time_tval, time_out)
        self.main_loop.epoll_timeout_callback = self.epoll_timeout

        self.acceptor = Acceptor(self.main_loop, ip, port)
        self.acceptor.new_connection_callback = self.new_connection

        self.thread_pool = ThreadPool(thread_num, "IO")
        self.sub_loops: List[EventLoop] = []
        for _ in range(thread_num):
            loop = EventLoop(False, time_tval, time_out)
            loop.epoll_timeout_callback = self.epoll_timeout
            loop.time_callback = self.remove_connection
            self.sub_loops.append(loop)
            self.thread_pool.submit(loop.run)

    @property
    def connections(self) -> Dict[int, Connection]:
        """A snapshot of the open connections, keyed by fd."""
        with self._lock:
            return dict(self._connections)

    def start(self) -> None:
        """Run the main loop in the calling thread until :meth:`stop`."""
        self._started = True
        try:
            self.main_loop.run()
        finally:
            self._release_main()

    def _release_main(self) -> None:
        if self._main_released:
            return
        self._main_released = True
        self.acceptor.close()
        self.main_loop.close()

    def stop(self) -> None:
        """Stop every loop and the I/O threads."""
        self.main_loop.stop()
        for loop in self.sub_loops:
            loop.stop()
        self.thread_pool.stop()
        for loop in self.sub_loops:
            loop.close()
        with self._lock:
            remaining = list(self._connections.values())
        for conn in remaining:
            conn.socket.close()
        if not self._started:
            self._release_main()

    def new_connection(self, sock: Socket) -> None:
        """Wrap an accepted socket in a connection on its sub loop."""
        loop = self.sub_loops[sock.fileno() % self.thread_num]
        conn = Connection(loop, sock)
        conn.close_callback = self.close_connection
        conn.error_callback = self.error_connection
        conn.message_callback = self.handle_message

        with self._lock:
            self._connections[conn.fd] = conn
        loop.new_connection(conn)
        loop.wakeup()

        if self.new_connection_callback is not None:
            self.new_connection_callback(conn)

    def close_connection(self, conn: Connection) -> None:
        if self.close_connection_callback is not None:
            self.close_connection_callback(conn)
        with self._lock:
            self._connections.pop(conn.fd, None)

    def error_connection(self, conn: Connection) -> None:
        if self.error_connection_callback is not None:
            self.error_connection_callback(conn)
        with self._lock:
            self._connections.pop(conn.fd, None)

    def handle_message(self, conn: Connection, message: bytes) -> None:
        if self.message_callback is not None:
            self.message_callback(conn, message)

    def send_complete(self, conn: Connection) -> None:
        if self.send_complete_callback is not None:
            self.send_complete_callback(conn)

    def epoll_timeout(self, loop: EventLoop) -> None:
        if self.timeout_callback is not None:
            self.timeout_callback(loop)

    def remove_connection(self, fd: int) -> None:
        """Forget the connection on ``fd``."""
        with self._lock:
            self._connections.pop(fd, None)