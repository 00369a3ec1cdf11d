"""IPv4 addresses and thin wrappers around TCP sockets."""

from __future__ import annotations

import ipaddress
import socket
from dataclasses import dataclass
from types import TracebackType
from typing import Optional, Tuple


@dataclass(frozen=True)
class InetAddress:
    """An IPv4 address and port."""

    ip: str = "0.0.0.0"
    port: int = 0

    def __post_init__(self) -> None:
        ipaddress.IPv4Address(self.ip)
        if not 0 <= self.port <= 0xFFFF:
            raise ValueError(f"port out of range: {self.port}")

    @property
    def sockaddr(self) -> Tuple[str, int]:
        """The address in the form the socket module expects."""
        return (self.ip, self.port)

    @classmethod
    def from_sockaddr(cls, addr: Tuple[str, int]) -> "InetAddress":
        return cls(addr[0], addr[1])


def create_nonblocking() -> socket.socket:
    """Create a non-blocking IPv4 TCP socket."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM, socket.IPPROTO_TCP)
    sock.setblocking(False)
    return sock


class Socket:
    """Owns a socket and remembers the ip and port it is bound or connected to.

    For a listening socket ``ip`` and ``port`` are the local address; for an
    accepted one, the peer's.
    """

    def __init__(self, sock: socket.socket) -> None:
        self._sock = sock
        self.ip = ""
        self.port = 0

    @property
    def sock(self) -> socket.socket:
        return self._sock

    def fileno(self) -> int:
        return self._sock.fileno()

    def set_ip_and_port(self, ip: str, port: int) -> None:
        self.ip = ip
        self.port = port

    def _set_option(self, level: int, name: int, flag: bool) -> None:
        self._sock.setsockopt(level, name, 1 if flag else 0)

    def set_reuse_addr(self, flag: bool) -> None:
        self._set_option(socket.SOL_SOCKET, socket.SO_REUSEADDR, flag)

    def set_reuse_port(self, flag: bool) -> None:
        """Set SO_REUSEPORT where the platform has it."""
        option = getattr(socket, "SO_REUSEPORT", None)
        if option is not None:
            self._set_option(socket.SOL_SOCKET, option, flag)

    def set_tcp_no_delay(self, flag: bool) -> None:
        self._set_option(socket.IPPROTO_TCP, socket.TCP_NODELAY, flag)

    def set_keep_alive(self, flag: bool) -> None:
        self._set_option(socket.SOL_SOCKET, socket.SO_KEEPALIVE, flag)

    def bind(self, address: InetAddress) -> None:
        """Bind to ``address``; on failure the socket is closed and the error raised."""
        try:
            self._sock.bind(address.sockaddr)
        except OSError:
            self.close()
            raise
        self.set_ip_and_port(address.ip, address.port)

    def listen(self, backlog: int = 128) -> None:
        """Start listening; on failure the socket is closed and the error raised."""
        try:
            self._sock.listen(backlog)
        except OSError:
            self.close()
            raise

    def accept(self) -> Tuple["Socket", InetAddress]:
        """Accept one pending connection as a non-blocking socket.

        Raises BlockingIOError when no connection is waiting.
        """
        conn, peer = self._sock.accept()
        conn.setblocking(False)
        return Socket(conn), InetAddress.from_sockaddr(peer)

    def close(self) -> None:
        self._sock.close()

    def __enter__(self) -> "Socket":
        return self

    def __exit__(
        self,
        exc_type: Optional[type],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        self.close()