"""Listening socket that accepts new clients on an event loop."""

from __future__ import annotations

from typing import Any, Callable, Optional

from reactornet.channel import Channel
from reactornet.tcp_socket import InetAddress, Socket, create_nonblocking


class Acceptor:
    """Listens on ``ip:port`` and hands each accepted socket to a callback.

    The listening socket has SO_REUSEADDR, SO_REUSEPORT, TCP_NODELAY and
    SO_KEEPALIVE set and is watched level-triggered for reading.
    """

    def __init__(self, loop: Any, ip: str, port: int) -> None:
        address = InetAddress(ip, port)
        self.loop = loop
        self.new_connection_callback: Optional[Callable[[Socket], Any]] = None

        self.listen_socket = Socket(create_nonblocking())
        self.listen_socket.set_reuse_addr(True)
        self.listen_socket.set_reuse_port(True)
        self.listen_socket.set_tcp_no_delay(True)
        self.listen_socket.set_keep_alive(True)
        self.listen_socket.bind(address)
        self.listen_socket.listen()

        self.channel = Channel(loop, self.listen_socket)
        self.channel.read_callback = self.handle_accept
        self.channel.enable_reading()

    @property
    def address(self) -> InetAddress:
        """The address actually bound, with the real port when 0 was asked for."""
        return InetAddress.from_sockaddr(self.listen_socket.sock.getsockname())

    def handle_accept(self) -> None:
        """Accept one pending client and pass its socket to the callback."""
        try:
            client, peer = self.listen_socket.accept()
        except (BlockingIOError, InterruptedError):
            return
        client.set_ip_and_port(peer.ip, peer.port)
        if self.new_connection_callback is None:
            client.close()
            return
        self.new_connection_callback(client)

    def close(self) -> None:
        """Leave the loop and close the listening socket."""
        self.channel.remove()
        self.listen_socket.close()