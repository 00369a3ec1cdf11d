"""One TCP connection: reads into an input buffer and writes from an output buffer."""

from __future__ import annotations

import sys
from typing import Any, Callable, Optional, Union

from reactornet.buffer import Buffer
from reactornet.channel import Channel
from reactornet.tcp_socket import Socket
from reactornet.timestamp import TimeStamp

MAX_CHUNK_SIZE = 512 * 1024
READ_CHUNK_SIZE = 1024

ConnectionCallback = Optional[Callable[["Connection"], Any]]
MessageCallback = Optional[Callable[["Connection", bytes], Any]]


class Connection:
    """A client connection served by one event loop.

    The loop must offer ``update_channel``, ``remove_channel``,
    ``is_in_loop_thread`` and ``queue_in_loop``. Received data is handed to
    ``message_callback`` as bytes once the socket has been drained.
    """

    def __init__(self, loop: Any, client_sock: Socket) -> None:
        self.loop = loop
        self.socket = client_sock
        self.fd: int = client_sock.fileno()
        self._disconnected = False

        self.close_callback: ConnectionCallback = None
        self.error_callback: ConnectionCallback = None
        self.message_callback: MessageCallback = None
        self.send_complete_callback: ConnectionCallback = None

        self.last_time = TimeStamp.now()
        self.context: Any = None

        self.input_buffer = Buffer()
        self.output_buffer = Buffer()

        self.channel = Channel(loop, self.fd)
        self.channel.read_callback = self.handle_message
        self.channel.close_callback = self.handle_close
        self.channel.error_callback = self.handle_error
        self.channel.write_callback = self.handle_write
        self.channel.enable_et()
        self.channel.enable_reading()

    @property
    def ip(self) -> str:
        return self.socket.ip

    @property
    def port(self) -> int:
        return self.socket.port

    def handle_message(self) -> None:
        """Read everything available and pass it on; close on end of stream."""
        if self._disconnected:
            return
        sock = self.socket.sock
        while True:
            try:
                data = sock.recv(READ_CHUNK_SIZE)
            except InterruptedError:
                continue
            except BlockingIOError:
                message = self.input_buffer.retrieve_all_as_bytes()
                if message:
                    self.last_time = TimeStamp.now()
                    if self.message_callback is not None:
                        self.message_callback(self, message)
                break
            except OSError as exc:
                print(f"read error: {exc}", file=sys.stderr)
                self.handle_close()
                break
            if not data:
                self.handle_close()
                break
            self.input_buffer.append(data)

    def http_close(self) -> None:
        """Close the connection from the server side."""
        self.handle_close()

    def handle_close(self) -> None:
        """Leave the loop, report the close once and release the socket."""
        if self._disconnected:
            return
        self._disconnected = True
        self.channel.remove()
        if self.close_callback is not None:
            self.close_callback(self)
        self.socket.close()

    def handle_error(self) -> None:
        """Mark the connection broken and report the error."""
        was_disconnected = self._disconnected
        self._disconnected = True
        if not was_disconnected:
            self.channel.remove()
        if self.error_callback is not None:
            self.error_callback(self)
        self.socket.close()

    def handle_write(self) -> None:
        """Send queued output in chunks until done or the socket is full."""
        if self._disconnected:
            return
        sock = self.socket.sock
        while self.output_buffer.readable_bytes() > 0:
            chunk = self.output_buffer.peek()[:MAX_CHUNK_SIZE]
            try:
                sent = sock.send(chunk)
            except (BlockingIOError, InterruptedError):
                break
            except OSError as exc:
                print(f"send error, fd: {self.fd}, error: {exc}", file=sys.stderr)
                self.handle_close()
                return
            if sent == 0:
                break
            self.output_buffer.retrieve(sent)

        if self.output_buffer.readable_bytes() == 0:
            self.channel.disable_writing()
            if self.send_complete_callback is not None:
                self.send_complete_callback(self)

    def send(self, data: Union[bytes, bytearray, memoryview, str]) -> None:
        """Queue ``data`` for sending; safe to call from any thread."""
        if self._disconnected:
            return
        payload = data.encode() if isinstance(data, str) else bytes(data)
        if self.loop.is_in_loop_thread():
            self._send_in_loop(payload)
        else:
            self.loop.queue_in_loop(lambda: self._send_in_loop(payload))

    def _send_in_loop(self, data: bytes) -> None:
        if self._disconnected:
            return
        self.output_buffer.append(data)
        self.channel.enable_writing()

    def is_closed(self) -> bool:
        return self._disconnected

    def is_timeout(self, now: int, seconds: int) -> bool:
        """True if nothing arrived for more than ``seconds`` before ``now``."""
        return now - self.last_time.to_int() > seconds