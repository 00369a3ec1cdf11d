import select
import socket

import pytest

from reactornet.tcp_socket import InetAddress, Socket, create_nonblocking


@pytest.fixture
def listener():
    sock = Socket(create_nonblocking())
    sock.set_reuse_addr(True)
    sock.bind(InetAddress("127.0.0.1", 0))
    sock.listen()
    yield sock
    sock.close()


def test_create_nonblocking_is_nonblocking_tcp():
    sock = create_nonblocking()
    try:
        assert sock.getblocking() is False
        assert sock.type == socket.SOCK_STREAM
    finally:
        sock.close()


def test_inet_address_round_trip():
    addr = InetAddress("127.0.0.1", 8080)
    assert InetAddress.from_sockaddr(addr.sockaddr) == addr


def test_inet_address_rejects_bad_ip():
    with pytest.raises(ValueError):
        InetAddress("not-an-ip", 80)


def test_inet_address_rejects_bad_port():
    with pytest.raises(ValueError):
        InetAddress("127.0.0.1", 70000)


def test_bind_records_address(listener):
    assert listener.ip == "127.0.0.1"
    assert listener.port == 0
    assert listener.sock.getsockname()[0] == "127.0.0.1"


def test_options_are_applied():
    with Socket(create_nonblocking()) as sock:
        sock.set_tcp_no_delay(True)
        sock.set_keep_alive(True)
        assert sock.sock.getsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY) != 0
        assert sock.sock.getsockopt(socket.SOL_SOCKET, socket.SO_KEEPALIVE) != 0
        sock.set_keep_alive(False)
        assert sock.sock.getsockopt(socket.SOL_SOCKET, socket.SO_KEEPALIVE) == 0


def test_accept_returns_peer(listener):
    port = listener.sock.getsockname()[1]
    client = socket.create_connection(("127.0.0.1", port), timeout=5)
    try:
        ready, _, _ = select.select([listener.sock], [], [], 5)
        assert ready
        accepted, peer = listener.accept()
        try:
            assert peer.ip == "127.0.0.1"
            assert peer.port == client.getsockname()[1]
            assert accepted.sock.getblocking() is False
        finally:
            accepted.close()
    finally:
        client.close()


def test_accept_without_pending_raises(listener):
    with pytest.raises(BlockingIOError):
        listener.accept()


def test_bind_conflict_closes_socket(listener):
    port = listener.sock.getsockname()[1]
    other = Socket(create_nonblocking())
    with pytest.raises(OSError):
        other.bind(InetAddress("127.0.0.1", port))
    assert other.sock.fileno() == -1