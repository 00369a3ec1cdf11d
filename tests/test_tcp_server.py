import socket
import threading
import time

import pytest

from reactornet.tcp_server import TcpServer


def wait_until(predicate, timeout=5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.02)
    return predicate()


@pytest.fixture
def server():
    srv = TcpServer("127.0.0.1", 0, thread_num=2)
    opened = []
    closed = []
    srv.new_connection_callback = opened.append
    srv.close_connection_callback = closed.append
    srv.message_callback = lambda conn, message: conn.send(message)
    thread = threading.Thread(target=srv.start, daemon=True)
    thread.start()
    yield srv, opened, closed
    srv.stop()
    thread.join(5)


def recv_exactly(sock, size):
    data = bytearray()
    while len(data) < size:
        chunk = sock.recv(size - len(data))
        if not chunk:
            break
        data += chunk
    return bytes(data)


def test_zero_threads_rejected():
    with pytest.raises(ValueError):
        TcpServer("127.0.0.1", 0, thread_num=0)


def test_echo_round_trip(server):
    srv, opened, _ = server
    with socket.create_connection(srv.acceptor.address.sockaddr, timeout=5) as client:
        client.sendall(b"hello")
        assert recv_exactly(client, 5) == b"hello"
        assert len(opened) == 1


def test_connection_is_on_loop_chosen_by_fd(server):
    srv, opened, _ = server
    with socket.create_connection(srv.acceptor.address.sockaddr, timeout=5):
        assert wait_until(lambda: len(srv.connections) == 1)
        conn = next(iter(srv.connections.values()))
        assert conn.loop is srv.sub_loops[conn.fd % srv.thread_num]
        assert conn.fd in conn.loop.connections
        assert opened == [conn]


def test_client_close_removes_connection(server):
    srv, opened, closed = server
    client = socket.create_connection(srv.acceptor.address.sockaddr, timeout=5)
    assert wait_until(lambda: len(srv.connections) == 1)
    client.close()
    assert wait_until(lambda: len(srv.connections) == 0)
    assert wait_until(lambda: len(closed) == 1)
    assert closed[0] is opened[0]
    assert closed[0].is_closed()


def test_remove_connection_forgets_fd(server):
    srv, _, _ = server
    with socket.create_connection(srv.acceptor.address.sockaddr, timeout=5):
        assert wait_until(lambda: len(srv.connections) == 1)
        fd = next(iter(srv.connections))
        srv.remove_connection(fd)
        assert fd not in srv.connections


def test_many_clients_each_get_echo(server):
    srv, opened, _ = server
    clients = [socket.create_connection(srv.acceptor.address.sockaddr, timeout=5) for _ in range(4)]
    try:
        for index, client in enumerate(clients):
            message = f"msg-{index}".encode()
            client.sendall(message)
            assert recv_exactly(client, len(message)) == message
        assert wait_until(lambda: len(opened) == 4)
    finally:
        for client in clients:
            client.close()


def test_stop_without_start_releases_listener():
    srv = TcpServer("127.0.0.1", 0, thread_num=1)
    srv.stop()
    assert srv.acceptor.listen_socket.sock.fileno() == -1


def test_epoll_timeout_forwards_loop():
    srv = TcpServer("127.0.0.1", 0, thread_num=1)
    try:
        seen = []
        srv.timeout_callback = seen.append
        srv.epoll_timeout(srv.main_loop)
        assert seen == [srv.main_loop]
    finally:
        srv.stop()