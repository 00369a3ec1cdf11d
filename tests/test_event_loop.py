import threading

import pytest

from reactornet.event_loop import EventLoop


class _Conn:
    def __init__(self, fd, expired):
        self.fd = fd
        self.expired = expired
        self.seen = []

    def is_timeout(self, now, seconds):
        self.seen.append(seconds)
        return self.expired


@pytest.fixture
def loop():
    lp = EventLoop(False, time_tval=3600, time_out=3600, poll_timeout=0.05)
    yield lp
    lp.close()


def _run(lp):
    thread = threading.Thread(target=lp.run, daemon=True)
    thread.start()
    return thread


def test_not_in_loop_thread_before_run(loop):
    assert loop.is_in_loop_thread() is False


def test_queued_task_runs_in_loop_thread(loop):
    thread = _run(loop)
    done = threading.Event()
    result = {}

    def task():
        result["in_loop"] = loop.is_in_loop_thread()
        result["ident"] = threading.get_ident()
        done.set()

    loop.queue_in_loop(task)
    assert done.wait(5)
    loop.stop()
    thread.join(5)
    assert result["in_loop"] is True
    assert result["ident"] == thread.ident
    assert not thread.is_alive()


def test_handle_wakeup_runs_queued_tasks(loop):
    calls = []
    loop.queue_in_loop(lambda: calls.append(1))
    loop.queue_in_loop(lambda: calls.append(2))
    loop.handle_wakeup()
    assert calls == [1, 2]


def test_epoll_timeout_callback_when_idle(loop):
    seen = []
    fired = threading.Event()

    def on_timeout(lp):
        seen.append(lp)
        fired.set()

    loop.epoll_timeout_callback = on_timeout
    thread = _run(loop)
    assert fired.wait(5)
    loop.stop()
    thread.join(5)
    assert seen[0] is loop


def test_handle_time_drops_expired_connections(loop):
    removed = []
    loop.time_callback = removed.append
    old, fresh = _Conn(10, True), _Conn(11, False)
    loop.new_connection(old)
    loop.new_connection(fresh)
    loop.handle_time()
    assert removed == [10]
    assert list(loop.connections) == [11]
    assert fresh.seen == [loop.time_out]


def test_main_loop_keeps_connections():
    lp = EventLoop(True, time_tval=3600, time_out=3600)
    try:
        removed = []
        lp.time_callback = removed.append
        lp.new_connection(_Conn(5, True))
        lp.handle_time()
        assert removed == []
        assert list(lp.connections) == [5]
    finally:
        lp.close()


def test_alarm_fires_while_running():
    lp = EventLoop(False, time_tval=3600, time_out=0, poll_timeout=0.05)
    try:
        fired = threading.Event()
        removed = []

        def on_remove(fd):
            removed.append(fd)
            fired.set()

        lp.time_callback = on_remove
        lp.new_connection(_Conn(42, True))
        thread = _run(lp)
        assert fired.wait(5)
        lp.stop()
        thread.join(5)
        assert removed == [42]
        assert lp.connections == {}
    finally:
        lp.close()