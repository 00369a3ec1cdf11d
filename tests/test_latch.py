import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from reactornet.latch import Latch


def test_negative_count_rejected():
    with pytest.raises(ValueError):
        Latch(-1)


def test_zero_count_wait_returns_immediately():
    assert Latch(0).wait(timeout=0.01) is True


def test_wait_times_out():
    assert Latch(1).wait(timeout=0.01) is False


def test_notify_decrements_and_stops_at_zero():
    latch = Latch(2)
    latch.notify()
    assert latch.count() == 1
    latch.notify()
    assert latch.count() == 0
    latch.notify()
    assert latch.count() == 0


def test_notify_from_other_thread_releases_waiter():
    latch = Latch(1)
    thread = threading.Timer(0.05, latch.notify)
    thread.start()
    assert latch.wait(timeout=5) is True
    thread.join()
    assert latch.count() == 0


def test_multiple_waiters_released():
    latch = Latch(1)
    with ThreadPoolExecutor(max_workers=3) as executor:
        futures = [executor.submit(latch.wait, timeout=5) for _ in range(3)]
        latch.notify()
        outcomes = [future.result() for future in futures]
    assert outcomes == [True, True, True]