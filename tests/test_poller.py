import socket

import pytest

from reactornet.channel import Channel, Event
from reactornet.poller import Poller


@pytest.fixture
def poller():
    p = Poller()
    yield p
    p.close()


@pytest.fixture
def pair():
    a, b = socket.socketpair()
    a.setblocking(False)
    b.setblocking(False)
    yield a, b
    a.close()
    b.close()


def test_readable_channel_is_reported(poller, pair):
    a, b = pair
    ch = Channel(poller, b)
    ch.enable_reading()
    assert ch.in_poll is True
    a.send(b"x")
    ready = poller.poll(2.0)
    assert ready == [ch]
    assert ch.revents & Event.IN


def test_idle_poll_times_out(poller, pair):
    _, b = pair
    ch = Channel(poller, b)
    ch.enable_reading()
    assert poller.poll(0.05) == []


def test_writable_channel_is_reported(poller, pair):
    a, _ = pair
    ch = Channel(poller, a)
    ch.enable_writing()
    ready = poller.poll(2.0)
    assert ready == [ch]
    assert ch.revents & Event.OUT


def test_disable_all_keeps_registration_silent(poller, pair):
    a, b = pair
    ch = Channel(poller, b)
    ch.enable_reading()
    ch.disable_all()
    a.send(b"x")
    assert ch.in_poll is True
    assert poller.poll(0.05) == []
    ch.enable_reading()
    assert poller.poll(2.0) == [ch]


def test_remove_channel(poller, pair):
    a, b = pair
    ch = Channel(poller, b)
    ch.enable_reading()
    ch.remove()
    a.send(b"x")
    assert ch.in_poll is False
    assert poller.poll(0.05) == []


def test_update_of_unknown_channel_fails(poller, pair):
    _, b = pair
    ch = Channel(poller, b)
    ch.in_poll = True
    with pytest.raises(OSError):
        ch.enable_reading()


def test_duplicate_registration_fails(poller, pair):
    _, b = pair
    Channel(poller, b).enable_reading()
    with pytest.raises(OSError):
        Channel(poller, b).enable_reading()