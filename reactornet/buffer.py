"""Growable byte buffer with separate read and write positions."""

from __future__ import annotations

from typing import Union

CHEAP_PREPEND = 8
INITIAL_SIZE = 4096

BytesLike = Union[bytes, bytearray, memoryview, str]


def _as_bytes(data: BytesLike) -> bytes:
    if isinstance(data, str):
        return data.encode()
    return bytes(data)


class Buffer:
    """A byte buffer laid out as prependable | readable | writable regions.

    ``CHEAP_PREPEND`` bytes are kept in front of the data so headers can be
    prepended without copying.
    """

    def __init__(self, initial_size: int = INITIAL_SIZE) -> None:
        self._buf = bytearray(CHEAP_PREPEND + initial_size)
        self._reader = CHEAP_PREPEND
        self._writer = CHEAP_PREPEND

    @property
    def capacity(self) -> int:
        """Total size of the underlying storage."""
        return len(self._buf)

    def readable_bytes(self) -> int:
        return self._writer - self._reader

    def writable_bytes(self) -> int:
        return len(self._buf) - self._writer

    def prependable_bytes(self) -> int:
        return self._reader

    def peek(self) -> bytes:
        """Return the readable bytes without consuming them."""
        return bytes(self._buf[self._reader:self._writer])

    def retrieve(self, length: int) -> None:
        """Consume ``length`` readable bytes."""
        if length < 0 or length > self.readable_bytes():
            raise ValueError("cannot retrieve more bytes than are readable")
        if length < self.readable_bytes():
            self._reader += length
        else:
            self.retrieve_all()

    def retrieve_all(self) -> None:
        """Consume everything and reset both positions."""
        self._reader = CHEAP_PREPEND
        self._writer = CHEAP_PREPEND

    def retrieve_as_bytes(self, length: int) -> bytes:
        """Consume and return ``length`` readable bytes."""
        if length < 0 or length > self.readable_bytes():
            raise ValueError("cannot retrieve more bytes than are readable")
        result = bytes(self._buf[self._reader:self._reader + length])
        self.retrieve(length)
        return result

    def retrieve_all_as_bytes(self) -> bytes:
        return self.retrieve_as_bytes(self.readable_bytes())

    def append(self, data: BytesLike) -> None:
        """Append ``data`` after the readable region, growing if needed."""
        raw = _as_bytes(data)
        self.ensure_writable_bytes(len(raw))
        self._buf[self._writer:self._writer + len(raw)] = raw
        self._writer += len(raw)

    def ensure_writable_bytes(self, length: int) -> None:
        """Make room for at least ``length`` more bytes."""
        if self.writable_bytes() < length:
            self._make_space(length)

    def _make_space(self, length: int) -> None:
        if self.writable_bytes() + self.prependable_bytes() < length + CHEAP_PREPEND:
            self._buf.extend(bytes(self._writer + length - len(self._buf)))
        else:
            readable = self.readable_bytes()
            self._buf[CHEAP_PREPEND:CHEAP_PREPEND + readable] = self._buf[self._reader:self._writer]
            self._reader = CHEAP_PREPEND
            self._writer = CHEAP_PREPEND + readable

    def prepend(self, data: BytesLike) -> None:
        """Insert ``data`` in front of the readable region."""
        raw = _as_bytes(data)
        if len(raw) > self.prependable_bytes():
            raise ValueError("not enough prependable space")
        self._reader -= len(raw)
        self._buf[self._reader:self._reader + len(raw)] = raw

    def shrink(self, reserve: int) -> None:
        """Reallocate to hold only the readable data plus ``reserve`` bytes."""
        readable = self.peek()
        buf = bytearray(CHEAP_PREPEND + len(readable) + reserve)
        buf[CHEAP_PREPEND:CHEAP_PREPEND + len(readable)] = readable
        self._buf = buf
        self._reader = CHEAP_PREPEND
        self._writer = CHEAP_PREPEND + len(readable)