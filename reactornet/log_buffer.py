"""Fixed-capacity byte buffer for log records."""

from __future__ import annotations

import sys


class LogBuffer:
    """A buffer that never grows past ``capacity`` bytes.

    Data that does not fit is dropped with a warning on stderr.
    """

    def __init__(self, capacity: int) -> None:
        if capacity < 0:
            raise ValueError("capacity must not be negative")
        self.capacity = capacity
        self._data = bytearray()

    def append(self, data: bytes) -> bool:
        """Append ``data`` if it fits; return whether it was stored."""
        if self.available() >= len(data):
            self._data += data
            return True
        print("Buffer overflow, log data was dropped!", file=sys.stderr)
        return False

    def available(self) -> int:
        """Return the number of bytes that can still be appended."""
        return self.capacity - len(self._data)

    def getvalue(self) -> bytes:
        """Return the stored bytes."""
        return bytes(self._data)

    def reset(self) -> None:
        """Start writing from the beginning again, keeping the storage."""
        self._data.clear()

    def clear(self) -> None:
        """Discard all stored bytes and release the storage."""
        self._data = bytearray()

    def __len__(self) -> int:
        return len(self._data)