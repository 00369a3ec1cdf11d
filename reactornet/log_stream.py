"""Stream-style formatting of values into a fixed-size log buffer."""

from __future__ import annotations

import sys
from typing import Any

from reactornet.log_buffer import LogBuffer

LOG_BUFFER_SIZE = 4096
MAX_NUMERIC_SIZE = 48
_FMT_LIMIT = 64


def fmt(spec: str, value: int | float) -> bytes:
    """Format a number with a printf-style ``spec``, capped at 63 bytes."""
    if not isinstance(value, (int, float)):
        raise TypeError("fmt() requires a numeric value")
    data = (spec % value).encode()
    if len(data) >= _FMT_LIMIT:
        print("Warning: Fmt formatting overflow, using truncated value!", file=sys.stderr)
        data = data[: _FMT_LIMIT - 1]
    return data


class LogStream:
    """Collects a log record; values are appended with :meth:`write` or ``<<``."""

    def __init__(self, capacity: int = LOG_BUFFER_SIZE) -> None:
        self._buffer = LogBuffer(capacity)

    @property
    def buffer(self) -> LogBuffer:
        return self._buffer

    def append(self, data: bytes | str) -> None:
        """Append raw bytes (or UTF-8 encoded text)."""
        if isinstance(data, str):
            data = data.encode()
        self._buffer.append(bytes(data))

    def _format_integer(self, value: int) -> None:
        if self._buffer.available() >= MAX_NUMERIC_SIZE:
            self._buffer.append(str(value).encode())

    def write(self, value: Any) -> "LogStream":
        """Append the textual form of ``value`` and return the stream."""
        if isinstance(value, bool):
            self._buffer.append(b"1" if value else b"0")
        elif isinstance(value, int):
            self._format_integer(value)
        elif isinstance(value, float):
            self._buffer.append(("%g" % value).encode())
        elif value is None:
            self._buffer.append(b"(null)")
        elif isinstance(value, (bytes, bytearray, memoryview)):
            self._buffer.append(bytes(value))
        elif isinstance(value, str):
            self._buffer.append(value.encode())
        else:
            self._buffer.append(str(value).encode())
        return self

    def __lshift__(self, value: Any) -> "LogStream":
        return self.write(value)

    def getvalue(self) -> bytes:
        """Return everything written so far."""
        return self._buffer.getvalue()

    def reset_buffer(self) -> None:
        """Discard everything written so far."""
        self._buffer.clear()