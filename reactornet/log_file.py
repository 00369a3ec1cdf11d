"""Append-only log file that rolls over to a new file every hour."""

from __future__ import annotations

import os
import sys
import time
from types import TracebackType
from typing import BinaryIO, Optional, Union

from reactornet.timestamp import TimeStamp

FLUSH_INTERVAL = 3


class LogFile:
    """Writes log data to a file, flushing at most every few seconds.

    If ``filepath`` cannot be opened as a file, it is used as a prefix for a
    dated directory holding hourly files, such as
    ``<prefix>20250611/LogFile_20250611_15.log``. Not thread safe.
    """

    def __init__(self, filepath: Optional[Union[str, os.PathLike]] = None) -> None:
        self._prefix = os.fspath(filepath) if filepath is not None else None
        self._fp: Optional[BinaryIO] = None
        self._written_bytes = 0
        self.last_write = 0
        self._last_flush = 0
        self._current_hour = time.localtime().tm_hour
        self.current_path = ""
        self._last_error = ""

        if self._prefix is not None:
            self.current_path = self._prefix
            self._fp = self._open(self._prefix)

        if self._fp is None:
            self.current_path = self._generate_path()
            self._fp = self._open(self.current_path)
            if self._fp is None:
                shown = self._prefix if self._prefix is not None else self.current_path
                print(
                    f"Failed to open log file: {shown} | Reason: {self._last_error}",
                    file=sys.stderr,
                )
            else:
                print(f"Fallback: log file created at {self.current_path}", file=sys.stderr)

    def _open(self, path: str) -> Optional[BinaryIO]:
        try:
            return open(path, "ab")
        except OSError as exc:
            self._last_error = exc.strerror or str(exc)
            return None

    def _generate_path(self) -> str:
        now = TimeStamp.now()
        directory = (self._prefix or "") + now.to_string_daily()
        if not os.path.exists(directory):
            try:
                os.mkdir(directory, 0o755)
            except OSError:
                pass
        return f"{directory}/LogFile_{now.to_string_hourly()}.log"

    def _is_new_hour(self) -> bool:
        return time.localtime().tm_hour != self._current_hour

    def _roll_file(self) -> None:
        if self._fp is not None:
            self.flush()
            self._fp.close()
            self._fp = None

        self.current_path = self._generate_path()
        self._fp = self._open(self.current_path)
        if self._fp is None:
            print(
                "RollFile failed, fallback failed too: "
                f"{self.current_path} | Reason: {self._last_error}",
                file=sys.stderr,
            )
        self._current_hour = time.localtime().tm_hour
        self._written_bytes = 0

    @property
    def is_open(self) -> bool:
        return self._fp is not None

    def write(self, data: Union[bytes, str]) -> None:
        """Append ``data``, switching files when the hour has changed."""
        if isinstance(data, str):
            data = data.encode()
        if self._fp is None or not data:
            return
        if self._is_new_hour():
            self._roll_file()
            if self._fp is None:
                return

        written = 0
        try:
            self._fp.write(data)
            written = len(data)
        except OSError:
            print("write failed in LogFile.write", file=sys.stderr)

        now = int(time.time())
        if written:
            self.last_write = now
            self._written_bytes += written
        if now - self._last_flush >= FLUSH_INTERVAL:
            self.flush()
            self._last_flush = now

    def flush(self) -> None:
        """Push buffered data to the operating system."""
        if self._fp is not None:
            self._fp.flush()

    def written_bytes(self) -> int:
        """Return the bytes written to the current file."""
        return self._written_bytes

    def close(self) -> None:
        """Flush and close the file; later writes are ignored."""
        if self._fp is not None:
            self.flush()
            self._fp.close()
            self._fp = None

    def __enter__(self) -> "LogFile":
        return self

    def __exit__(
        self,
        exc_type: Optional[type],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        self.close()