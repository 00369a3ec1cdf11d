"""Background thread that batches log data and writes it to a log file."""

from __future__ import annotations

import os
import sys
import threading
from typing import List, Optional, Union

from reactornet.latch import Latch
from reactornet.log_buffer import LogBuffer
from reactornet.log_file import LogFile

FIXED_LARGE_BUFFER_SIZE = 8 * 1024 * 1024
BUFFER_WRITE_TIMEOUT = 3.0
FILE_MAXIMUM_SIZE = 1024 * 1024 * 1024


class AsyncLog:
    """Front ends append to in-memory buffers; a worker thread writes them out.

    Full buffers are handed to the worker at once; partly filled ones are
    written at least every ``BUFFER_WRITE_TIMEOUT`` seconds.
    """

    def __init__(
        self,
        filepath: Optional[Union[str, os.PathLike]] = None,
        buffer_size: int = FIXED_LARGE_BUFFER_SIZE,
    ) -> None:
        self._filepath = os.fspath(filepath) if filepath is not None else None
        self._buffer_size = buffer_size
        self._running = True
        self._cond = threading.Condition()
        self._latch = Latch(1)
        self._thread: Optional[threading.Thread] = None
        self._current: LogBuffer = self._new_buffer()
        self._next: Optional[LogBuffer] = self._new_buffer()
        self._buffers: List[LogBuffer] = []

    def _new_buffer(self) -> LogBuffer:
        return LogBuffer(self._buffer_size)

    def start(self) -> None:
        """Start the writer thread and wait until it is running."""
        self._running = True
        self._thread = threading.Thread(target=self._thread_func, name="AsyncLog", daemon=True)
        self._thread.start()
        self._latch.wait()

    def stop(self) -> None:
        """Stop the writer thread after it has written everything pending."""
        with self._cond:
            self._running = False
            self._cond.notify()
        if self._thread is not None and self._thread.is_alive():
            self._thread.join()

    def append(self, data: Union[bytes, str]) -> None:
        """Queue ``data`` for writing; safe to call from any thread."""
        if isinstance(data, str):
            data = data.encode()
        with self._cond:
            if self._current.available() >= len(data):
                self._current.append(data)
                return
            self._buffers.append(self._current)
            if self._next is not None:
                self._current, self._next = self._next, None
            else:
                self._current = self._new_buffer()
            self._current.append(data)
            self._cond.notify()

    def flush(self) -> None:
        """Flush standard output."""
        sys.stdout.flush()

    def _thread_func(self) -> None:
        self._latch.notify()

        new_current: Optional[LogBuffer] = self._new_buffer()
        new_next: Optional[LogBuffer] = self._new_buffer()
        logfile = LogFile(self._filepath)
        try:
            while self._running:
                with self._cond:
                    if not self._buffers:
                        self._cond.wait_for(
                            lambda: bool(self._buffers) or not self._running,
                            BUFFER_WRITE_TIMEOUT,
                        )
                    self._buffers.append(self._current)
                    active, self._buffers = self._buffers, []
                    self._current = new_current if new_current is not None else self._new_buffer()
                    new_current = None
                    if self._next is None:
                        self._next = new_next
                        new_next = None

                for buffer in active:
                    logfile.write(buffer.getvalue())

                if logfile.written_bytes() >= FILE_MAXIMUM_SIZE:
                    logfile.close()
                    logfile = LogFile(None)

                del active[2:]
                if new_current is None and active:
                    new_current = active.pop()
                    new_current.clear()
                if new_next is None and active:
                    new_next = active.pop()
                    new_next.clear()

            with self._cond:
                remaining = list(self._buffers)
                if len(self._current) > 0:
                    remaining.append(self._current)
                self._buffers = []
                self._current = self._new_buffer()

            for buffer in remaining:
                logfile.write(buffer.getvalue())
            logfile.flush()
        finally:
            logfile.close()