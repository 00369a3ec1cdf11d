"""A count-down latch for thread synchronisation."""

from __future__ import annotations

import threading


class Latch:
    """Threads call :meth:`notify` to count down; :meth:`wait` blocks until zero."""

    def __init__(self, count: int) -> None:
        if count < 0:
            raise ValueError("latch count must not be negative")
        self._count = count
        self._cond = threading.Condition()

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the count reaches zero.

        Returns True when it did, False if ``timeout`` seconds passed first.
        """
        with self._cond:
            return self._cond.wait_for(lambda: self._count == 0, timeout)

    def notify(self) -> None:
        """Decrement the count, waking all waiters when it reaches zero."""
        with self._cond:
            if self._count > 0:
                self._count -= 1
                if self._count == 0:
                    self._cond.notify_all()

    def count(self) -> int:
        """Return the current count."""
        with self._cond:
            return self._count