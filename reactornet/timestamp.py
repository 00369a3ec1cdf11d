"""Microsecond-precision timestamps with local-time formatting."""

from __future__ import annotations

import time
from dataclasses import dataclass, field

_MICROS_PER_SECOND = 1_000_000


def _now_micros() -> int:
    return time.time_ns() // 1000


@dataclass(frozen=True, order=True)
class TimeStamp:
    """A point in time, counted in microseconds since the Unix epoch.

    Created without arguments, it holds the current time.
    """

    microseconds_since_epoch: int = field(default_factory=_now_micros)

    @classmethod
    def now(cls) -> "TimeStamp":
        """Return a timestamp for the current moment."""
        return cls()

    def to_int(self) -> int:
        """Return whole seconds since the epoch (truncated toward zero)."""
        micros = self.microseconds_since_epoch
        seconds, remainder = divmod(micros, _MICROS_PER_SECOND)
        if remainder and micros < 0:
            seconds += 1
        return seconds

    def _local(self) -> time.struct_time:
        return time.localtime(self.to_int())

    def to_string(self) -> str:
        """Return local time as ``yyyy-mm-dd hh:mi:ss``."""
        tm = self._local()
        return (
            f"{tm.tm_year:4d}-{tm.tm_mon:02d}-{tm.tm_mday:02d} "
            f"{tm.tm_hour:02d}:{tm.tm_min:02d}:{tm.tm_sec:02d}"
        )

    def to_string_hourly(self) -> str:
        """Return local time as ``yyyymmdd_hh``."""
        tm = self._local()
        return f"{tm.tm_year:4d}{tm.tm_mon:02d}{tm.tm_mday:02d}_{tm.tm_hour:02d}"

    def to_string_daily(self) -> str:
        """Return the local date as ``yyyymmdd``."""
        tm = self._local()
        return f"{tm.tm_year:4d}{tm.tm_mon:02d}{tm.tm_mday:02d}"