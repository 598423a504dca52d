"""
Filesystem timestamps at nanosecond resolution.

Filesystems disagree about mtime precision (whole seconds, milliseconds,
nanoseconds), so besides the full ordering a Timestamp can be compared at
millisecond precision via same_millisecond().
"""

import os
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Union

NANOS_PER_SECOND = 1_000_000_000
NANOS_PER_MILLI = 1_000_000

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True, order=True)
class Timestamp:
    """Seconds plus nanoseconds since the Unix epoch."""
    seconds: int
    nanoseconds: int = 0

    def __post_init__(self):
        if self.seconds < 0:
            raise ValueError(f"seconds must be non-negative, got {self.seconds}")
        if not 0 <= self.nanoseconds < NANOS_PER_SECOND:
            raise ValueError(f"nanoseconds out of range: {self.nanoseconds}")

    @classmethod
    def from_ms(cls, ms: int) -> "Timestamp":
        return cls(ms // 1000, ms % 1000 * NANOS_PER_MILLI)

    @classmethod
    def from_ns(cls, ns: int) -> "Timestamp":
        seconds, nanoseconds = divmod(ns, NANOS_PER_SECOND)
        return cls(seconds, nanoseconds)

    @classmethod
    def from_stat(cls, st: os.stat_result) -> "Timestamp":
        return cls.from_ns(st.st_mtime_ns)

    @classmethod
    def of(cls, path: Union[str, Path]) -> "Timestamp":
        """Modification time of `path` (follows symlinks)."""
        return cls.from_stat(os.stat(path))

    def milliseconds(self) -> int:
        """Whole milliseconds since the epoch, sub-millisecond part dropped."""
        return self.seconds * 1000 + self.nanoseconds // NANOS_PER_MILLI

    def to_ns(self) -> int:
        return self.seconds * NANOS_PER_SECOND + self.nanoseconds

    def same_millisecond(self, other: "Timestamp") -> bool:
        return self.milliseconds() == other.milliseconds()

    def older_at_ms(self, other: "Timestamp") -> bool:
        """True when self is older than other even after truncating to ms."""
        return self.milliseconds() < other.milliseconds()

    def set_file_times(self, path: Union[str, Path]) -> None:
        """Set both atime and mtime of `path` to this timestamp."""
        ns = self.to_ns()
        os.utime(path, ns=(ns, ns))

    def describe(self) -> str:
        """Render as `YYYY-MM-DD HH:MM:SS.nnnnnnnnn (GMT)`."""
        dt = _EPOCH + timedelta(seconds=self.seconds)
        return f"{dt:%Y-%m-%d %H:%M:%S}.{self.nanoseconds:09d} (GMT)"

    def __str__(self) -> str:
        return f"{self.seconds}.{self.nanoseconds:09d}"
