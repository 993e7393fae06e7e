"""Intervals on an ordered axis: game seconds for team membership, or log line
numbers for class occupancy, which is tracked before the game clock is
established. A class interval ends on the last line its class was played."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

C = TypeVar("C")


@dataclass
class TimeInterval:
    """[start, end) interval; ``end`` of None means the interval is still open."""

    start: int
    end: int | None = None

    @property
    def is_open(self) -> bool:
        return self.end is None

    def set_end_time(self, end: int) -> None:
        self.end = end

    def get_duration(self) -> int | None:
        if self.end is None:
            return None
        return self.end - self.start

    def get_clamped_duration(self, lo: int, hi: int) -> int:
        """Length of the overlap with [lo, hi); an open interval extends to ``hi``."""
        end = hi if self.end is None or self.end > hi else self.end
        start = max(self.start, lo)
        return max(0, end - start)


@dataclass
class TimeIntervalWithContext(TimeInterval, Generic[C]):
    """An interval tagged with what was true during it (a team, a class)."""

    context: C | None = None
