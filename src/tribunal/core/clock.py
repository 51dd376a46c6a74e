# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Tribunal Contributors

"""Deadline bookkeeping against a host-supplied time source.

The engine never sleeps. Every period (challenge, appeal, loser half of
the appeal) is a pair of integers compared against ``TimeoutClock.now()``.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass


@dataclass(frozen=True)
class Window:
    """A half-open time window ``[start, end)``."""

    start: int
    end: int

    @property
    def duration(self) -> int:
        return self.end - self.start

    @property
    def half(self) -> int:
        """End of the first half of the window."""
        return self.start + (self.end - self.start) // 2

    def to_dict(self) -> dict[str, int]:
        return {"start": self.start, "end": self.end}


class TimeoutClock:
    """Deadline comparisons against a host time source.

    Defaults to Unix wall time so that stored submission times and appeal
    windows stay comparable across process restarts.
    """

    def __init__(self, time_source: Callable[[], int] | None = None):
        self._time_source = time_source or (lambda: int(time.time()))

    def now(self) -> int:
        return int(self._time_source())

    def window(self, duration: int) -> Window:
        """Open a window of ``duration`` starting now."""
        start = self.now()
        return Window(start=start, end=start + duration)

    def has_elapsed(self, start: int, duration: int) -> bool:
        """Whether ``start + duration`` lies strictly in the past."""
        return self.now() - start > duration

    def before(self, deadline: int) -> bool:
        return self.now() < deadline


class ManualClock(TimeoutClock):
    """Clock driven by hand, for tests and simulations."""

    def __init__(self, start: int = 0):
        self._now = start
        super().__init__(lambda: self._now)

    def advance(self, seconds: int) -> int:
        """Move time forward and return the new timestamp."""
        if seconds < 0:
            raise ValueError("Clock cannot move backwards")
        self._now += seconds
        return self._now

    def set(self, timestamp: int) -> None:
        if timestamp < self._now:
            raise ValueError("Clock cannot move backwards")
        self._now = timestamp
