"""Wall-clock and monotonic time helpers."""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional, Union

Period = Union[timedelta, float, int]


def _to_ns(duration: Period) -> int:
    if isinstance(duration, timedelta):
        return (
            duration.days * 86_400_000_000_000
            + duration.seconds * 1_000_000_000
            + duration.microseconds * 1_000
        )
    return int(duration * 1_000_000_000)


def timestamp_utc() -> timedelta:
    """Return the time elapsed since the Unix epoch."""
    return timedelta(microseconds=time.time_ns() // 1_000)


@dataclass(frozen=True, order=True)
class TimeInstant:
    """A point on the monotonic clock."""

    monotonic_ns: int

    @classmethod
    def now(cls) -> "TimeInstant":
        return cls(time.monotonic_ns())

    def elapsed(self) -> timedelta:
        """Return the time passed since this instant."""
        return timedelta(microseconds=(time.monotonic_ns() - self.monotonic_ns) // 1_000)


class TimeInterval:
    """Ticks at a fixed period; missed ticks are skipped.

    The first tick completes at once. When a tick is late, it completes at
    once and the next one is scheduled on the following multiple of the
    period, so no burst of catch-up ticks follows.
    """

    def __init__(self, period: Period) -> None:
        self._period_ns = _to_ns(period)
        if self._period_ns <= 0:
            raise ValueError("Interval period must be positive")
        self._next_ns: Optional[int] = None

    @property
    def period(self) -> timedelta:
        return timedelta(microseconds=self._period_ns // 1_000)

    async def tick(self) -> TimeInstant:
        """Wait for the next tick and return the instant it was scheduled for."""
        now = time.monotonic_ns()
        if self._next_ns is None:
            self._next_ns = now
        if now < self._next_ns:
            await asyncio.sleep((self._next_ns - now) / 1_000_000_000)
        deadline = self._next_ns
        now = time.monotonic_ns()
        missed = max(0, now - deadline) // self._period_ns
        self._next_ns = deadline + self._period_ns * (missed + 1)
        return TimeInstant(deadline)