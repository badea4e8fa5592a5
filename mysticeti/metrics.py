"""Integer counters, labelled counter families and utilization timers."""

from __future__ import annotations

import threading
import time
from types import TracebackType
from typing import Iterator, Optional, Sequence


class Counter:
    """A monotonically increasing integer counter."""

    def __init__(self, name: str = "", help: str = "") -> None:
        self.name = name
        self.help = help
        self._value = 0
        self._lock = threading.Lock()

    @property
    def value(self) -> int:
        with self._lock:
            return self._value

    def inc(self, amount: int = 1) -> None:
        """Add ``amount`` to the counter; negative amounts are rejected."""
        if amount < 0:
            raise ValueError(f"Counter can not be decreased (amount {amount})")
        with self._lock:
            self._value += amount

    def utilization_timer(self) -> "UtilizationTimer":
        """Return a timer that adds the microseconds it was held to this counter."""
        return UtilizationTimer(self)

    def __repr__(self) -> str:
        return f"Counter({self.name!r}, value={self.value})"


class CounterVec:
    """A family of counters told apart by label values."""

    def __init__(self, name: str, help: str, labels: Sequence[str]) -> None:
        if not labels:
            raise ValueError("A counter family needs at least one label")
        self.name = name
        self.help = help
        self.labels = tuple(labels)
        self._counters: dict[tuple[str, ...], Counter] = {}
        self._lock = threading.Lock()

    def with_label_values(self, *args: str) -> Counter:
        """Return the counter for the given label values, creating it on first use."""
        if len(args) != len(self.labels):
            raise ValueError(
                f"Expected {len(self.labels)} label values for {self.name!r}, got {len(args)}"
            )
        key = tuple(args)
        with self._lock:
            counter = self._counters.get(key)
            if counter is None:
                counter = Counter(self.name, self.help)
                self._counters[key] = counter
            return counter

    def utilization_timer(self, label: str) -> "UtilizationTimer":
        """Return a timer for the counter labelled ``label``."""
        return self.with_label_values(label).utilization_timer()

    def __iter__(self) -> Iterator[tuple[tuple[str, ...], int]]:
        """Yield ``(label_values, value)`` for every counter created so far."""
        with self._lock:
            items = list(self._counters.items())
        for key, counter in items:
            yield key, counter.value

    def __len__(self) -> int:
        with self._lock:
            return len(self._counters)


class UtilizationTimer:
    """Measures time from creation until the end of a ``with`` block.

    On leaving the block the elapsed whole microseconds are added to the
    counter, once.
    """

    def __init__(self, metric: Counter) -> None:
        self._metric = metric
        self._start_ns = time.monotonic_ns()
        self._done = False

    def __enter__(self) -> "UtilizationTimer":
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        self._record()

    def _record(self) -> None:
        if self._done:
            return
        self._done = True
        elapsed_us = max(0, time.monotonic_ns() - self._start_ns) // 1_000
        self._metric.inc(elapsed_us)