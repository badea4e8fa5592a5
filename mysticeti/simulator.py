"""Discrete-event simulation driven by a virtual clock."""

from __future__ import annotations

import heapq
import itertools
import random
import threading
from datetime import timedelta
from types import TracebackType
from typing import Any, Generic, Optional, Protocol, Sequence, TypeVar, Union

Period = Union[timedelta, float, int]


class SimulatorState(Protocol):
    """A piece of simulated state that reacts to events addressed to it."""

    def handle_event(self, event: Any) -> None: ...


S = TypeVar("S", bound=SimulatorState)


def _to_ns(duration: Period) -> int:
    """Convert a timedelta or a number of seconds to whole nanoseconds."""
    if isinstance(duration, timedelta):
        ns = (
            duration.days * 86_400_000_000_000
            + duration.seconds * 1_000_000_000
            + duration.microseconds * 1_000
        )
    else:
        ns = round(duration * 1_000_000_000)
    if ns < 0:
        raise ValueError(f"Duration can not be negative: {duration!r}")
    return ns


def _ns_to_timedelta(ns: int) -> timedelta:
    return timedelta(microseconds=ns // 1_000)


class _Scheduler:
    """What an event handler sees of the simulator while it runs."""

    __slots__ = ("time_ns", "rng", "events")

    def __init__(self, time_ns: int, rng: random.Random) -> None:
        self.time_ns = time_ns
        self.rng = rng
        self.events: list[tuple[int, int, Any]] = []


_local = threading.local()


def _active() -> _Scheduler:
    scheduler = getattr(_local, "scheduler", None)
    if scheduler is None:
        raise RuntimeError("Not running in simulator context")
    return scheduler


def _enter(time_ns: int, rng: random.Random) -> None:
    if getattr(_local, "scheduler", None) is not None:
        raise RuntimeError("Scheduler is already active")
    _local.scheduler = _Scheduler(time_ns, rng)


def _exit() -> _Scheduler:
    scheduler = _active()
    _local.scheduler = None
    return scheduler


def _schedule_ns(after_ns: int, state: int, event: Any) -> int:
    """Schedule ``event`` from inside a handler; return its time in nanoseconds."""
    scheduler = _active()
    at = scheduler.time_ns + after_ns
    scheduler.events.append((at, state, event))
    return at


def _current_time_ns() -> int:
    return _active().time_ns


def schedule_event(after: Period, state: int, event: Any) -> timedelta:
    """Schedule ``event`` for ``state`` after ``after``, from inside a handler.

    Returns the simulated time at which the event fires.
    """
    return _ns_to_timedelta(_schedule_ns(_to_ns(after), state, event))


def current_rng() -> random.Random:
    """Return the simulator's random generator, from inside a handler."""
    return _active().rng


def current_time() -> timedelta:
    """Return the simulated time, from inside a handler."""
    return _ns_to_timedelta(_current_time_ns())


class Simulator(Generic[S]):
    """Runs events against a list of states in order of simulated time.

    Events scheduled for the same time run in the order they were scheduled.
    While a handler runs, ``schedule_event``, ``current_rng`` and
    ``current_time`` of this module refer to this simulator.
    """

    def __init__(self, states: Sequence[S], rng: Optional[random.Random] = None) -> None:
        self._states: list[S] = list(states)
        self._time_ns = 0
        self._events: list[tuple[int, int, int, Any]] = []
        self._sequence = itertools.count()
        self._rng = rng if rng is not None else random.Random(0)

    @property
    def states(self) -> list[S]:
        return self._states

    @property
    def time(self) -> timedelta:
        return _ns_to_timedelta(self._time_ns)

    @property
    def time_ns(self) -> int:
        return self._time_ns

    def schedule_event(self, after: Period, state: int, event: Any) -> None:
        """Schedule ``event`` for the state at index ``state`` after ``after``."""
        if not 0 <= state < len(self._states):
            raise IndexError(f"No simulated state with index {state}")
        self._schedule_ns(_to_ns(after), state, event)

    def _schedule_ns(self, after_ns: int, state: int, event: Any) -> None:
        self._push(self._time_ns + after_ns, state, event)

    def _push(self, at_ns: int, state: int, event: Any) -> None:
        heapq.heappush(self._events, (at_ns, next(self._sequence), state, event))

    def run_one(self) -> bool:
        """Run the earliest event, if any; return True when no events remain."""
        if self._events:
            at_ns, _, state, event = heapq.heappop(self._events)
            self._time_ns = at_ns
            self._run_event(state, event)
        return not self._events

    def _run_event(self, state: int, event: Any) -> None:
        _enter(self._time_ns, self._rng)
        try:
            self._states[state].handle_event(event)
        finally:
            scheduler = _exit()
            self._rng = scheduler.rng
            for at_ns, target, scheduled in scheduler.events:
                self._push(at_ns, target, scheduled)

    def close(self) -> None:
        """Drop all states inside the simulator context; events they schedule are ignored."""
        _enter(self._time_ns, self._rng)
        try:
            for state in self._states:
                close = getattr(state, "close", None)
                if callable(close):
                    close()
            self._states.clear()
        finally:
            self._rng = _exit().rng

    def __enter__(self) -> "Simulator[S]":
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        self.close()