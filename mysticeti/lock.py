"""A readers-writer lock that reports write-lock wait and hold times."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Generic, Iterator, TypeVar

from mysticeti.metrics import Counter

V = TypeVar("V")


class _WriteGuard(Generic[V]):
    """Access to the protected value while the write lock is held."""

    __slots__ = ("_lock",)

    def __init__(self, lock: "MonitoredRwLock[V]") -> None:
        self._lock = lock

    @property
    def value(self) -> V:
        return self._lock._value

    @value.setter
    def value(self, new: V) -> None:
        self._lock._value = new


class MonitoredRwLock(Generic[V]):
    """Guards a value; many readers or one writer at a time.

    Time spent waiting for the write lock is added to ``wlock_wait`` and time
    spent holding it to ``wlock_util``, both in microseconds. Waiting
    writers take precedence over new readers.
    """

    def __init__(self, value: V, wlock_util: Counter, wlock_wait: Counter) -> None:
        self._value = value
        self._wlock_util = wlock_util
        self._wlock_wait = wlock_wait
        self._cond = threading.Condition()
        self._readers = 0
        self._writer = False
        self._waiting_writers = 0

    @contextmanager
    def write(self) -> Iterator[_WriteGuard[V]]:
        """Hold the write lock; the guard's ``value`` may be read and replaced."""
        with self._wlock_wait.utilization_timer():
            self._acquire_write()
        try:
            with self._wlock_util.utilization_timer():
                yield _WriteGuard(self)
        finally:
            self._release_write()

    @contextmanager
    def read(self) -> Iterator[V]:
        """Hold a read lock and yield the protected value."""
        with self._cond:
            self._cond.wait_for(lambda: not self._writer and self._waiting_writers == 0)
            self._readers += 1
        try:
            yield self._value
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    def _acquire_write(self) -> None:
        with self._cond:
            self._waiting_writers += 1
            try:
                self._cond.wait_for(lambda: not self._writer and self._readers == 0)
            finally:
                self._waiting_writers -= 1
            self._writer = True

    def _release_write(self) -> None:
        with self._cond:
            self._writer = False
            self._cond.notify_all()