"""A sorted map that stores runs of keys sharing one value as single ranges."""

from __future__ import annotations

from bisect import bisect_left, bisect_right, insort
from dataclasses import dataclass
from typing import Callable, Generic, Iterator, Optional, TypeVar

K = TypeVar("K")
V = TypeVar("V")

Mutation = Callable[[K, K, Optional[V]], Optional[V]]


@dataclass
class _RangeItem(Generic[K, V]):
    end: K
    value: Optional[V]


class RangeMap(Generic[K, V]):
    """Maps ordered keys to values, keeping each stored range as one entry.

    Ranges are half-open: a range from ``start`` to ``end`` covers keys
    ``start <= k < end``. Neighbouring ranges are never merged, so the map is
    compact as long as updates touch the same ranges again.
    """

    def __init__(self) -> None:
        self._starts: list[K] = []
        self._items: dict[K, _RangeItem[K, V]] = {}

    def mutate_range(self, start: K, end: K, f: Mutation) -> None:
        """Update every sub-range of ``[start, end)`` through ``f``.

        ``f(sub_start, sub_end, value)`` is called once for each stored or
        missing sub-range overlapping the requested one, in key order. The
        value is ``None`` where no value was stored. ``f`` returns the new
        value; returning ``None`` removes the sub-range.
        """
        if not start < end:
            raise ValueError(f"Empty range {start!r}..{end!r}")
        while True:
            item = self._split_at(start)
            next_start = None
            if item is not None:
                if item.end > end:
                    self._insert(end, _RangeItem(item.end, item.value))
                    item.end = end
                elif item.end < end:
                    next_start = item.end
            else:
                index = bisect_left(self._starts, start)
                if index < len(self._starts) and self._starts[index] < end:
                    next_start = self._starts[index]
                    item = _RangeItem(next_start, None)
                else:
                    item = _RangeItem(end, None)
                self._insert(start, item)

            item.value = f(start, item.end, item.value)
            if item.value is None:
                self._remove(start)
            if next_start is None:
                return
            start = next_start

    def is_empty(self) -> bool:
        """Return True when no range holds a value."""
        return not self._items

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[tuple[K, K, V]]:
        """Yield ``(start, end, value)`` for each stored range in key order."""
        for start in self._starts:
            item = self._items[start]
            yield start, item.end, item.value

    def __str__(self) -> str:
        body = "".join(f"{start}..{end}:{value}," for start, end, value in self)
        return "{" + body + "}"

    def __repr__(self) -> str:
        body = "".join(f"{start!r}..{end!r}:{value!r}" for start, end, value in self)
        return "{" + body + "}"

    def _split_at(self, key: K) -> Optional[_RangeItem[K, V]]:
        """Return the stored range starting at ``key``, splitting one if needed."""
        index = bisect_right(self._starts, key) - 1
        if index < 0:
            return None
        lower = self._starts[index]
        item = self._items[lower]
        if lower == key:
            return item
        if item.end > key:
            tail = _RangeItem(item.end, item.value)
            item.end = key
            self._insert(key, tail)
            return tail
        return None

    def _insert(self, start: K, item: _RangeItem[K, V]) -> None:
        if start in self._items:
            raise AssertionError(f"Range starting at {start!r} already exists")
        insort(self._starts, start)
        self._items[start] = item

    def _remove(self, start: K) -> _RangeItem[K, V]:
        """Drop the range starting at ``start`` and return it."""
        removed = self._items.pop(start)
        self._starts.pop(bisect_left(self._starts, start))
        return removed