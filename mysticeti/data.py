"""Values carried together with their serialized bytes."""

from __future__ import annotations

import json
import threading
import weakref
from typing import Any, ClassVar, Generic, TypeVar, Union

T = TypeVar("T")


class _JsonCodec:
    """Compact, canonical JSON encoding."""

    def encode(self, value: Any) -> bytes:
        return json.dumps(value, separators=(",", ":"), sort_keys=True).encode()

    def decode(self, data: bytes) -> Any:
        return json.loads(data)


class _InMemoryCounters:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.count = 0
        self.size = 0

    def add(self, size: int) -> None:
        with self._lock:
            self.count += 1
            self.size += size

    def release(self, size: int) -> None:
        with self._lock:
            self.count -= 1
            self.size -= size

    def snapshot(self) -> tuple[int, int]:
        with self._lock:
            return self.count, self.size


_COUNTERS = _InMemoryCounters()


def in_memory_stats() -> tuple[int, int]:
    """Return the number of live ``Data`` objects and their total serialized size."""
    return _COUNTERS.snapshot()


class Data(Generic[T]):
    """An immutable value together with its serialized form.

    The bytes are produced once, when the value is wrapped, or kept as given
    when the value is read with ``from_bytes``. ``bytes(data)`` returns them
    without serializing again. Equality and hashing follow the value.

    The serialization is taken from the class attribute ``codec``, any
    object with ``encode(value) -> bytes`` and ``decode(bytes) -> value``;
    subclasses replace it for their own value types.
    """

    __slots__ = ("_value", "_serialized", "__weakref__")

    codec: ClassVar[Any] = _JsonCodec()

    def __init__(self, value: T) -> None:
        self._attach(value, bytes(self.codec.encode(value)))

    @classmethod
    def from_bytes(cls, data: Union[bytes, bytearray, memoryview]) -> "Data[T]":
        """Decode ``data``, keeping the given bytes as the serialized form."""
        raw = bytes(data)
        try:
            value = cls.codec.decode(raw)
        except Exception as error:
            raise ValueError("Failed to deserialize data") from error
        instance = cls.__new__(cls)
        instance._attach(value, raw)
        return instance

    def _attach(self, value: T, serialized: bytes) -> None:
        self._value = value
        self._serialized = serialized
        _COUNTERS.add(len(serialized))
        weakref.finalize(self, _COUNTERS.release, len(serialized))

    @property
    def value(self) -> T:
        return self._value

    @property
    def serialized_bytes(self) -> bytes:
        return self._serialized

    def __bytes__(self) -> bytes:
        return self._serialized

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        return getattr(self._value, name)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Data):
            return NotImplemented
        return self._value == other._value

    def __hash__(self) -> int:
        return hash(self._value)

    def __repr__(self) -> str:
        return repr(self._value)

    def __str__(self) -> str:
        return str(self._value)