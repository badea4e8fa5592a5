"""Fixed-length byte values such as digests and signatures."""

from __future__ import annotations

from typing import ClassVar, Optional, Union

BytesLike = Union[bytes, bytearray, memoryview, str]


class FixedBytes(bytes):
    """Immutable bytes of a length fixed by the subclass.

    Subclasses set ``SIZE`` and ``NAME``; building one from data of any
    other length raises ``ValueError``. With no data, the value is all zeros.
    """

    SIZE: ClassVar[Optional[int]] = None
    NAME: ClassVar[str] = "value"

    def __new__(cls, data: Optional[BytesLike] = None) -> "FixedBytes":
        if cls.SIZE is None:
            raise TypeError(f"{cls.__name__} does not define SIZE")
        if data is None:
            raw = bytes(cls.SIZE)
        elif isinstance(data, str):
            raw = data.encode()
        elif isinstance(data, (bytes, bytearray, memoryview)):
            raw = bytes(data)
        else:
            raise TypeError(f"Expected a byte slice, got {type(data).__name__}")
        if len(raw) != cls.SIZE:
            raise ValueError(f"Invalid {cls.NAME} length: {len(raw)}")
        return super().__new__(cls, raw)

    @classmethod
    def from_bytes(cls, data: BytesLike) -> "FixedBytes":
        """Copy ``data`` into a new value, checking its length."""
        return cls(data)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.hex()})"