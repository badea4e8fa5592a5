"""Framing, ping encoding and handshakes for peer-to-peer TCP connections.

Every message on the wire is a 4-byte big-endian length followed by the
payload. A length of zero marks a ping frame: the length is followed by an
8-byte little-endian signed integer. Positive pings carry the sender's local
time in microseconds; the receiver answers with the negated value (a pong).
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Tuple, Union

PING_INTERVAL = timedelta(seconds=30)
PING_SIZE = 12
MAX_SIZE = 16 * 1024 * 1024
ACTIVE_HANDSHAKE = 0xFEFE0000
PASSIVE_HANDSHAKE = 0x0000AEAE

_SIZE = struct.Struct(">I")
_HANDSHAKE = struct.Struct(">Q")
_PING_BODY = PING_SIZE - _SIZE.size
_PORT_MAX = 0xFFFF

Address = Tuple[Any, ...]


class FrameError(ValueError):
    """A frame on the wire is malformed."""


class HandshakeError(ConnectionError):
    """The peer answered the handshake with an unexpected value."""


@dataclass(frozen=True)
class Ping:
    """A ping (positive) or pong (negative) frame."""

    value: int


def encode_ping(message: int) -> bytes:
    """Encode a ping frame: a zero length, then ``message`` as i64 little-endian."""
    return bytes(_SIZE.size) + message.to_bytes(8, "little", signed=True)


def decode_ping(data: bytes) -> int:
    """Decode the 8 bytes that follow the zero length of a ping frame."""
    if len(data) != PING_SIZE - _SIZE.size:
        raise ValueError(f"Ping body must be {_PING_BODY} bytes, got {len(data)}")
    return int.from_bytes(bytes(data), "little", signed=True)


def _with_port(address: Address, port: int) -> Address:
    if not 0 <= port <= _PORT_MAX:
        raise ValueError(f"Port {port} is out of range")
    return (address[0], port, *address[2:])


def _check_address(address: Address) -> int:
    if len(address) not in (2, 4):
        raise ValueError(f"Not a socket address: {address!r}")
    return int(address[1])


def remote_to_local_port(address: Address) -> Address:
    """Map the port a peer connects from to the port it listens on (divide by 10)."""
    return _with_port(address, _check_address(address) // 10)


def bind_addr(address: Address) -> Address:
    """Return the address outgoing connections bind to (listening port times 10)."""
    return _with_port(address, _check_address(address) * 10)


def encode_frame(payload: bytes) -> bytes:
    """Prefix ``payload`` with its 4-byte big-endian length."""
    payload = bytes(payload)
    if not payload:
        raise FrameError("Empty payload can not be framed: zero length marks a ping")
    if len(payload) > MAX_SIZE:
        raise FrameError(f"Invalid size: {len(payload)}")
    return _SIZE.pack(len(payload)) + payload


async def read_frame(reader: Any) -> Union[Ping, bytes]:
    """Read one frame from an asyncio stream reader.

    Returns a ``Ping`` for ping frames and the payload bytes otherwise.
    Raises ``FrameError`` for an oversized frame, and lets
    ``asyncio.IncompleteReadError`` through when the stream ends mid-frame.
    """
    (size,) = _SIZE.unpack(await reader.readexactly(_SIZE.size))
    if size > MAX_SIZE:
        raise FrameError(f"Invalid size: {size}")
    if size == 0:
        return Ping(decode_ping(await reader.readexactly(_PING_BODY)))
    return await reader.readexactly(size)


async def handshake(reader: Any, writer: Any, active: bool) -> None:
    """Exchange handshake values with the peer.

    The side that opened the connection (``active``) sends the active value
    and expects the passive one back; the accepting side does the reverse.
    Raises ``HandshakeError`` if the peer sends anything else.
    """
    ours, expected = (
        (ACTIVE_HANDSHAKE, PASSIVE_HANDSHAKE) if active else (PASSIVE_HANDSHAKE, ACTIVE_HANDSHAKE)
    )
    writer.write(_HANDSHAKE.pack(ours))
    await writer.drain()
    (theirs,) = _HANDSHAKE.unpack(await reader.readexactly(_HANDSHAKE.size))
    if theirs != expected:
        kind = "passive" if active else "active"
        raise HandshakeError(f"Invalid {kind} handshake: {theirs}")