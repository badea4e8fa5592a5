"""Block digests, signatures and ed25519 signing keys."""

from __future__ import annotations

import hashlib
import random
from typing import Any, Union

from nacl.exceptions import BadSignatureError
from nacl.signing import SigningKey, VerifyKey

from mysticeti.byterepr import FixedBytes

SIGNATURE_SIZE = 64
BLOCK_DIGEST_SIZE = 32
PUBLIC_KEY_SIZE = 32
SEED_SIZE = 32

_U64_MAX = (1 << 64) - 1
_U128_MAX = (1 << 128) - 1

BytesLike = Union[bytes, bytearray, memoryview]


class SignatureError(ValueError):
    """Raised when a signature does not match the message and key."""


class BlockDigest(FixedBytes):
    """A 32-byte block digest."""

    SIZE = BLOCK_DIGEST_SIZE
    NAME = "block digest"

    def __repr__(self) -> str:
        return f"@{self.hex()}"

    def __str__(self) -> str:
        return f"@{self[:4].hex()}"


class SignatureBytes(FixedBytes):
    """A 64-byte ed25519 signature."""

    SIZE = SIGNATURE_SIZE
    NAME = "signature"


class PublicKey(FixedBytes):
    """A 32-byte ed25519 verification key."""

    SIZE = PUBLIC_KEY_SIZE
    NAME = "public key"

    def verify(self, message: BytesLike, signature: BytesLike) -> None:
        """Check ``signature`` over ``message``; raise ``SignatureError`` if it is wrong."""
        signature = SignatureBytes(signature)
        try:
            VerifyKey(bytes(self)).verify(bytes(message), bytes(signature))
        except BadSignatureError as error:
            raise SignatureError("Signature verification failed") from error


class U128(int):
    """An integer hashed as 16 big-endian bytes rather than 8."""

    __slots__ = ()


def block_hasher() -> Any:
    """Return a fresh BLAKE2b hasher producing 32-byte digests."""
    return hashlib.blake2b(digest_size=BLOCK_DIGEST_SIZE)


def crypto_hash(value: Any, hasher: Any) -> None:
    """Feed ``value`` into ``hasher``.

    Integers go in as 8 big-endian bytes (16 for ``U128``), byte strings as
    they are, and any other object through its own ``crypto_hash(hasher)``.
    """
    if isinstance(value, U128):
        if not 0 <= value <= _U128_MAX:
            raise ValueError(f"Value {int(value)} does not fit in 128 bits")
        hasher.update(int(value).to_bytes(16, "big"))
    elif isinstance(value, int):
        if not 0 <= value <= _U64_MAX:
            raise ValueError(f"Value {value} does not fit in 64 bits")
        hasher.update(value.to_bytes(8, "big"))
    elif isinstance(value, (bytes, bytearray, memoryview)):
        hasher.update(bytes(value))
    elif hasattr(value, "crypto_hash"):
        value.crypto_hash(hasher)
    else:
        raise TypeError(f"Can not hash value of type {type(value).__name__}")


class Signer:
    """An ed25519 signing key."""

    __slots__ = ("_key",)

    def __init__(self, seed: BytesLike) -> None:
        seed = bytes(seed)
        if len(seed) != SEED_SIZE:
            raise ValueError(f"Invalid seed length: {len(seed)}")
        self._key = SigningKey(seed)

    @classmethod
    def new_for_test(cls, n: int) -> list["Signer"]:
        """Return ``n`` distinct signers, the same ones on every call."""
        rng = random.Random(0)
        return [cls(rng.randbytes(SEED_SIZE)) for _ in range(n)]

    def sign(self, message: BytesLike) -> SignatureBytes:
        """Sign ``message``."""
        return SignatureBytes(self._key.sign(bytes(message)).signature)

    def public_key(self) -> PublicKey:
        return PublicKey(bytes(self._key.verify_key))

    def __repr__(self) -> str:
        return f"Signer(public_key={self.public_key()!r})"

    __str__ = __repr__


def dummy_signer() -> Signer:
    """Return a signer whose seed is all zeros."""
    return Signer(bytes(SEED_SIZE))


def dummy_public_key() -> PublicKey:
    return dummy_signer().public_key()