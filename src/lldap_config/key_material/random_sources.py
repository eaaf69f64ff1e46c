"""Byte sources used to generate server key material."""

from __future__ import annotations

import hashlib
import secrets
from typing import Protocol

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms

CHACHA20_KEY_SIZE = 32
_CHACHA20_NONCE = bytes(16)


class RandomSource(Protocol):  # pylint: disable=too-few-public-methods
    """Anything that can hand out cryptographically secure bytes."""

    def read(self, size: int) -> bytes: ...


class OsRandomSource:  # pylint: disable=too-few-public-methods
    """Non-deterministic source backed by the operating system CSPRNG."""

    def read(self, size: int) -> bytes:
        return secrets.token_bytes(size)


class ChaCha20RandomSource:  # pylint: disable=too-few-public-methods
    """Deterministic CSPRNG: the ChaCha20 keystream for `key`, starting at block 0.

    Reads are consumed sequentially, so two sources built from the same key
    yield the same bytes for the same sequence of reads.
    """

    def __init__(self, key: bytes) -> None:
        if len(key) != CHACHA20_KEY_SIZE:
            raise ValueError(f"ChaCha20 key must be {CHACHA20_KEY_SIZE} bytes, got {len(key)}.")
        self._keystream = Cipher(algorithms.ChaCha20(key, _CHACHA20_NONCE), mode=None).encryptor()

    def read(self, size: int) -> bytes:
        if size < 0:
            raise ValueError("Negative read size is invalid.")
        return self._keystream.update(bytes(size))


def seeded_random_source(seed: str) -> ChaCha20RandomSource:
    """Build the deterministic source for an operator-supplied key seed."""
    digest = hashlib.sha256(seed.encode("utf-8")).digest()
    return ChaCha20RandomSource(digest)
