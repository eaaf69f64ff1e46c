"""Binary codec for the persisted server setup.

Layout: the magic ``LLSS``, one format version byte, then every field as a
little-endian u64 length followed by the raw bytes, in this order: OPRF seed,
server private key, server public key, fake private key, fake public key.
"""

from __future__ import annotations

import struct

from .server_setup import OPRF_SEED_SIZE, PRIVATE_KEY_SIZE, PUBLIC_KEY_SIZE, KeyPair, ServerSetup

SETUP_MAGIC = b"LLSS"
SETUP_FORMAT_VERSION = 1
_LENGTH_PREFIX = struct.Struct("<Q")


class KeyMaterialDecodeError(Exception):
    """Raised when bytes do not hold a valid serialized server setup."""


def serialize_server_setup(setup: ServerSetup) -> bytes:
    """Encode a server setup into its on-disk representation."""
    chunks = [SETUP_MAGIC, bytes([SETUP_FORMAT_VERSION])]
    for value in (
        setup.oprf_seed,
        setup.keypair.private_key,
        setup.keypair.public_key,
        setup.fake_keypair.private_key,
        setup.fake_keypair.public_key,
    ):
        chunks.append(_LENGTH_PREFIX.pack(len(value)))
        chunks.append(value)
    return b"".join(chunks)


def deserialize_server_setup(payload: bytes) -> ServerSetup:
    """Decode and sanity-check a serialized server setup."""
    reader = _SetupReader(payload)
    if reader.read_exact(len(SETUP_MAGIC)) != SETUP_MAGIC:
        raise KeyMaterialDecodeError("Not a server setup: unrecognized header.")
    version = reader.read_exact(1)[0]
    if version != SETUP_FORMAT_VERSION:
        raise KeyMaterialDecodeError(f"Unsupported server setup format version {version}.")

    oprf_seed = reader.read_field(OPRF_SEED_SIZE, "OPRF seed")
    keypair = _read_keypair(reader, "server")
    fake_keypair = _read_keypair(reader, "fake")
    if reader.remaining:
        raise KeyMaterialDecodeError(f"{reader.remaining} trailing bytes after server setup.")
    return ServerSetup(oprf_seed=oprf_seed, keypair=keypair, fake_keypair=fake_keypair)


def _read_keypair(reader: _SetupReader, label: str) -> KeyPair:
    private_key = reader.read_field(PRIVATE_KEY_SIZE, f"{label} private key")
    public_key = reader.read_field(PUBLIC_KEY_SIZE, f"{label} public key")
    keypair = KeyPair.from_private_key(private_key)
    if keypair.public_key != public_key:
        raise KeyMaterialDecodeError(f"The {label} public key does not match its private key.")
    return keypair


class _SetupReader:
    """Sequential reader over a serialized server setup."""

    def __init__(self, payload: bytes) -> None:
        self._data = payload
        self._offset = 0

    @property
    def remaining(self) -> int:
        """Number of unread bytes."""
        return len(self._data) - self._offset

    def read_exact(self, size: int) -> bytes:
        """Read exactly `size` bytes or raise KeyMaterialDecodeError."""
        end = self._offset + size
        if end > len(self._data):
            raise KeyMaterialDecodeError("Unexpected end of server setup payload.")
        chunk = self._data[self._offset : end]
        self._offset = end
        return chunk

    def read_field(self, expected_size: int, label: str) -> bytes:
        """Read one length-prefixed field whose length must be `expected_size`."""
        (length,) = _LENGTH_PREFIX.unpack(self.read_exact(_LENGTH_PREFIX.size))
        if length != expected_size:
            raise KeyMaterialDecodeError(
                f"Invalid {label} length {length}, expected {expected_size}."
            )
        return self.read_exact(length)
