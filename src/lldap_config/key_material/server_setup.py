"""PAKE server setup entities.

The setup has the shape of an OPAQUE server setup (OPRF seed, server keypair,
fake keypair) but holds X25519 keys. It is not ristretto255 OPAQUE state and
cannot be exchanged with opaque-ke or other OPAQUE libraries.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from cryptography.hazmat.primitives.asymmetric.x25519 import X25519PrivateKey

from .random_sources import RandomSource

OPRF_SEED_SIZE = 64
PRIVATE_KEY_SIZE = 32
PUBLIC_KEY_SIZE = 32


def derive_public_key(private_key: bytes) -> bytes:
    """Return the X25519 public key for raw private key bytes."""
    if len(private_key) != PRIVATE_KEY_SIZE:
        raise ValueError(f"Private key must be {PRIVATE_KEY_SIZE} bytes, got {len(private_key)}.")
    return X25519PrivateKey.from_private_bytes(private_key).public_key().public_bytes_raw()


@dataclass(frozen=True)
class KeyPair:
    """X25519 keypair held by the server."""

    private_key: bytes = field(repr=False)
    public_key: bytes

    @staticmethod
    def from_private_key(private_key: bytes) -> KeyPair:
        return KeyPair(private_key=private_key, public_key=derive_public_key(private_key))

    @staticmethod
    def generate(rng: RandomSource) -> KeyPair:
        return KeyPair.from_private_key(rng.read(PRIVATE_KEY_SIZE))


@dataclass(frozen=True)
class ServerSetup:
    """Server-side state of the password-authenticated key exchange.

    Holds the OPRF seed, the long-lived server keypair, and a fake keypair
    used to answer login attempts for unknown users without revealing that
    they do not exist.
    """

    oprf_seed: bytes = field(repr=False)
    keypair: KeyPair
    fake_keypair: KeyPair = field(repr=False)

    @staticmethod
    def generate(rng: RandomSource) -> ServerSetup:
        """Draw a new setup from `rng`: OPRF seed, then keypair, then fake keypair."""
        oprf_seed = rng.read(OPRF_SEED_SIZE)
        keypair = KeyPair.generate(rng)
        fake_keypair = KeyPair.generate(rng)
        return ServerSetup(oprf_seed=oprf_seed, keypair=keypair, fake_keypair=fake_keypair)
