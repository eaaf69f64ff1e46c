"""Server setup codec tests."""

from __future__ import annotations

import struct

import pytest
from lldap_config.key_material import (
    ChaCha20RandomSource,
    KeyMaterialDecodeError,
    ServerSetup,
    deserialize_server_setup,
    serialize_server_setup,
)

# magic + version + five length-prefixed fields
SERIALIZED_SIZE = 4 + 1 + 5 * 8 + 64 + 4 * 32


def _setup() -> ServerSetup:
    return ServerSetup.generate(ChaCha20RandomSource(bytes(range(32))))


def test_serialized_setup_has_fixed_layout() -> None:
    setup = _setup()

    payload = serialize_server_setup(setup)

    assert len(payload) == SERIALIZED_SIZE
    assert payload[:5] == b"LLSS\x01"
    assert struct.unpack("<Q", payload[5:13]) == (64,)
    assert payload[13:77] == setup.oprf_seed
    assert deserialize_server_setup(payload) == setup


@pytest.mark.parametrize(
    ("mutate", "message"),
    [
        (lambda payload: b"XXXX" + payload[4:], "unrecognized header"),
        (lambda payload: payload[:4] + b"\x09" + payload[5:], "version 9"),
        (lambda payload: payload[:-1], "Unexpected end"),
        (lambda payload: payload + b"\x00", "trailing"),
        (lambda payload: payload[:5] + struct.pack("<Q", 63) + payload[13:], "OPRF seed length"),
        (lambda payload: b"", "Unexpected end"),
    ],
)
def test_deserialize_rejects_malformed_payloads(mutate, message: str) -> None:
    payload = mutate(serialize_server_setup(_setup()))

    with pytest.raises(KeyMaterialDecodeError, match=message):
        deserialize_server_setup(payload)


def test_deserialize_rejects_public_key_not_matching_private_key() -> None:
    payload = bytearray(serialize_server_setup(_setup()))
    server_public_key_offset = 5 + 8 + 64 + 8 + 32 + 8
    payload[server_public_key_offset] ^= 0xFF

    with pytest.raises(KeyMaterialDecodeError, match="server public key does not match"):
        deserialize_server_setup(bytes(payload))
