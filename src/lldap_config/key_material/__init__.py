"""Server key material domain exports."""

from .key_store import (
    DEFAULT_KEY_FILE,
    KeyMaterialResolution,
    KeyProvenance,
    load_or_create_server_setup,
    write_to_readonly_file,
)
from .random_sources import (
    ChaCha20RandomSource,
    OsRandomSource,
    RandomSource,
    seeded_random_source,
)
from .server_setup import KeyPair, ServerSetup
from .setup_codec import KeyMaterialDecodeError, deserialize_server_setup, serialize_server_setup

__all__ = [
    "DEFAULT_KEY_FILE",
    "ChaCha20RandomSource",
    "KeyMaterialDecodeError",
    "KeyMaterialResolution",
    "KeyPair",
    "KeyProvenance",
    "OsRandomSource",
    "RandomSource",
    "ServerSetup",
    "deserialize_server_setup",
    "load_or_create_server_setup",
    "seeded_random_source",
    "serialize_server_setup",
    "write_to_readonly_file",
]
