"""Resolution of the server setup from a seed, a key file, or fresh randomness."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from lldap_config.diagnostics import Advisory, KeyMaterialError
from lldap_config.secret_handling import SecretValue

from .random_sources import OsRandomSource, seeded_random_source
from .server_setup import ServerSetup
from .setup_codec import KeyMaterialDecodeError, deserialize_server_setup, serialize_server_setup

DEFAULT_KEY_FILE = "server_key"
READONLY_FILE_MODE = 0o400

_LOGGER = logging.getLogger(__name__)


class KeyProvenance(str, Enum):
    """Which policy produced the server setup."""

    SEED = "seed"
    FILE = "file"
    GENERATED = "generated"


@dataclass(frozen=True)
class KeyMaterialResolution:
    """Outcome of resolving the server setup."""

    server_setup: ServerSetup
    provenance: KeyProvenance
    advisories: tuple[Advisory, ...] = ()


def load_or_create_server_setup(
    key_file: str, key_seed: SecretValue | None = None
) -> KeyMaterialResolution:
    """Resolve the server setup using exactly one policy.

    A non-empty seed always wins and leaves any key file untouched. Without a
    seed an existing key file is decoded; otherwise a new setup is generated
    and written to `key_file`, which must not exist yet.

    Raises:
      KeyMaterialError: If the key file cannot be read, decoded or written.
    """
    path = Path(key_file)
    if key_seed is not None and not key_seed.is_empty():
        return _derive_from_seed(key_file, path, key_seed)
    if path.exists():
        return _read_from_file(path)
    return _generate_and_persist(path)


def _derive_from_seed(key_file: str, path: Path, key_seed: SecretValue) -> KeyMaterialResolution:
    if key_file != DEFAULT_KEY_FILE or path.exists():
        advisory = Advisory.warning(
            "A key_seed was given, we will ignore the server_key and generate one from the seed!",
            error_stream=True,
        )
    else:
        advisory = Advisory.info("Got a key_seed, ignoring key_file")
    _LOGGER.debug("Deriving server setup from key seed")
    setup = ServerSetup.generate(seeded_random_source(key_seed.reveal()))
    return KeyMaterialResolution(
        server_setup=setup, provenance=KeyProvenance.SEED, advisories=(advisory,)
    )


def _read_from_file(path: Path) -> KeyMaterialResolution:
    _LOGGER.debug("Reading server setup from %s", path)
    try:
        payload = path.read_bytes()
    except OSError as exc:
        raise KeyMaterialError(f"Could not read key file `{path}`: {exc}") from exc
    try:
        setup = deserialize_server_setup(payload)
    except KeyMaterialDecodeError as exc:
        raise KeyMaterialError(f"Could not decode key file `{path}`: {exc}") from exc
    return KeyMaterialResolution(server_setup=setup, provenance=KeyProvenance.FILE)


def _generate_and_persist(path: Path) -> KeyMaterialResolution:
    _LOGGER.debug("Generating a new server setup into %s", path)
    setup = ServerSetup.generate(OsRandomSource())
    try:
        write_to_readonly_file(path, serialize_server_setup(setup))
    except OSError as exc:
        raise KeyMaterialError(
            f"Could not write the generated server setup to file `{path}`: {exc}"
        ) from exc
    return KeyMaterialResolution(server_setup=setup, provenance=KeyProvenance.GENERATED)


def write_to_readonly_file(path: Path, payload: bytes) -> None:
    """Create `path` exclusively with owner-read-only permissions and write `payload`.

    Raises:
      FileExistsError: If anything already exists at `path`.
      OSError: If the permissions cannot be restricted or the write fails.
    """
    flags = os.O_WRONLY | os.O_CREAT | os.O_EXCL | getattr(os, "O_BINARY", 0)
    descriptor = os.open(path, flags, READONLY_FILE_MODE)
    try:
        with os.fdopen(descriptor, "wb") as handle:
            if hasattr(os, "fchmod"):
                os.fchmod(handle.fileno(), READONLY_FILE_MODE)
            handle.write(payload)
    except OSError:
        # The file was created by this call, so it is safe to remove.
        path.unlink(missing_ok=True)
        raise
