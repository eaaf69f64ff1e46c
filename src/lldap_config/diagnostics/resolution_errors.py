"""Fatal configuration resolution failures."""

from __future__ import annotations


class ConfigurationError(Exception):
    """Raised when a usable configuration cannot be produced."""


class SourceParseError(ConfigurationError):
    """Raised when a configuration source is missing, malformed or mistyped."""


class KeyMaterialError(ConfigurationError):
    """Raised when the server key material cannot be read, decoded or persisted."""
