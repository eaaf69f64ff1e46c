"""Redacting wrapper for sensitive configuration strings."""

from __future__ import annotations

import hmac

from pydantic import SecretStr

REDACTED_MARKER = "***SECRET***"


class SecretValue(SecretStr):
    """A pydantic `SecretStr` that never shows up in repr, str or format output."""

    def __init__(self, value: str) -> None:
        if not isinstance(value, str):
            raise TypeError("SecretValue wraps str values only.")
        super().__init__(value)

    @classmethod
    def from_secret(cls, secret: SecretStr) -> SecretValue:
        if isinstance(secret, cls):
            return secret
        return cls(secret.get_secret_value())

    def reveal(self) -> str:
        """Return the plaintext. Callers own what happens to it next."""
        return self.get_secret_value()

    def is_empty(self) -> bool:
        return not self.get_secret_value()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SecretValue):
            return NotImplemented
        return hmac.compare_digest(
            self.get_secret_value().encode("utf-8"), other.get_secret_value().encode("utf-8")
        )

    def __hash__(self) -> int:
        return hash((SecretValue, self.get_secret_value()))

    def __repr__(self) -> str:
        return f"SecretValue({REDACTED_MARKER!r})"

    def __str__(self) -> str:
        return REDACTED_MARKER

    def __format__(self, format_spec: str) -> str:
        return format(REDACTED_MARKER, format_spec)
