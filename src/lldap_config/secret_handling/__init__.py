"""Secret handling exports."""

from .secret_value import REDACTED_MARKER, SecretValue

__all__ = ["REDACTED_MARKER", "SecretValue"]
