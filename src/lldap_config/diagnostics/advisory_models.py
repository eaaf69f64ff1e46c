"""Advisory entities emitted during configuration resolution."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class AdvisorySeverity(str, Enum):
    """How loudly an advisory should be presented."""

    INFO = "info"
    WARNING = "warning"
    DEPRECATED = "deprecated"


_PREFIXES = {
    AdvisorySeverity.INFO: "",
    AdvisorySeverity.WARNING: "WARNING: ",
    AdvisorySeverity.DEPRECATED: "DEPRECATED: ",
}


@dataclass(frozen=True)
class Advisory:
    """Non-fatal, user-facing note about the resolved configuration."""

    severity: AdvisorySeverity
    message: str
    # Shown on standard error instead of standard output.
    error_stream: bool = False

    @staticmethod
    def info(message: str) -> Advisory:
        return Advisory(severity=AdvisorySeverity.INFO, message=message)

    @staticmethod
    def warning(message: str, *, error_stream: bool = False) -> Advisory:
        return Advisory(
            severity=AdvisorySeverity.WARNING, message=message, error_stream=error_stream
        )

    @staticmethod
    def deprecated(message: str) -> Advisory:
        return Advisory(severity=AdvisorySeverity.DEPRECATED, message=message)

    def render(self) -> str:
        """Console line for this advisory."""
        return f"{_PREFIXES[self.severity]}{self.message}"
