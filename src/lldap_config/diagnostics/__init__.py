"""Diagnostics domain exports."""

from .advisory_models import Advisory, AdvisorySeverity
from .resolution_errors import ConfigurationError, KeyMaterialError, SourceParseError

__all__ = [
    "Advisory",
    "AdvisorySeverity",
    "ConfigurationError",
    "KeyMaterialError",
    "SourceParseError",
]
