"""Parsers for setting values that plain pydantic types do not cover.

Each parser raises ValueError so it can serve as a pydantic validator and be
reused on command-line overrides.
"""

from __future__ import annotations

import json
from email.utils import parseaddr
from typing import Any
from urllib.parse import urlsplit

from .runtime_settings import SmtpEncryption


def parse_mailbox(value: str | None) -> str | None:
    """Accept ``user@host`` or ``Name <user@host>``; blank means no mailbox."""
    if value is None:
        return None
    stripped = value.strip()
    if not stripped:
        return None
    _display_name, address = parseaddr(stripped)
    if "@" not in address:
        raise ValueError(f"must be a mailbox like 'Name <user@example.com>', got {value!r}")
    return stripped


def parse_http_url(value: str) -> str:
    stripped = value.strip()
    parts = urlsplit(stripped)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise ValueError(f"must be an absolute http(s) URL, got {value!r}")
    return stripped


def parse_smtp_encryption(value: Any) -> Any:
    if isinstance(value, SmtpEncryption) or not isinstance(value, str):
        return value
    normalized = value.strip().upper()
    if normalized not in SmtpEncryption.__members__:
        choices = ", ".join(member.value for member in SmtpEncryption)
        raise ValueError(f"must be one of {choices}, got {value!r}")
    return SmtpEncryption[normalized]


def parse_string_list(value: Any) -> Any:
    """Split environment strings: a JSON array or comma-separated items."""
    if not isinstance(value, str):
        return value
    stripped = value.strip()
    if stripped.startswith("["):
        try:
            return json.loads(stripped)
        except json.JSONDecodeError as exc:
            raise ValueError(f"is not a valid list: {exc.msg}") from exc
    return [item.strip() for item in stripped.split(",") if item.strip()]


def reject_boolean(value: Any) -> Any:
    if isinstance(value, bool):
        raise ValueError("must be an integer, not a boolean")
    return value
