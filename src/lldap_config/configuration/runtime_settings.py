"""Configuration domain entities."""

from __future__ import annotations

from dataclasses import dataclass, field, fields, is_dataclass
from enum import Enum
from typing import Any

from lldap_config.key_material import (
    DEFAULT_KEY_FILE,
    KeyMaterialResolution,
    KeyPair,
    ServerSetup,
    load_or_create_server_setup,
)
from lldap_config.secret_handling import REDACTED_MARKER, SecretValue

DEFAULT_JWT_SECRET = "secretjwtsecret"
DEFAULT_ADMIN_PASSWORD = "password"
DEFAULT_CONFIG_FILE = "lldap_config.toml"


class SmtpEncryption(str, Enum):
    """Transport security used to reach the SMTP server."""

    NONE = "NONE"
    STARTTLS = "STARTTLS"
    TLS = "TLS"


@dataclass(frozen=True)
class MailOptions:  # pylint: disable=too-many-instance-attributes
    """SMTP delivery settings."""

    enable_password_reset: bool = False
    from_address: str | None = field(default=None, metadata={"key": "from"})
    reply_to: str | None = None
    server: str = "localhost"
    port: int = 587
    user: str = ""
    password: SecretValue = field(default_factory=lambda: SecretValue(""))
    smtp_encryption: SmtpEncryption = SmtpEncryption.TLS
    # Deprecated, never had any effect; superseded by smtp_encryption.
    tls_required: bool | None = None


@dataclass(frozen=True)
class LdapsOptions:
    """Secure LDAP listener settings."""

    enabled: bool = False
    port: int = 6360
    cert_file: str = "cert.pem"
    key_file: str = "key.pem"


@dataclass
class ConfigurationDraft:  # pylint: disable=too-many-instance-attributes
    """Merged settings before the server key material is resolved."""

    ldap_host: str = "0.0.0.0"
    ldap_port: int = 3890
    http_host: str = "0.0.0.0"
    http_port: int = 17170
    jwt_secret: SecretValue = field(default_factory=lambda: SecretValue(DEFAULT_JWT_SECRET))
    ldap_base_dn: str = "dc=example,dc=com"
    ldap_user_dn: str = "admin"
    ldap_user_email: str = ""
    ldap_user_pass: SecretValue = field(
        default_factory=lambda: SecretValue(DEFAULT_ADMIN_PASSWORD)
    )
    database_url: str = "sqlite://users.db?mode=rwc"
    ignored_user_attributes: tuple[str, ...] = ()
    ignored_group_attributes: tuple[str, ...] = ()
    verbose: bool = False
    key_file: str = DEFAULT_KEY_FILE
    key_seed: SecretValue | None = None
    smtp_options: MailOptions = field(default_factory=MailOptions)
    ldaps_options: LdapsOptions = field(default_factory=LdapsOptions)
    http_url: str = "http://localhost"


@dataclass(frozen=True)
class Configuration:  # pylint: disable=too-many-instance-attributes
    """Fully resolved, immutable configuration handed to the servers.

    Only `finalize_configuration` should build one; the server setup is
    required and checked on construction.
    """

    ldap_host: str
    ldap_port: int
    http_host: str
    http_port: int
    jwt_secret: SecretValue
    ldap_base_dn: str
    ldap_user_dn: str
    ldap_user_email: str
    ldap_user_pass: SecretValue
    database_url: str
    ignored_user_attributes: tuple[str, ...]
    ignored_group_attributes: tuple[str, ...]
    verbose: bool
    key_file: str
    key_seed: SecretValue | None
    smtp_options: MailOptions
    ldaps_options: LdapsOptions
    http_url: str
    server_setup: ServerSetup = field(repr=False, compare=False, metadata={"skip": True})

    def __post_init__(self) -> None:
        if not isinstance(self.server_setup, ServerSetup):
            raise TypeError("Configuration requires a resolved ServerSetup.")

    @property
    def server_keypair(self) -> KeyPair:
        return self.server_setup.keypair

    def to_document(self) -> dict[str, Any]:
        """Serializable view with every secret redacted and no key material."""
        return _document(self)


@dataclass(frozen=True)
class FinalizedConfiguration:
    """A configuration together with how its key material was obtained."""

    configuration: Configuration
    key_material: KeyMaterialResolution


def finalize_configuration(draft: ConfigurationDraft) -> FinalizedConfiguration:
    """Resolve the server key material and freeze the draft.

    Raises:
      KeyMaterialError: If the key material cannot be resolved.
    """
    key_material = load_or_create_server_setup(draft.key_file, draft.key_seed)
    settings = {item.name: getattr(draft, item.name) for item in fields(draft)}
    configuration = Configuration(**settings, server_setup=key_material.server_setup)
    return FinalizedConfiguration(configuration=configuration, key_material=key_material)


def _document(source: Any) -> dict[str, Any]:
    document: dict[str, Any] = {}
    for item in fields(source):
        if item.metadata.get("skip"):
            continue
        key = item.metadata.get("key", item.name)
        document[key] = _document_value(getattr(source, item.name))
    return document


def _document_value(value: Any) -> Any:
    if isinstance(value, SecretValue):
        return REDACTED_MARKER
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, tuple):
        return list(value)
    if is_dataclass(value) and not isinstance(value, type):
        return _document(value)
    return value
