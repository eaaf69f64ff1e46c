"""Command-line override contracts.

The option structs are filled by the command-line parser. Every optional
field left as ``None`` keeps the value merged from defaults, file and
environment.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field, replace
from typing import Protocol, TypeVar

from lldap_config.diagnostics import SourceParseError
from lldap_config.secret_handling import SecretValue

from .runtime_settings import DEFAULT_CONFIG_FILE, ConfigurationDraft, SmtpEncryption
from .value_parsers import parse_http_url, parse_mailbox

_T = TypeVar("_T")


class ConfigOverrider(Protocol):  # pylint: disable=too-few-public-methods
    """Something that can apply its set fields onto a draft configuration."""

    def override_config(self, config: ConfigurationDraft) -> None: ...


class TopLevelCommandOpts(ConfigOverrider, Protocol):  # pylint: disable=too-few-public-methods
    """Options of a top-level command that resolves a configuration."""

    @property
    def general_config(self) -> GeneralConfigOpts: ...


@dataclass(frozen=True)
class GeneralConfigOpts:
    """Options shared by every command."""

    verbose: bool = False
    config_file: str = DEFAULT_CONFIG_FILE

    def override_config(self, config: ConfigurationDraft) -> None:
        # A flag can only switch verbosity on.
        if self.verbose:
            config.verbose = True


@dataclass(frozen=True)
class LdapsOpts:
    """Secure LDAP listener overrides."""

    ldaps_enabled: bool | None = None
    ldaps_port: int | None = None
    ldaps_cert_file: str | None = None
    ldaps_key_file: str | None = None

    def override_config(self, config: ConfigurationDraft) -> None:
        options = config.ldaps_options
        if self.ldaps_enabled is not None:
            options = replace(options, enabled=self.ldaps_enabled)
        if self.ldaps_port is not None:
            options = replace(options, port=self.ldaps_port)
        if self.ldaps_cert_file is not None:
            options = replace(options, cert_file=self.ldaps_cert_file)
        if self.ldaps_key_file is not None:
            options = replace(options, key_file=self.ldaps_key_file)
        config.ldaps_options = options


@dataclass(frozen=True)
class SmtpOpts:  # pylint: disable=too-many-instance-attributes
    """SMTP overrides."""

    smtp_from: str | None = None
    smtp_reply_to: str | None = None
    smtp_server: str | None = None
    smtp_port: int | None = None
    smtp_user: str | None = None
    smtp_password: str | None = None
    smtp_encryption: SmtpEncryption | None = None
    smtp_tls_required: bool | None = None
    smtp_enable_password_reset: bool | None = None

    def override_config(self, config: ConfigurationDraft) -> None:
        options = config.smtp_options
        if self.smtp_from is not None:
            options = replace(
                options, from_address=_checked(parse_mailbox, self.smtp_from, "--smtp-from")
            )
        if self.smtp_reply_to is not None:
            options = replace(
                options,
                reply_to=_checked(parse_mailbox, self.smtp_reply_to, "--smtp-reply-to"),
            )
        if self.smtp_server is not None:
            options = replace(options, server=self.smtp_server)
        if self.smtp_port is not None:
            options = replace(options, port=self.smtp_port)
        if self.smtp_user is not None:
            options = replace(options, user=self.smtp_user)
        if self.smtp_password is not None:
            options = replace(options, password=SecretValue(self.smtp_password))
        if self.smtp_encryption is not None:
            options = replace(options, smtp_encryption=self.smtp_encryption)
        if self.smtp_tls_required is not None:
            options = replace(options, tls_required=self.smtp_tls_required)
        if self.smtp_enable_password_reset is not None:
            options = replace(options, enable_password_reset=self.smtp_enable_password_reset)
        config.smtp_options = options


@dataclass(frozen=True)
class RunOpts:  # pylint: disable=too-many-instance-attributes
    """Options of the command that runs the directory server."""

    general_config: GeneralConfigOpts = field(default_factory=GeneralConfigOpts)
    server_key_file: str | None = None
    server_key_seed: str | None = None
    ldap_port: int | None = None
    http_port: int | None = None
    http_url: str | None = None
    database_url: str | None = None
    smtp_opts: SmtpOpts = field(default_factory=SmtpOpts)
    ldaps_opts: LdapsOpts = field(default_factory=LdapsOpts)

    def override_config(self, config: ConfigurationDraft) -> None:
        self.general_config.override_config(config)
        if self.server_key_file is not None:
            config.key_file = self.server_key_file
        if self.server_key_seed is not None:
            config.key_seed = SecretValue(self.server_key_seed)
        if self.ldap_port is not None:
            config.ldap_port = self.ldap_port
        if self.http_port is not None:
            config.http_port = self.http_port
        if self.http_url is not None:
            config.http_url = _checked(parse_http_url, self.http_url, "--http-url")
        if self.database_url is not None:
            config.database_url = self.database_url
        self.smtp_opts.override_config(config)
        self.ldaps_opts.override_config(config)


@dataclass(frozen=True)
class TestEmailOpts:
    """Options of the command that checks the SMTP settings."""

    __test__ = False  # not a pytest test class

    general_config: GeneralConfigOpts = field(default_factory=GeneralConfigOpts)
    smtp_opts: SmtpOpts = field(default_factory=SmtpOpts)

    def override_config(self, config: ConfigurationDraft) -> None:
        self.general_config.override_config(config)
        self.smtp_opts.override_config(config)


def _checked(parse: Callable[[str], _T], value: str, option: str) -> _T:
    try:
        return parse(value)
    except ValueError as exc:
        raise SourceParseError(f"{option} (command-line option): {exc}") from exc
