"""Configuration resolver: defaults, file, environment, then command-line overrides."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass

from lldap_config.diagnostics import Advisory
from lldap_config.key_material import KeyProvenance
from lldap_config.secret_handling import SecretValue

from .command_options import TopLevelCommandOpts
from .runtime_settings import (
    Configuration,
    ConfigurationDraft,
    LdapsOptions,
    MailOptions,
    finalize_configuration,
)
from .security_diagnostics import collect_security_advisories
from .source_layers import LdapsSettings, LldapSettings, SmtpSettings, load_settings

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConfigurationResolution:
    """Resolved configuration plus the advisories the caller should display."""

    configuration: Configuration
    advisories: tuple[Advisory, ...]
    key_provenance: KeyProvenance


def resolve_configuration(
    overrides: TopLevelCommandOpts, *, environ: Mapping[str, str] | None = None
) -> ConfigurationResolution:
    """Build the configuration from every source and resolve the server key material.

    Args:
      overrides: Command options naming the configuration file and holding
        the command-line overrides.
      environ: Environment to read ``LLDAP_`` variables from; defaults to
        the process environment.

    Raises:
      SourceParseError: If the file, an environment value or a command-line
        override cannot be parsed.
      KeyMaterialError: If the server key material cannot be resolved.
    """
    config_file = overrides.general_config.config_file
    advisories = [Advisory.info(f"Loading configuration from {config_file}")]

    settings = load_settings(config_file, os.environ if environ is None else environ)
    draft = build_draft(settings)
    overrides.override_config(draft)

    finalized = finalize_configuration(draft)
    configuration = finalized.configuration
    _LOGGER.debug("Server key material obtained from %s", finalized.key_material.provenance.value)
    advisories.extend(finalized.key_material.advisories)
    advisories.extend(collect_security_advisories(configuration))
    return ConfigurationResolution(
        configuration=configuration,
        advisories=tuple(advisories),
        key_provenance=finalized.key_material.provenance,
    )


def build_draft(settings: LldapSettings) -> ConfigurationDraft:
    """Turn validated settings into a mutable draft configuration."""
    return ConfigurationDraft(
        ldap_host=settings.ldap_host,
        ldap_port=settings.ldap_port,
        http_host=settings.http_host,
        http_port=settings.http_port,
        jwt_secret=SecretValue.from_secret(settings.jwt_secret),
        ldap_base_dn=settings.ldap_base_dn,
        ldap_user_dn=settings.ldap_user_dn.lower(),
        ldap_user_email=settings.ldap_user_email,
        ldap_user_pass=SecretValue.from_secret(settings.ldap_user_pass),
        database_url=settings.database_url,
        ignored_user_attributes=settings.ignored_user_attributes,
        ignored_group_attributes=settings.ignored_group_attributes,
        verbose=settings.verbose,
        key_file=settings.key_file,
        key_seed=None if settings.key_seed is None else SecretValue.from_secret(settings.key_seed),
        smtp_options=_mail_options(settings.smtp_options),
        ldaps_options=_ldaps_options(settings.ldaps_options),
        http_url=settings.http_url,
    )


def _mail_options(section: SmtpSettings) -> MailOptions:
    return MailOptions(
        enable_password_reset=section.enable_password_reset,
        from_address=section.from_address,
        reply_to=section.reply_to,
        server=section.server,
        port=section.port,
        user=section.user,
        password=SecretValue.from_secret(section.password),
        smtp_encryption=section.smtp_encryption,
        tls_required=section.tls_required,
    )


def _ldaps_options(section: LdapsSettings) -> LdapsOptions:
    return LdapsOptions(
        enabled=section.enabled,
        port=section.port,
        cert_file=section.cert_file,
        key_file=section.key_file,
    )
