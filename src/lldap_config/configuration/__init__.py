"""Configuration domain exports."""

from .command_options import (
    ConfigOverrider,
    GeneralConfigOpts,
    LdapsOpts,
    RunOpts,
    SmtpOpts,
    TestEmailOpts,
    TopLevelCommandOpts,
)
from .config_scaffold_builder import (
    DEFAULT_CONFIG_FILENAME,
    build_placeholder_configuration,
    write_placeholder_configuration,
)
from .loader import ConfigurationResolution, build_draft, resolve_configuration
from .runtime_settings import (
    DEFAULT_ADMIN_PASSWORD,
    DEFAULT_JWT_SECRET,
    Configuration,
    ConfigurationDraft,
    FinalizedConfiguration,
    LdapsOptions,
    MailOptions,
    SmtpEncryption,
    finalize_configuration,
)
from .security_diagnostics import collect_security_advisories
from .source_layers import LldapSettings, load_settings

__all__ = [
    "ConfigOverrider",
    "Configuration",
    "ConfigurationDraft",
    "ConfigurationResolution",
    "DEFAULT_ADMIN_PASSWORD",
    "DEFAULT_CONFIG_FILENAME",
    "DEFAULT_JWT_SECRET",
    "FinalizedConfiguration",
    "GeneralConfigOpts",
    "LdapsOptions",
    "LdapsOpts",
    "LldapSettings",
    "MailOptions",
    "RunOpts",
    "SmtpEncryption",
    "SmtpOpts",
    "TestEmailOpts",
    "TopLevelCommandOpts",
    "build_draft",
    "build_placeholder_configuration",
    "collect_security_advisories",
    "finalize_configuration",
    "load_settings",
    "resolve_configuration",
    "write_placeholder_configuration",
]
