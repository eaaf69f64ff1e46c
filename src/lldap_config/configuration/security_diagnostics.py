"""Advisory checks over a resolved configuration."""

from __future__ import annotations

from lldap_config.diagnostics import Advisory
from lldap_config.secret_handling import SecretValue

from .runtime_settings import DEFAULT_ADMIN_PASSWORD, DEFAULT_JWT_SECRET, Configuration


def collect_security_advisories(configuration: Configuration) -> tuple[Advisory, ...]:
    """Return warnings about insecure defaults and deprecated settings."""
    advisories: list[Advisory] = []
    if configuration.jwt_secret == SecretValue(DEFAULT_JWT_SECRET):
        advisories.append(
            Advisory.warning(
                "Default JWT secret used! This is highly unsafe and can allow attackers "
                "to log in as admin."
            )
        )
    if configuration.ldap_user_pass == SecretValue(DEFAULT_ADMIN_PASSWORD):
        advisories.append(Advisory.warning("Unsecure default admin password is used."))
    # Any explicit value counts, true or false.
    if configuration.smtp_options.tls_required is not None:
        advisories.append(
            Advisory.deprecated(
                "smtp_options.tls_required field is deprecated, it never did anything. "
                "You can replace it with smtp_options.smtp_encryption."
            )
        )
    return tuple(advisories)
