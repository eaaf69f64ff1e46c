"""Configuration scaffold generation helpers."""

from __future__ import annotations

from pathlib import Path

from .runtime_settings import DEFAULT_CONFIG_FILE

DEFAULT_CONFIG_FILENAME = DEFAULT_CONFIG_FILE

_CONFIG_SCAFFOLD_TEMPLATE = """# Configuration template for the LLDAP directory server.
# Every key is optional; the value shown is the built-in default.
# Any key can also be set through the environment, for example
# LLDAP_LDAP_PORT=3890 or LLDAP_SMTP_OPTIONS__PORT=2525.
# A key named <name>_file (except key_file and cert_file) reads <name>
# from that file, for example jwt_secret_file = "/run/secrets/jwt".

# ldap_host = "0.0.0.0"
# ldap_port = 3890
# http_host = "0.0.0.0"
# http_port = 17170
# http_url = "http://localhost"

# Set this: the default lets anyone forge admin logins.
# jwt_secret = "secretjwtsecret"

# ldap_base_dn = "dc=example,dc=com"
# ldap_user_dn = "admin"
# ldap_user_email = "admin@example.com"
# Set this: the default admin password is public.
# ldap_user_pass = "password"

# database_url = "sqlite://users.db?mode=rwc"
# ignored_user_attributes = []
# ignored_group_attributes = []
# verbose = false

# Server identity. A non-empty key_seed takes precedence over key_file.
# key_file = "server_key"
# key_seed = "<OPTIONAL>"

[smtp_options]
# enable_password_reset = false
# from = "LLDAP Admin <admin@example.com>"
# reply_to = "<OPTIONAL>"
# server = "localhost"
# port = 587
# user = ""
# password = ""
# One of NONE, STARTTLS, TLS.
# smtp_encryption = "TLS"

[ldaps_options]
# enabled = false
# port = 6360
# cert_file = "cert.pem"
# key_file = "key.pem"
"""


def build_placeholder_configuration() -> str:
    """Build a TOML configuration template with placeholders and inline guidance."""
    return _CONFIG_SCAFFOLD_TEMPLATE


def write_placeholder_configuration(output_path: Path | str) -> Path:
    """Write the placeholder configuration template to the requested output path.

    Args:
      output_path: Destination file path for the scaffold.

    Returns:
      The resolved destination path.

    Raises:
      FileExistsError: If the destination file already exists.
      OSError: If writing the scaffold fails.
    """
    destination = Path(output_path)
    with destination.open("x", encoding="utf-8") as handle:
        handle.write(build_placeholder_configuration())
    return destination.resolve()
