"""Configuration source and merge tests."""

from __future__ import annotations

from pathlib import Path

import pytest
from lldap_config.configuration import ConfigurationDraft, SmtpEncryption
from lldap_config.configuration.source_layers import (
    LldapSettings,
    environment_key_path,
    expand_file_references,
    load_settings,
)
from lldap_config.diagnostics import SourceParseError


def _write_file(path: Path, contents: str) -> Path:
    path.write_text(contents, encoding="utf-8")
    return path


def _empty_config(tmp_path: Path) -> Path:
    return _write_file(tmp_path / "lldap_config.toml", "")


def test_settings_defaults_mirror_the_draft_defaults(tmp_path: Path) -> None:
    settings = load_settings(_empty_config(tmp_path), {})
    draft = ConfigurationDraft()

    assert isinstance(settings, LldapSettings)
    assert settings.ldap_port == draft.ldap_port
    assert settings.http_url == draft.http_url
    assert settings.jwt_secret.get_secret_value() == draft.jwt_secret.reveal()
    assert settings.smtp_options.port == draft.smtp_options.port
    assert settings.smtp_options.smtp_encryption is SmtpEncryption.TLS
    assert settings.ldaps_options.cert_file == draft.ldaps_options.cert_file
    assert settings.key_seed is None


def test_toml_file_values_are_read(tmp_path: Path) -> None:
    config_path = _write_file(
        tmp_path / "lldap_config.toml",
        """
ldap_port = 1389
ignored_user_attributes = ["sAMAccountName", "mail"]

[smtp_options]
port = 2525
from = "LLDAP <admin@example.com>"
""",
    )

    settings = load_settings(config_path, {})

    assert settings.ldap_port == 1389
    assert settings.ignored_user_attributes == ("sAMAccountName", "mail")
    assert settings.smtp_options.port == 2525
    assert settings.smtp_options.from_address == "LLDAP <admin@example.com>"
    assert settings.smtp_options.server == "localhost"


def test_missing_configuration_file_is_a_parse_error(tmp_path: Path) -> None:
    with pytest.raises(SourceParseError, match="Configuration file not found"):
        load_settings(tmp_path / "missing.toml", {})


def test_malformed_toml_is_a_parse_error(tmp_path: Path) -> None:
    config_path = _write_file(tmp_path / "broken.toml", "ldap_port = = 1")

    with pytest.raises(SourceParseError, match="Failed to parse configuration file"):
        load_settings(config_path, {})


def test_environment_key_path_uses_prefix_and_double_underscore_nesting() -> None:
    assert environment_key_path("LLDAP_LDAP_PORT") == ("ldap_port",)
    assert environment_key_path("LLDAP_smtp_options__port") == ("smtp_options", "port")
    assert environment_key_path("lldap_http_host") == ("http_host",)
    assert environment_key_path("HOME") is None
    assert environment_key_path("LLDAP_") is None
    assert environment_key_path("LLDAP_SMTP_OPTIONS____PORT") is None


def test_environment_overrides_file_and_keeps_table_siblings(tmp_path: Path) -> None:
    config_path = _write_file(
        tmp_path / "lldap_config.toml",
        'ldap_port = 1000\n[smtp_options]\nserver = "smtp.example.com"\nport = 465\n',
    )

    settings = load_settings(
        config_path,
        {
            "LLDAP_LDAP_PORT": "1389",
            "LLDAP_smtp_options__port": "2525",
            "lldap_http_host": "127.0.0.1",
            "HOME": "/root",
        },
    )

    assert settings.ldap_port == 1389
    assert settings.http_host == "127.0.0.1"
    assert settings.smtp_options.port == 2525
    assert settings.smtp_options.server == "smtp.example.com"


def test_environment_file_references_are_expanded(tmp_path: Path) -> None:
    secret_path = _write_file(tmp_path / "jwt", "from-a-file\n")
    password_path = _write_file(tmp_path / "smtp_password", "mail-secret")

    settings = load_settings(
        _empty_config(tmp_path),
        {
            "LLDAP_JWT_SECRET_FILE": str(secret_path),
            "LLDAP_SMTP_OPTIONS__PASSWORD_FILE": str(password_path),
        },
    )

    assert settings.jwt_secret.get_secret_value() == "from-a-file"
    assert settings.smtp_options.password.get_secret_value() == "mail-secret"


def test_toml_file_references_are_expanded_in_nested_tables(tmp_path: Path) -> None:
    password_path = _write_file(tmp_path / "smtp_password", "mail-secret\r\n")

    document = expand_file_references(
        {"ldap_port": 1, "smtp_options": {"password_file": str(password_path)}}, "test file"
    )

    assert document == {"ldap_port": 1, "smtp_options": {"password": "mail-secret"}}


def test_key_file_and_cert_file_stay_literal_paths(tmp_path: Path) -> None:
    config_path = _write_file(
        tmp_path / "lldap_config.toml",
        """
key_file = "/does/not/exist/server_key"

[ldaps_options]
cert_file = "/does/not/exist/cert.pem"
key_file = "/does/not/exist/key.pem"
""",
    )

    settings = load_settings(config_path, {"LLDAP_LDAPS_OPTIONS__KEY_FILE": "/env/key.pem"})

    assert settings.key_file == "/does/not/exist/server_key"
    assert settings.ldaps_options.cert_file == "/does/not/exist/cert.pem"
    assert settings.ldaps_options.key_file == "/env/key.pem"


def test_unreadable_file_reference_is_a_parse_error(tmp_path: Path) -> None:
    with pytest.raises(SourceParseError, match="LLDAP_JWT_SECRET_FILE"):
        load_settings(
            _empty_config(tmp_path), {"LLDAP_JWT_SECRET_FILE": str(tmp_path / "missing")}
        )


def test_value_and_file_reference_for_same_key_conflict_in_environment(tmp_path: Path) -> None:
    secret_path = _write_file(tmp_path / "jwt", "from-a-file")

    with pytest.raises(SourceParseError, match="use only one of them"):
        load_settings(
            _empty_config(tmp_path),
            {"LLDAP_JWT_SECRET": "inline", "LLDAP_JWT_SECRET_FILE": str(secret_path)},
        )


def test_value_and_file_reference_for_same_key_conflict_in_file(tmp_path: Path) -> None:
    secret_path = _write_file(tmp_path / "jwt", "from-a-file")

    with pytest.raises(SourceParseError, match="use only one of them"):
        expand_file_references(
            {"jwt_secret": "inline", "jwt_secret_file": str(secret_path)}, "test file"
        )


def test_validation_errors_name_the_environment_variable(tmp_path: Path) -> None:
    with pytest.raises(SourceParseError, match="environment variable LLDAP_SMTP_OPTIONS__PORT"):
        load_settings(_empty_config(tmp_path), {"LLDAP_SMTP_OPTIONS__PORT": "not-a-port"})


def test_validation_errors_name_the_configuration_file(tmp_path: Path) -> None:
    config_path = _write_file(tmp_path / "lldap_config.toml", "http_port = 70000\n")

    with pytest.raises(SourceParseError) as excinfo:
        load_settings(config_path, {})

    assert f"http_port (configuration file {config_path})" in str(excinfo.value)
