"""Configuration scaffold builder tests."""

from __future__ import annotations

import tomllib
from pathlib import Path

import pytest
from lldap_config.configuration import GeneralConfigOpts, RunOpts, resolve_configuration
from lldap_config.configuration.config_scaffold_builder import (
    build_placeholder_configuration,
    write_placeholder_configuration,
)


def test_build_placeholder_configuration_contains_all_supported_sections() -> None:
    scaffold = build_placeholder_configuration()

    assert "Configuration template" in scaffold
    assert "[smtp_options]" in scaffold
    assert "[ldaps_options]" in scaffold
    assert "# jwt_secret = " in scaffold
    assert "# key_seed = " in scaffold
    assert "LLDAP_SMTP_OPTIONS__PORT" in scaffold
    assert tomllib.loads(scaffold) == {"smtp_options": {}, "ldaps_options": {}}


def test_write_placeholder_configuration_writes_file(tmp_path: Path) -> None:
    output_path = tmp_path / "lldap_config.toml"

    written_path = write_placeholder_configuration(output_path)

    assert written_path == output_path.resolve()
    assert output_path.read_text(encoding="utf-8") == build_placeholder_configuration()


def test_write_placeholder_configuration_fails_when_file_exists(tmp_path: Path) -> None:
    output_path = tmp_path / "lldap_config.toml"
    output_path.write_text("existing", encoding="utf-8")

    with pytest.raises(FileExistsError):
        write_placeholder_configuration(output_path)

    assert output_path.read_text(encoding="utf-8") == "existing"


def test_placeholder_configuration_resolves_to_defaults(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.chdir(tmp_path)
    output_path = write_placeholder_configuration(tmp_path / "lldap_config.toml")

    resolution = resolve_configuration(
        RunOpts(general_config=GeneralConfigOpts(config_file=str(output_path))), environ={}
    )

    assert resolution.configuration.ldap_port == 3890
    assert len(resolution.advisories) == 3
