"""CLI smoke tests."""

from click.testing import CliRunner
from lldap_config.cli import cli


def test_cli_displays_help() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["--help"])

    assert result.exit_code == 0
    assert "run" in result.output
    assert "show-config" in result.output
    assert "check-smtp" in result.output
    assert "generate-config" in result.output


def test_run_help_lists_override_groups() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["run", "--help"])

    assert result.exit_code == 0
    assert "--server-key-seed" in result.output
    assert "--smtp-port" in result.output
    assert "--ldaps-enabled" in result.output
    assert "--smtp-tls-required" not in result.output
