"""Command line interface entry point."""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Callable, Iterable
from typing import Any

import click

from lldap_config.configuration import (
    DEFAULT_CONFIG_FILENAME,
    ConfigurationResolution,
    GeneralConfigOpts,
    LdapsOpts,
    RunOpts,
    SmtpEncryption,
    SmtpOpts,
    TestEmailOpts,
    TopLevelCommandOpts,
    resolve_configuration,
    write_placeholder_configuration,
)
from lldap_config.diagnostics import Advisory, ConfigurationError

_PORT = click.IntRange(0, 65535)

Decorator = Callable[[Callable[..., Any]], Callable[..., Any]]


class CliError(Exception):
    """Custom CLI error."""


def _apply(options: Iterable[Decorator]) -> Decorator:
    def decorate(func: Callable[..., Any]) -> Callable[..., Any]:
        for option in reversed(tuple(options)):
            func = option(func)
        return func

    return decorate


_GENERAL_OPTIONS: tuple[Decorator, ...] = (
    click.option("-v", "--verbose", is_flag=True, default=False, help="Enable debug output."),
    click.option(
        "-c",
        "--config-file",
        default=DEFAULT_CONFIG_FILENAME,
        show_default=True,
        type=click.Path(path_type=str),
        help="Path to the TOML configuration file.",
    ),
)

_SMTP_OPTIONS: tuple[Decorator, ...] = (
    click.option("--smtp-from", help="Sender mailbox, e.g. 'LLDAP <admin@example.com>'."),
    click.option("--smtp-reply-to", help="Reply-To mailbox."),
    click.option("--smtp-server", help="SMTP server host."),
    click.option("--smtp-port", type=_PORT, help="SMTP server port."),
    click.option("--smtp-user", help="SMTP user name."),
    click.option("--smtp-password", help="SMTP password."),
    click.option(
        "--smtp-encryption",
        type=click.Choice([member.value for member in SmtpEncryption], case_sensitive=False),
        help="SMTP transport security.",
    ),
    click.option(
        "--smtp-tls-required",
        type=click.BOOL,
        hidden=True,
        help="Deprecated, use --smtp-encryption.",
    ),
    click.option(
        "--smtp-enable-password-reset",
        type=click.BOOL,
        help="Whether to send password reset emails.",
    ),
)

_LDAPS_OPTIONS: tuple[Decorator, ...] = (
    click.option("--ldaps-enabled", type=click.BOOL, help="Enable the LDAPS listener."),
    click.option("--ldaps-port", type=_PORT, help="LDAPS listener port."),
    click.option("--ldaps-cert-file", help="LDAPS certificate file."),
    click.option("--ldaps-key-file", help="LDAPS private key file."),
)

_RUN_OPTIONS: tuple[Decorator, ...] = (
    click.option("--server-key-file", help="Path to the server key file."),
    click.option("--server-key-seed", help="Seed to derive the server key from."),
    click.option("--ldap-port", type=_PORT, help="LDAP listener port."),
    click.option("--http-port", type=_PORT, help="HTTP listener port."),
    click.option("--http-url", help="Public URL of the HTTP interface."),
    click.option("--database-url", help="Storage connection string."),
)


def _general_opts(params: dict[str, Any]) -> GeneralConfigOpts:
    return GeneralConfigOpts(verbose=params["verbose"], config_file=params["config_file"])


def _smtp_opts(params: dict[str, Any]) -> SmtpOpts:
    encryption = params["smtp_encryption"]
    return SmtpOpts(
        smtp_from=params["smtp_from"],
        smtp_reply_to=params["smtp_reply_to"],
        smtp_server=params["smtp_server"],
        smtp_port=params["smtp_port"],
        smtp_user=params["smtp_user"],
        smtp_password=params["smtp_password"],
        smtp_encryption=None if encryption is None else SmtpEncryption[encryption.upper()],
        smtp_tls_required=params["smtp_tls_required"],
        smtp_enable_password_reset=params["smtp_enable_password_reset"],
    )


def _run_opts(params: dict[str, Any]) -> RunOpts:
    return RunOpts(
        general_config=_general_opts(params),
        server_key_file=params["server_key_file"],
        server_key_seed=params["server_key_seed"],
        ldap_port=params["ldap_port"],
        http_port=params["http_port"],
        http_url=params["http_url"],
        database_url=params["database_url"],
        smtp_opts=_smtp_opts(params),
        ldaps_opts=LdapsOpts(
            ldaps_enabled=params["ldaps_enabled"],
            ldaps_port=params["ldaps_port"],
            ldaps_cert_file=params["ldaps_cert_file"],
            ldaps_key_file=params["ldaps_key_file"],
        ),
    )


def _resolve(opts: TopLevelCommandOpts) -> ConfigurationResolution:
    _configure_logging(opts.general_config.verbose)
    try:
        resolution = resolve_configuration(opts)
    except ConfigurationError as exc:
        raise CliError(str(exc)) from exc
    _echo_advisories(resolution.advisories)
    if resolution.configuration.verbose:
        click.echo(f"Configuration: {resolution.configuration!r}")
    return resolution


def _echo_advisories(advisories: Iterable[Advisory]) -> None:
    for advisory in advisories:
        click.echo(advisory.render(), err=advisory.error_stream)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
    )


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="lldap-config")
def cli() -> None:
    """LLDAP configuration and server identity utility."""


@cli.command(name="run")
@_apply(_GENERAL_OPTIONS + _RUN_OPTIONS + _SMTP_OPTIONS + _LDAPS_OPTIONS)
def run(**params: Any) -> None:
    """Resolve the configuration and server identity the directory server starts with."""
    configuration = _resolve(_run_opts(params)).configuration
    click.echo(f"LDAP listener: {configuration.ldap_host}:{configuration.ldap_port}")
    click.echo(
        f"HTTP listener: {configuration.http_host}:{configuration.http_port} "
        f"({configuration.http_url})"
    )
    if configuration.ldaps_options.enabled:
        click.echo(f"LDAPS listener: {configuration.ldap_host}:{configuration.ldaps_options.port}")
    click.echo(f"Server public key: {configuration.server_keypair.public_key.hex()}")


@cli.command(name="show-config")
@_apply(_GENERAL_OPTIONS + _RUN_OPTIONS + _SMTP_OPTIONS + _LDAPS_OPTIONS)
def show_config(**params: Any) -> None:
    """Print the resolved configuration as JSON, secrets redacted."""
    configuration = _resolve(_run_opts(params)).configuration
    click.echo(json.dumps(configuration.to_document(), indent=2, sort_keys=True))


@cli.command(name="check-smtp")
@_apply(_GENERAL_OPTIONS + _SMTP_OPTIONS)
def check_smtp(**params: Any) -> None:
    """Resolve the SMTP settings used to send emails."""
    opts = TestEmailOpts(general_config=_general_opts(params), smtp_opts=_smtp_opts(params))
    smtp = _resolve(opts).configuration.smtp_options
    click.echo(f"SMTP server: {smtp.server}:{smtp.port} ({smtp.smtp_encryption.value})")
    click.echo(f"Sender: {smtp.from_address or '<unset>'}")
    click.echo(f"Password reset emails: {'enabled' if smtp.enable_password_reset else 'disabled'}")


@cli.command(name="generate-config")
@click.option(
    "--output",
    "output_path",
    required=False,
    default=DEFAULT_CONFIG_FILENAME,
    show_default=True,
    type=click.Path(path_type=str),
    help="Path to the TOML configuration template to write",
)
def generate_config(output_path: str) -> None:
    """Generate a commented TOML configuration template."""
    try:
        resolved_output = write_placeholder_configuration(output_path)
    except OSError as exc:
        raise CliError(str(exc)) from exc
    click.echo(str(resolved_output))


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for console_scripts wiring."""
    argv = argv if argv is not None else sys.argv[1:]
    try:
        cli.main(args=list(argv), standalone_mode=False)
    except CliError as exc:
        click.echo(str(exc), err=True)
        return 1
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code
    except click.Abort:
        click.echo("Aborted.", err=True)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
