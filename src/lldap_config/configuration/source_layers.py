"""Configuration sources and the fold that layers them.

Built-in defaults, the TOML file and ``LLDAP_`` environment variables are
declared as pydantic-settings sources. Sources are folded in increasing
precedence and nested tables are merged key by key, so a source that sets
``smtp_options.port`` keeps the ``smtp_options`` keys it does not set.
"""

from __future__ import annotations

import logging
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Annotated, Any

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    SecretStr,
    ValidationError,
)
from pydantic_settings import (
    BaseSettings,
    EnvSettingsSource,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    SettingsError,
    TomlConfigSettingsSource,
)

from lldap_config.diagnostics import SourceParseError

from .runtime_settings import ConfigurationDraft, SmtpEncryption
from .value_parsers import (
    parse_http_url,
    parse_mailbox,
    parse_smtp_encryption,
    parse_string_list,
    reject_boolean,
)

ENV_PREFIX = "LLDAP_"
ENV_NESTED_DELIMITER = "__"
FILE_REFERENCE_SUFFIX = "_file"
# Keys that hold real file paths rather than pointers to a value stored in a file.
FILE_REFERENCE_EXEMPT_KEYS = frozenset({"key_file", "cert_file"})
MAX_PORT = 65535

KeyPath = tuple[str, ...]

Port = Annotated[int, BeforeValidator(reject_boolean), Field(ge=0, le=MAX_PORT)]
StringList = Annotated[tuple[str, ...], BeforeValidator(parse_string_list)]
Mailbox = Annotated[str | None, AfterValidator(parse_mailbox)]
HttpUrl = Annotated[str, AfterValidator(parse_http_url)]
Encryption = Annotated[SmtpEncryption, BeforeValidator(parse_smtp_encryption)]

_DEFAULTS = ConfigurationDraft()
_LOGGER = logging.getLogger(__name__)


class SmtpSettings(BaseModel):
    """``[smtp_options]`` table."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    enable_password_reset: bool = _DEFAULTS.smtp_options.enable_password_reset
    from_address: Mailbox = Field(default=_DEFAULTS.smtp_options.from_address, alias="from")
    reply_to: Mailbox = _DEFAULTS.smtp_options.reply_to
    server: str = _DEFAULTS.smtp_options.server
    port: Port = _DEFAULTS.smtp_options.port
    user: str = _DEFAULTS.smtp_options.user
    password: SecretStr = _DEFAULTS.smtp_options.password
    smtp_encryption: Encryption = _DEFAULTS.smtp_options.smtp_encryption
    tls_required: bool | None = _DEFAULTS.smtp_options.tls_required


class LdapsSettings(BaseModel):
    """``[ldaps_options]`` table."""

    model_config = ConfigDict(extra="ignore")

    enabled: bool = _DEFAULTS.ldaps_options.enabled
    port: Port = _DEFAULTS.ldaps_options.port
    cert_file: str = _DEFAULTS.ldaps_options.cert_file
    key_file: str = _DEFAULTS.ldaps_options.key_file


class LldapSettings(BaseSettings):
    """Every setting readable from the file and the environment, at its default."""

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_nested_delimiter=ENV_NESTED_DELIMITER,
        case_sensitive=False,
        extra="ignore",
        enable_decoding=False,
    )

    ldap_host: str = _DEFAULTS.ldap_host
    ldap_port: Port = _DEFAULTS.ldap_port
    http_host: str = _DEFAULTS.http_host
    http_port: Port = _DEFAULTS.http_port
    jwt_secret: SecretStr = _DEFAULTS.jwt_secret
    ldap_base_dn: str = _DEFAULTS.ldap_base_dn
    ldap_user_dn: str = _DEFAULTS.ldap_user_dn
    ldap_user_email: str = _DEFAULTS.ldap_user_email
    ldap_user_pass: SecretStr = _DEFAULTS.ldap_user_pass
    database_url: str = _DEFAULTS.database_url
    ignored_user_attributes: StringList = _DEFAULTS.ignored_user_attributes
    ignored_group_attributes: StringList = _DEFAULTS.ignored_group_attributes
    verbose: bool = _DEFAULTS.verbose
    key_file: str = _DEFAULTS.key_file
    key_seed: SecretStr | None = _DEFAULTS.key_seed
    smtp_options: SmtpSettings = Field(default_factory=SmtpSettings)
    ldaps_options: LdapsSettings = Field(default_factory=LdapsSettings)
    http_url: HttpUrl = _DEFAULTS.http_url


class ReferencingTomlSource(TomlConfigSettingsSource):
    """TOML file source that expands ``<name>_file`` references."""

    def _read_file(self, file_path: Path) -> dict[str, Any]:
        document = super()._read_file(file_path)
        return expand_file_references(document, f"configuration file {file_path}")


class ReferencingEnvSource(EnvSettingsSource):
    """``LLDAP_`` environment source read from an explicit mapping.

    ``LLDAP_<NAME>_FILE`` variables are replaced by the content of the file
    they point to, stored under ``<name>``.
    """

    def __init__(self, settings_cls: type[BaseSettings], environ: Mapping[str, str]) -> None:
        self._environ = dict(environ)
        super().__init__(settings_cls)

    def _load_env_vars(self) -> Mapping[str, str | None]:
        return {name.lower(): value for name, value in self._environ.items()}

    def __call__(self) -> dict[str, Any]:
        data = super().__call__()
        for key_path, (name, content) in _environment_file_references(self._environ).items():
            _assign(data, key_path, content)
            _LOGGER.debug("Read %s from the file named by %s", dotted(key_path), name)
        return data


def dotted(path: tuple[Any, ...]) -> str:
    return ".".join(str(part) for part in path)


def environment_key_path(name: str, *, prefix: str = ENV_PREFIX) -> KeyPath | None:
    """Key path an environment variable sets, or None when it is not ours.

    The prefix is matched case-insensitively; the rest of the name is
    lowercased and split on a double underscore, so
    ``LLDAP_SMTP_OPTIONS__PORT`` sets ``smtp_options.port``.
    """
    if not name.upper().startswith(prefix.upper()):
        return None
    key_path = tuple(name[len(prefix) :].lower().split(ENV_NESTED_DELIMITER))
    if not all(key_path):
        return None
    return key_path


def load_settings(config_file: Path | str, environ: Mapping[str, str]) -> LldapSettings:
    """Fold defaults, `config_file` and `environ` into validated settings.

    Raises:
      SourceParseError: If the file is missing or malformed, a referenced file
        cannot be read, or a value does not have the expected type.
    """
    path = Path(config_file)
    if not path.exists():
        raise SourceParseError(f"Configuration file not found: {path}")

    class _BoundSettings(LldapSettings):
        @classmethod
        def settings_customise_sources(
            cls,
            settings_cls: type[BaseSettings],
            init_settings: PydanticBaseSettingsSource,
            env_settings: PydanticBaseSettingsSource,
            dotenv_settings: PydanticBaseSettingsSource,
            file_secret_settings: PydanticBaseSettingsSource,
        ) -> tuple[PydanticBaseSettingsSource, ...]:
            # Highest precedence first.
            return (
                init_settings,
                ReferencingEnvSource(settings_cls, environ),
                ReferencingTomlSource(settings_cls, toml_file=path),
            )

    try:
        return _BoundSettings()
    except OSError as exc:
        raise SourceParseError(f"Could not read configuration file {path}: {exc}") from exc
    except (tomllib.TOMLDecodeError, UnicodeDecodeError) as exc:
        raise SourceParseError(f"Failed to parse configuration file {path}: {exc}") from exc
    except ValidationError as exc:
        raise SourceParseError(_describe_validation_error(exc, path, environ)) from exc
    except SettingsError as exc:
        raise SourceParseError(f"Invalid environment configuration: {exc}") from exc


def expand_file_references(document: Mapping[str, Any], origin: str) -> dict[str, Any]:
    """Replace ``<name>_file`` keys of every table by ``<name>`` holding the file's content."""
    expanded: dict[str, Any] = {}
    references: list[tuple[str, str, str]] = []
    for key, value in document.items():
        if isinstance(value, Mapping):
            expanded[key] = expand_file_references(value, origin)
        elif _is_file_reference(key, value):
            references.append((key, key[: -len(FILE_REFERENCE_SUFFIX)], value))
        else:
            expanded[key] = value

    for key, target, reference in references:
        if target in expanded:
            raise SourceParseError(
                f"Both {target} and {key} are set in {origin}; use only one of them."
            )
        expanded[target] = _read_reference(reference, f"{key} ({origin})")
    return expanded


def _environment_file_references(environ: Mapping[str, str]) -> dict[KeyPath, tuple[str, str]]:
    set_paths = {
        key_path: name
        for name in environ
        if (key_path := environment_key_path(name)) is not None
    }
    references: dict[KeyPath, tuple[str, str]] = {}
    for key_path, name in sorted(set_paths.items()):
        if not _is_file_reference(key_path[-1], environ[name]):
            continue
        target = (*key_path[:-1], key_path[-1][: -len(FILE_REFERENCE_SUFFIX)])
        if target in set_paths:
            raise SourceParseError(
                f"Both {set_paths[target]} and {name} are set in the environment; "
                "use only one of them."
            )
        content = _read_reference(environ[name], f"environment variable {name}")
        references[target] = (name, content)
    return references


def _read_reference(reference: str, label: str) -> str:
    reference_path = Path(reference)
    try:
        content = reference_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise SourceParseError(
            f"Could not read file {reference_path} named by {label}: {exc}"
        ) from exc
    return content.rstrip("\r\n")


def _is_file_reference(key: str, value: Any) -> bool:
    return (
        isinstance(value, str)
        and key.endswith(FILE_REFERENCE_SUFFIX)
        and len(key) > len(FILE_REFERENCE_SUFFIX)
        and key not in FILE_REFERENCE_EXEMPT_KEYS
    )


def _assign(data: dict[str, Any], key_path: KeyPath, value: Any) -> None:
    table = data
    for key in key_path[:-1]:
        nested = table.setdefault(key, {})
        if not isinstance(nested, dict):
            raise SourceParseError(f"{dotted(key_path)} is invalid: {key} is not a table.")
        table = nested
    table[key_path[-1]] = value


def _describe_validation_error(
    exc: ValidationError, config_file: Path, environ: Mapping[str, str]
) -> str:
    # Input values are never echoed back; some of them are secrets.
    problems = []
    for error in exc.errors(include_url=False):
        location = tuple(error["loc"])
        if error["type"] in ("model_type", "model_attributes_type", "dict_type"):
            message = "must be a table, not a single value"
        else:
            message = error["msg"]
        problems.append(
            f"{dotted(location)} ({_origin_of(location, config_file, environ)}): {message}"
        )
    return "Invalid configuration value: " + "; ".join(problems)


def _origin_of(location: tuple[Any, ...], config_file: Path, environ: Mapping[str, str]) -> str:
    keys = tuple(str(part) for part in location)
    for name in sorted(environ):
        key_path = environment_key_path(name)
        if key_path is None:
            continue
        for depth in range(len(keys), 0, -1):
            prefix = keys[:depth]
            if key_path in (prefix, (*prefix[:-1], prefix[-1] + FILE_REFERENCE_SUFFIX)):
                return f"environment variable {name}"
    return f"configuration file {config_file}"
