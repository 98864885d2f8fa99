"""Application settings kept in one TOML file with a table per provider."""

from __future__ import annotations

import os
import tomllib
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

import tomli_w

ENV_PREFIX = "AWS_SSO_CONFIG"
CONFIG_FILE_NAME = ".awsssoconfig"

DEFAULT_START_URL = "https://your-sso-portal.awsapps.com/start"
DEFAULT_REGION = "us-east-1"
DEFAULT_ROLE = "AdministratorAccess"


class ConfigError(Exception):
    """Raised when settings cannot be read, written or validated."""


def _home() -> Path:
    try:
        return Path.home()
    except RuntimeError:
        return Path("")


def _default_aws_config_file() -> str:
    return str(_home() / ".aws" / "config")


def _default_settings_file() -> str:
    return str(_home() / CONFIG_FILE_NAME)


@dataclass
class SSOSettings:
    """Settings for the SSO portal."""

    start_url: str = ""
    region: str = ""
    role: str = ""

    def validate(self) -> None:
        if not self.start_url:
            raise ConfigError("SSO start URL is required")
        if not self.region:
            raise ConfigError("SSO region is required")

    def set_defaults(self) -> None:
        if not self.start_url:
            self.start_url = DEFAULT_START_URL
        if not self.region:
            self.region = DEFAULT_REGION
        if not self.role:
            self.role = DEFAULT_ROLE

    def section_name(self) -> str:
        return "sso"

    def default_content(self) -> str:
        return (
            "# AWS SSO Configuration\n"
            "[sso]\n"
            f'start_url = "{DEFAULT_START_URL}"\n'
            f'region = "{DEFAULT_REGION}"\n'
            f'role = "{DEFAULT_ROLE}"\n'
        )


@dataclass
class AWSSettings:
    """Settings for the generated AWS profiles."""

    default_region: str = ""
    config_file: str = ""

    def validate(self) -> None:
        if not self.default_region:
            raise ConfigError("AWS default region is required")
        if not self.config_file:
            raise ConfigError("AWS config file path is required")

    def set_defaults(self) -> None:
        if not self.default_region:
            self.default_region = DEFAULT_REGION
        if not self.config_file:
            self.config_file = _default_aws_config_file()

    def section_name(self) -> str:
        return "aws"

    def default_content(self) -> str:
        return (
            "# AWS Configuration\n"
            "[aws]\n"
            f'default_region = "{DEFAULT_REGION}"\n'
            'config_file = "~/.aws/config"\n'
        )


@dataclass
class AppConfig:
    """The complete application configuration."""

    sso: SSOSettings = field(default_factory=SSOSettings)
    aws: AWSSettings = field(default_factory=AWSSettings)

    def validate(self) -> None:
        self.sso.validate()
        self.aws.validate()

    def set_defaults(self) -> None:
        self.sso.set_defaults()
        self.aws.set_defaults()


def default_sso() -> SSOSettings:
    return SSOSettings(start_url=DEFAULT_START_URL, region=DEFAULT_REGION, role=DEFAULT_ROLE)


def default_aws() -> AWSSettings:
    return AWSSettings(default_region=DEFAULT_REGION, config_file=_default_aws_config_file())


def default_config() -> AppConfig:
    return AppConfig(sso=default_sso(), aws=default_aws())


def _lower_keys(document: dict[str, Any]) -> dict[str, Any]:
    return {
        key.lower(): _lower_keys(value) if isinstance(value, dict) else value
        for key, value in document.items()
    }


def _coerce(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, (int, float)):
        return str(value)
    raise TypeError(f"cannot use {type(value).__name__} value {value!r} as a string")


class ConfigManager:
    """Loads and saves settings in a single TOML file."""

    def __init__(self, config_file: str | os.PathLike[str] | None = None) -> None:
        self.config_file = str(config_file) if config_file else _default_settings_file()

    def _read_document(self) -> dict[str, Any]:
        with open(self.config_file, "rb") as handle:
            return _lower_keys(tomllib.load(handle))

    def _create_default_config(self) -> None:
        path = Path(self.config_file)
        try:
            path.parent.mkdir(mode=0o750, parents=True, exist_ok=True)
        except OSError as exc:
            raise ConfigError(f"failed to create config directory: {exc}") from exc
        content = default_sso().default_content() + "\n" + default_aws().default_content()
        try:
            with open(path, "w", encoding="utf-8",
                      opener=lambda p, flags: os.open(p, flags, 0o600)) as handle:
                handle.write(content)
        except OSError as exc:
            raise ConfigError(str(exc)) from exc

    def load(self) -> AppConfig:
        """Read the file, creating it with defaults when missing."""
        try:
            document = self._read_document()
        except FileNotFoundError:
            try:
                self._create_default_config()
            except ConfigError as exc:
                raise ConfigError(f"error creating config file: {exc}") from exc
            try:
                document = self._read_document()
            except (OSError, tomllib.TOMLDecodeError) as exc:
                raise ConfigError(f"error reading newly created config file: {exc}") from exc
        except (OSError, tomllib.TOMLDecodeError) as exc:
            raise ConfigError(f"error reading config file: {exc}") from exc

        config = AppConfig(
            sso=SSOSettings(**self._section_values(document, "sso", SSOSettings, "SSO")),
            aws=AWSSettings(**self._section_values(document, "aws", AWSSettings, "AWS")),
        )
        config.set_defaults()
        return config

    @staticmethod
    def _section_values(document: dict[str, Any], name: str, cls: type, label: str) -> dict[str, str]:
        table = document.get(name)
        if not isinstance(table, dict):
            return {}
        known = set(cls.__dataclass_fields__)
        values: dict[str, str] = {}
        for key, value in table.items():
            if key not in known:
                continue
            override = os.environ.get(f"{ENV_PREFIX}_{name}_{key}".upper())
            try:
                values[key] = override if override else _coerce(value)
            except TypeError as exc:
                raise ConfigError(f"error unmarshaling {label} config: {exc}") from exc
        return values

    def save_provider_config(self, provider: str, data: Any) -> None:
        """Write the non-empty fields of one provider's settings into the file."""
        try:
            document = self._read_document()
        except (OSError, tomllib.TOMLDecodeError):
            document = {}

        if provider == "sso":
            updates = asdict(data) if isinstance(data, SSOSettings) else {}
        elif provider == "aws":
            updates = asdict(data) if isinstance(data, AWSSettings) else {}
        else:
            raise ConfigError(f"unknown provider: {provider}")

        values = {key: value for key, value in updates.items() if value}
        if values:
            table = document.get(provider)
            if not isinstance(table, dict):
                table = {}
                document[provider] = table
            table.update(values)

        path = Path(self.config_file)
        try:
            path.parent.mkdir(mode=0o750, parents=True, exist_ok=True)
        except OSError as exc:
            raise ConfigError(f"failed to create config directory: {exc}") from exc
        try:
            path.write_text(tomli_w.dumps(document), encoding="utf-8")
        except OSError as exc:
            raise ConfigError(str(exc)) from exc


def load_config_for_key(config_file: str | os.PathLike[str] | None, key: str) -> AppConfig:
    """Load settings, falling back to the defaults of the key's provider."""
    try:
        return ConfigManager(config_file).load()
    except ConfigError:
        if key.startswith("sso."):
            return AppConfig(sso=default_sso())
        if key.startswith("aws."):
            return AppConfig(aws=default_aws())
        raise ConfigError(f"unknown key prefix for key: {key}") from None


def load(config_path: str | os.PathLike[str] | None = None) -> AppConfig:
    """Load settings from the given file or the default location."""
    return ConfigManager(config_path).load()