"""Configuration keys accepted by the config subcommands."""

from __future__ import annotations

import os
from typing import Protocol

from .settings import AppConfig, ConfigError, ConfigManager, default_config

KEY_SSO_START_URL = "sso.start_url"
KEY_SSO_REGION = "sso.region"
KEY_SSO_ROLE = "sso.role"
KEY_AWS_DEFAULT_REGION = "aws.default_region"
KEY_AWS_CONFIG_FILE = "aws.config_file"

VALID_KEYS = (
    KEY_SSO_START_URL,
    KEY_SSO_REGION,
    KEY_SSO_ROLE,
    KEY_AWS_DEFAULT_REGION,
    KEY_AWS_CONFIG_FILE,
)

KEY_DESCRIPTIONS = {
    KEY_SSO_START_URL: "Your AWS SSO start URL",
    KEY_SSO_REGION: "AWS region for SSO (e.g., us-east-1)",
    KEY_SSO_ROLE: "SSO role name (e.g., AdministratorAccess)",
    KEY_AWS_DEFAULT_REGION: "Default AWS region for profiles",
    KEY_AWS_CONFIG_FILE: "Path to AWS config file",
}

# Each key maps to (section attribute, field attribute) on AppConfig.
_FIELDS = {
    KEY_SSO_START_URL: ("sso", "start_url"),
    KEY_SSO_REGION: ("sso", "region"),
    KEY_SSO_ROLE: ("sso", "role"),
    KEY_AWS_DEFAULT_REGION: ("aws", "default_region"),
    KEY_AWS_CONFIG_FILE: ("aws", "config_file"),
}


class _ErrorSink(Protocol):
    def error(self, message: str) -> None: ...


class _OutputSink(Protocol):
    def output(self, message: str) -> None: ...


def _field(key: str) -> tuple[str, str]:
    try:
        return _FIELDS[key]
    except KeyError:
        raise ConfigError(f"unknown configuration key: {key}") from None


def is_valid_key(key: str) -> bool:
    return key in VALID_KEYS


def get_config_value(config: AppConfig, key: str) -> str:
    section, name = _field(key)
    return getattr(getattr(config, section), name)


def set_config_value(config: AppConfig, key: str, value: str) -> None:
    section, name = _field(key)
    setattr(getattr(config, section), name, value)


def _key_lines():
    for key in VALID_KEYS:
        description = KEY_DESCRIPTIONS.get(key)
        yield f"  {key:<16} {description}" if description else f"  {key}"


def print_available_keys(ui: _ErrorSink) -> None:
    """Write the key list to the UI's error stream."""
    ui.error("Available keys:")
    for line in _key_lines():
        ui.error(line)


def output_available_keys(ui: _OutputSink) -> None:
    """Write the key list to the UI's output stream."""
    for line in _key_lines():
        ui.output(line)


def save_config_value(config_file: str | os.PathLike[str] | None, key: str, value: str) -> None:
    """Store one value in the settings file, keeping the rest of its section."""
    manager = ConfigManager(config_file)
    try:
        config = manager.load()
    except ConfigError:
        config = default_config()
    section, name = _field(key)
    settings = getattr(config, section)
    setattr(settings, name, value)
    manager.save_provider_config(section, settings)