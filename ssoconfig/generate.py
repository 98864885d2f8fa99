"""The generate command: write an AWS profile for every SSO account."""

from __future__ import annotations

import configparser
import os
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Protocol

from . import settings
from .settings import AppConfig, ConfigError, default_config
from .sso import (
    DEFAULT_REGION,
    AccountInfo,
    RoleInfo,
    SSOError,
    SSOOIDCClient,
    SSOPortalClient,
    generate_token_with_config,
)
from .ui import UI, Command, usage

SYNOPSIS = "Generate AWS config file"
HELP = """
Usage: aws-sso-config generate [options]

  This command will auto-generate an AWS config file
  with all accounts you have access to.

Options:

  -diff             Enable diff output to see changes before writing.

  -config=<path>    Path to configuration file. If not specified,
                    uses environment variables and defaults.

Examples:

  # Generate using environment variables and defaults
  aws-sso-config generate

  # Generate using a custom config file
  aws-sso-config generate -config=my-config.yaml

  # Show diff before writing changes
  aws-sso-config generate -diff -config=my-config.yaml
"""

_TRUE_WORDS = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE_WORDS = {"0", "f", "F", "FALSE", "false", "False"}


class SSOClient(Protocol):
    def list_accounts(self, access_token: str) -> list[AccountInfo]: ...
    def list_account_roles(self, access_token: str, account_id: str) -> list[RoleInfo]: ...


@dataclass
class ConfigGenerator:
    """Lists accounts and roles and writes profile sections."""

    sso_start_url: str = ""
    sso_region: str = ""
    default_region: str = ""

    def list_accounts(self, client: SSOClient, token: str | None) -> list[AccountInfo]:
        if token is None:
            raise SSOError("no SSO token provided")
        try:
            return client.list_accounts(token)
        except SSOError as exc:
            raise SSOError(f"failed to list accounts: {exc}", code=exc.code) from exc

    def get_account_roles(self, client: SSOClient, token: str | None,
                          account_id: str) -> list[RoleInfo]:
        if token is None:
            raise SSOError("no SSO token provided")
        try:
            return client.list_account_roles(token, account_id)
        except SSOError as exc:
            raise SSOError(f"failed to list roles for account {account_id}: {exc}",
                           code=exc.code) from exc

    def write_section(self, parser: configparser.ConfigParser, section_name: str,
                      values: dict[str, str]) -> None:
        """Create the section if needed and set every value in it."""
        if not parser.has_section(section_name):
            try:
                parser.add_section(section_name)
            except (configparser.Error, ValueError) as exc:
                raise configparser.Error(
                    f"failed to add section {section_name}: {exc}") from exc
        for key, value in values.items():
            try:
                parser.set(section_name, key, value)
            except (configparser.Error, TypeError) as exc:
                raise configparser.Error(
                    f"failed to set {key}={value} in section {section_name}: {exc}") from exc


def show_file_diff(file1: str | os.PathLike[str], file2: str | os.PathLike[str]) -> None:
    """Print the output of diff between two existing files."""
    for name in (file1, file2):
        if not Path(name).exists():
            print(f"File {name} does not exist")
            return
    try:
        result = subprocess.run(["diff", str(file1), str(file2)],
                                capture_output=True, text=True, check=False)
    except OSError:
        return
    sys.stdout.write(result.stdout)


def generate_aws_config_file(client: SSOClient, token: str | None,
                             config_file: str | os.PathLike[str], diff: bool,
                             app_config: AppConfig) -> None:
    """Add or update a profile for each account in the AWS config file."""
    config_file = str(config_file)
    config_file_new = config_file + ".new"

    parser = configparser.ConfigParser(interpolation=None)
    with open(config_file, encoding="utf-8") as handle:
        parser.read_file(handle)

    print("Fetching list of all accounts for user")

    if token is None:
        print("Error fetching accounts: no SSO token provided")
        raise SSOError("no SSO token provided")
    try:
        accounts = client.list_accounts(token)
    except SSOError as exc:
        print(f"Error fetching accounts: {exc}")
        raise

    for account in accounts:
        profile_name = account.account_name
        section = f"profile {profile_name}"
        if not parser.has_section(section):
            print(f"Adding profile {profile_name}")
            parser.add_section(section)
        parser.set(section, "sso_account_id", account.account_id)
        parser.set(section, "sso_role_name", app_config.sso.role)
        parser.set(section, "sso_region", app_config.sso.region)
        parser.set(section, "sso_start_url", app_config.sso.start_url)
        parser.set(section, "region", app_config.aws.default_region)

    try:
        with open(config_file_new, "w", encoding="utf-8") as handle:
            parser.write(handle)
    except OSError as exc:
        raise OSError(f"failed to save config file: {exc}") from exc
    if diff:
        show_file_diff(config_file, config_file_new)
    try:
        os.replace(config_file_new, config_file)
    except OSError as exc:
        raise OSError(f"failed to rename config file: {exc}") from exc


def _parse_bool(text: str) -> bool:
    if text in _TRUE_WORDS:
        return True
    if text in _FALSE_WORDS:
        return False
    raise ValueError(f'invalid boolean value "{text}" for -diff: parse error')


def _parse_flags(args: list[str]) -> tuple[bool, str]:
    """Parse -diff and -config the way the standard flag syntax does."""
    diff = False
    config_file = ""
    remaining = list(args)
    while remaining:
        arg = remaining[0]
        if len(arg) < 2 or not arg.startswith("-"):
            break
        remaining.pop(0)
        if arg == "--":
            break
        name = arg[2:] if arg.startswith("--") else arg[1:]
        if not name or name.startswith(("-", "=")):
            raise ValueError(f"bad flag syntax: {arg}")
        name, has_value, value = name.partition("=")
        if name == "diff":
            diff = _parse_bool(value) if has_value else True
        elif name == "config":
            if not has_value:
                if not remaining:
                    raise ValueError("flag needs an argument: -config")
                value = remaining.pop(0)
            config_file = value
        elif name in ("h", "help"):
            raise LookupError("help requested")
        else:
            raise ValueError(f"flag provided but not defined: -{name}")
    return diff, config_file


def _default_client_factory(region: str) -> SSOClient:
    return SSOPortalClient(region)


def _default_token_generator(app_config: AppConfig) -> str | None:
    return generate_token_with_config(SSOOIDCClient(DEFAULT_REGION), app_config)


class GenerateCommand(Command):
    """Generate profiles in the AWS config file from SSO accounts."""

    def __init__(self, ui: UI,
                 client_factory: Callable[[str], Any] | None = None,
                 token_generator: Callable[[AppConfig], str | None] | None = None) -> None:
        self.ui = ui
        self.client_factory = client_factory or _default_client_factory
        self.token_generator = token_generator or _default_token_generator
        self._help = usage(HELP)

    def run(self, args: list[str]) -> int:
        try:
            diff, config_path = _parse_flags(args)
        except LookupError:
            self.ui.error(self._help)
            return 1
        except ValueError as exc:
            self.ui.error(str(exc))
            return 1

        try:
            app_config = settings.load(config_path) if config_path else default_config()
            app_config.validate()
        except ConfigError as exc:
            self.ui.error(f"Configuration error: {exc}")
            return 1

        token = self.token_generator(app_config)
        client = self.client_factory(DEFAULT_REGION)

        try:
            generate_aws_config_file(client, token, app_config.aws.config_file, diff,
                                     app_config)
        except SSOError:
            return 1
        except (OSError, configparser.Error) as exc:
            self.ui.error(str(exc))
            return 1
        return 0

    def help(self) -> str:
        return self._help

    def synopsis(self) -> str:
        return SYNOPSIS