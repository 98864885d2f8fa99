"""The config command and its get, set, unset, list and edit subcommands."""

from __future__ import annotations

import textwrap
from pathlib import Path

from .edit import EditCommand
from .keys import (
    KEY_AWS_CONFIG_FILE,
    KEY_AWS_DEFAULT_REGION,
    KEY_SSO_REGION,
    KEY_SSO_ROLE,
    KEY_SSO_START_URL,
    get_config_value,
    is_valid_key,
    output_available_keys,
    print_available_keys,
    save_config_value,
    set_config_value,
)
from .settings import CONFIG_FILE_NAME, ConfigError, default_aws, default_sso, load_config_for_key
from .ui import UI, Command

PROG = "aws-sso-config"

_SUBCOMMAND_TABLE = (
    ("get", "get <key>", "Get a configuration value"),
    ("set", "set <key> <value>", "Set a configuration value"),
    ("unset", "unset <key>", "Reset a configuration value to its default"),
    ("list", "list", "List all available configuration keys"),
    ("edit", "edit [config-file]", "Open configuration file in an editor"),
)
_SYNOPSES = {name: text for name, _, text in _SUBCOMMAND_TABLE}

_KEY_TABLE = (
    (KEY_SSO_START_URL, "Your AWS SSO start URL"),
    (KEY_SSO_REGION, "AWS region for SSO (e.g., us-east-1)"),
    (KEY_SSO_ROLE, "SSO role name (e.g., AdministratorAccess)"),
    (KEY_AWS_DEFAULT_REGION, "Default AWS region for profiles"),
    (KEY_AWS_CONFIG_FILE, "Path to AWS config file"),
)


def _usage_line(rest: str) -> str:
    return f"Usage: {PROG} config {rest}"


def _section(title: str, lines: list[str]) -> str:
    return "\n".join([f"{title}:", *lines])


def _keys_section() -> str:
    return _section("Available configuration keys",
                    [f"  {key:<19} {desc}" for key, desc in _KEY_TABLE])


def _subcommand_lines(width: int) -> list[str]:
    return [f"  {form:<{width}} {desc}" for _, form, desc in _SUBCOMMAND_TABLE]


def _examples_section(examples: list[tuple[str, str]]) -> str:
    blocks = [f"  # {comment}\n  {PROG} config {args}" for comment, args in examples]
    return "Examples:\n" + "\n\n".join(blocks)


def _compose(usage_rest: str, paragraphs: list[str], *sections: str) -> str:
    intro = [
        textwrap.fill(text, width=70, initial_indent="  ", subsequent_indent="  ")
        for text in paragraphs
    ]
    return "\n\n".join([_usage_line(usage_rest), *intro, *sections]) + "\n"


_EX_GET_URL = ("Get the SSO start URL", f"get {KEY_SSO_START_URL}")
_EX_SET_URL = ("Set the SSO start URL (no quotes needed)",
               f"set {KEY_SSO_START_URL} https://mycompany.awsapps.com/start")
_EX_SET_REGION = ("Set the default region", f"set {KEY_AWS_DEFAULT_REGION} us-west-2")
_EX_SET_FILE = ("Set the AWS config file path", f"set {KEY_AWS_CONFIG_FILE} ~/.aws/config")
_EX_UNSET_URL = ("Reset SSO start URL to default", f"unset {KEY_SSO_START_URL}")
_EX_UNSET_REGION = ("Reset default region to default", f"unset {KEY_AWS_DEFAULT_REGION}")

CONFIG_HELP = _compose(
    "<subcommand>",
    [f"Manage configuration settings for {PROG}."],
    _section("Subcommands", _subcommand_lines(20)),
    _keys_section(),
    _examples_section([
        _EX_GET_URL,
        _EX_SET_URL,
        _EX_UNSET_URL,
        _EX_SET_REGION,
        _EX_UNSET_REGION,
        _EX_SET_FILE,
        ("List all available configuration keys", "list"),
        ("Edit the configuration file", "edit"),
        ("Edit a specific configuration file", "edit /path/to/config"),
    ]),
)

GET_HELP = _compose(
    "get <key>",
    [_SYNOPSES["get"] + "."],
    _keys_section(),
    _examples_section([
        _EX_GET_URL,
        ("Get the default region", f"get {KEY_AWS_DEFAULT_REGION}"),
    ]),
)

LIST_HELP = _compose(
    "list",
    ["List all available configuration keys and their descriptions."],
    _examples_section([("List all configuration keys", "list")]),
)

SET_HELP = _compose(
    "set <key> <value>",
    [
        _SYNOPSES["set"] + ".",
        "The value can be provided with or without quotes. Multiple words "
        "will be joined with spaces to form the complete value.",
    ],
    _keys_section(),
    _examples_section([
        _EX_SET_URL,
        _EX_SET_REGION,
        _EX_SET_FILE,
        ("Values with spaces work without quotes",
         f"set {KEY_SSO_ROLE} Administrator Access Role"),
        ("Quotes still work if preferred",
         f'set {KEY_SSO_START_URL} "https://mycompany.awsapps.com/start"'),
    ]),
)

UNSET_HELP = _compose(
    "unset <key>",
    [
        _SYNOPSES["unset"] + ".",
        "This command removes any custom configuration for the specified key "
        "and restores it to the default value.",
    ],
    _keys_section(),
    _examples_section([
        _EX_UNSET_URL,
        _EX_UNSET_REGION,
        ("Reset AWS config file path to default", f"unset {KEY_AWS_CONFIG_FILE}"),
    ]),
)


def _usage_error(ui: UI, usage_rest: str) -> int:
    ui.error(_usage_line(usage_rest))
    ui.error("")
    print_available_keys(ui)
    return 1


def _reject_key(ui: UI, key: str) -> int:
    ui.error(f"Invalid configuration key: {key}")
    ui.error("")
    print_available_keys(ui)
    return 1


class GetCommand(Command):
    """Print the value of one configuration key."""

    def __init__(self, ui: UI) -> None:
        self.ui = ui

    def run(self, args: list[str]) -> int:
        if len(args) != 1:
            return _usage_error(self.ui, "get <key>")
        key = args[0]
        if not is_valid_key(key):
            return _reject_key(self.ui, key)
        try:
            config = load_config_for_key(None, key)
        except ConfigError as exc:
            self.ui.error(f"Error loading config: {exc}")
            return 1
        try:
            value = get_config_value(config, key)
        except ConfigError as exc:
            self.ui.error(str(exc))
            return 1
        self.ui.output(value)
        return 0

    def help(self) -> str:
        return GET_HELP

    def synopsis(self) -> str:
        return _SYNOPSES["get"]


class ListCommand(Command):
    """List the configuration keys with their descriptions."""

    def __init__(self, ui: UI) -> None:
        self.ui = ui

    def run(self, args: list[str]) -> int:
        if args:
            self.ui.error(_usage_line("list"))
            self.ui.error("")
            self.ui.error("This command takes no arguments.")
            return 1
        self.ui.output("Available configuration keys:")
        output_available_keys(self.ui)
        return 0

    def help(self) -> str:
        return LIST_HELP

    def synopsis(self) -> str:
        return _SYNOPSES["list"]


class SetCommand(Command):
    """Store a value for one configuration key."""

    def __init__(self, ui: UI) -> None:
        self.ui = ui

    def run(self, args: list[str]) -> int:
        if len(args) < 2:
            return _usage_error(self.ui, "set <key> <value>")
        key, value = args[0], " ".join(args[1:])
        if not is_valid_key(key):
            return _reject_key(self.ui, key)
        try:
            config_file = Path.home() / CONFIG_FILE_NAME
        except RuntimeError as exc:
            self.ui.error(f"Error getting home directory: {exc}")
            return 1
        try:
            save_config_value(config_file, key, value)
        except ConfigError as exc:
            self.ui.error(f"Error updating config: {exc}")
            return 1
        self.ui.output(f"Updated {key} = {value}")
        return 0

    def help(self) -> str:
        return SET_HELP

    def synopsis(self) -> str:
        return _SYNOPSES["set"]


_DEFAULTS = {
    KEY_SSO_START_URL: lambda: default_sso().start_url,
    KEY_SSO_REGION: lambda: default_sso().region,
    KEY_SSO_ROLE: lambda: default_sso().role,
    KEY_AWS_DEFAULT_REGION: lambda: default_aws().default_region,
    KEY_AWS_CONFIG_FILE: lambda: default_aws().config_file,
}


class UnsetCommand(Command):
    """Reset one configuration key to its default value."""

    def __init__(self, ui: UI) -> None:
        self.ui = ui

    def run(self, args: list[str]) -> int:
        if len(args) != 1:
            return _usage_error(self.ui, "unset <key>")
        key = args[0]
        if not is_valid_key(key):
            return _reject_key(self.ui, key)
        try:
            config = load_config_for_key(None, key)
        except ConfigError as exc:
            self.ui.error(f"Error loading config: {exc}")
            return 1
        try:
            default = self.default_value(key)
        except ConfigError as exc:
            self.ui.error(f"Error getting default value: {exc}")
            return 1
        try:
            set_config_value(config, key, default)
        except ConfigError as exc:
            self.ui.error(f"Error setting config value: {exc}")
            return 1
        try:
            save_config_value(None, key, default)
        except ConfigError as exc:
            self.ui.error(f"Error saving config: {exc}")
            return 1
        self.ui.output(f"Reset {key} to default value: {default}")
        return 0

    def default_value(self, key: str) -> str:
        """Return the default for a key, raising ConfigError for unknown keys."""
        factory = _DEFAULTS.get(key)
        if factory is None:
            raise ConfigError(f"unknown configuration key: {key}")
        return factory()

    def help(self) -> str:
        return UNSET_HELP

    def synopsis(self) -> str:
        return _SYNOPSES["unset"]


_SUBCOMMANDS = {
    "get": GetCommand,
    "set": SetCommand,
    "unset": UnsetCommand,
    "list": ListCommand,
    "edit": EditCommand,
}


class ConfigCommand(Command):
    """Dispatch to the config subcommands."""

    def __init__(self, ui: UI) -> None:
        self.ui = ui

    def _print_subcommands(self) -> None:
        self.ui.error("")
        self.ui.error("Available subcommands:")
        for line in _subcommand_lines(21):
            self.ui.error(line)

    def run(self, args: list[str]) -> int:
        if not args:
            self.ui.error(_usage_line("<subcommand>"))
            self._print_subcommands()
            return 1
        name, rest = args[0], list(args[1:])
        command_class = _SUBCOMMANDS.get(name)
        if command_class is None:
            self.ui.error(f"Unknown subcommand: {name}")
            self._print_subcommands()
            return 1
        return command_class(self.ui).run(rest)

    def help(self) -> str:
        return CONFIG_HELP

    def synopsis(self) -> str:
        return "Read and write configuration values"