"""Command-line entry point and command registry."""

from __future__ import annotations

import sys
from typing import Callable

from .config_commands import ConfigCommand
from .generate import GenerateCommand
from .ui import UI, Command

APP_NAME = "aws-sso-config"
VERSION = "dev"
COMMIT = "unknown"
BUILD_TIME = "unknown"

CommandFactory = Callable[[], Command]

_HELP_FLAGS = ("-h", "-help", "--help")
_VERSION_FLAGS = ("-v", "-version", "--version")


def _register_commands(ui: UI,
                       entries: list[tuple[str, Callable[[UI], Command]]]) -> dict[str, CommandFactory]:
    registry: dict[str, CommandFactory] = {}
    for name, build in entries:
        if name in registry:
            raise ValueError(f"duplicate command: {name!r}")
        registry[name] = lambda build=build: build(ui)
    return registry


def registered_commands(ui: UI) -> dict[str, CommandFactory]:
    """Return a factory for every top-level command, keyed by name."""
    return _register_commands(ui, [
        ("config", ConfigCommand),
        ("generate", GenerateCommand),
    ])


def version_string() -> str:
    return f"{VERSION} (commit: {COMMIT}, built: {BUILD_TIME})"


def _help_text(commands: dict[str, CommandFactory]) -> str:
    lines = [f"Usage: {APP_NAME} [--version] [--help] <command> [<args>]", "",
             "Available commands are:"]
    width = max((len(name) for name in commands), default=0)
    for name in sorted(commands):
        lines.append(f"    {name.ljust(width)}    {commands[name]().synopsis()}")
    return "\n".join(lines) + "\n"


def run(args: list[str] | None = None, ui: UI | None = None) -> int:
    """Run the command line and return the exit code."""
    if ui is None:
        ui = UI(sys.stdout, sys.stderr, sys.stdin)
    args = list(args or [])
    commands = registered_commands(ui)

    subcommand = ""
    sub_args: list[str] = []
    is_help = False
    is_version = False
    for position, arg in enumerate(args):
        if arg == "--":
            break
        if arg in _HELP_FLAGS:
            is_help = True
            continue
        if not subcommand and arg in _VERSION_FLAGS:
            is_version = True
            continue
        if not subcommand and arg and not arg.startswith("-"):
            subcommand = arg
            sub_args = args[position + 1:]

    if is_version:
        ui.output(version_string())
        return 0
    if is_help and not subcommand:
        ui.output(_help_text(commands))
        return 0

    factory = commands.get(subcommand)
    if factory is None:
        ui.output(_help_text(commands))
        return 127

    command = factory()
    if is_help:
        ui.output(command.help())
        return 0
    return command.run(sub_args)


def main(argv: list[str] | None = None) -> int:
    """Entry point for the aws-sso-config command."""
    return run(sys.argv[1:] if argv is None else argv)


if __name__ == "__main__":
    raise SystemExit(main())