"""The config edit command: open the settings file in an editor."""

from __future__ import annotations

import os
import shutil
import subprocess
from pathlib import Path

from .settings import CONFIG_FILE_NAME, ConfigError, ConfigManager
from .ui import UI, Command

_FALLBACK_EDITORS = ("vim", "nano", "vi")

HELP = """Usage: aws-sso-config config edit [config-file]

  Open the configuration file in an editor for manual editing.

  The editor used is determined by the EDITOR environment variable.
  If EDITOR is not set, the command will try to use vim, nano, or vi
  in that order.

Arguments:
  config-file    Optional path to the configuration file.
                 If not provided, uses the default location (~/.awsssoconfig)

Examples:
  # Edit the default configuration file
  aws-sso-config config edit

  # Edit a specific configuration file
  aws-sso-config config edit /path/to/config

  # Set your preferred editor
  export EDITOR=nano
  aws-sso-config config edit

Environment Variables:
  EDITOR         The editor to use for editing the configuration file
"""


class EditCommand(Command):
    """Open the settings file in the user's editor and check it afterwards."""

    def __init__(self, ui: UI) -> None:
        self.ui = ui

    def run(self, args: list[str]) -> int:
        if args:
            config_file = args[0]
        else:
            try:
                config_file = str(Path.home() / CONFIG_FILE_NAME)
            except RuntimeError as exc:
                self.ui.error(f"Error getting home directory: {exc}")
                return 1

        try:
            self.ensure_config_file_exists(config_file)
        except ConfigError as exc:
            self.ui.error(f"Error ensuring config file exists: {exc}")
            return 1

        editor = os.environ.get("EDITOR", "")
        if not editor:
            editor = next((name for name in _FALLBACK_EDITORS if shutil.which(name)), "")
            if not editor:
                self.ui.error("No editor found. Please set the EDITOR environment variable.")
                self.ui.error("For example: export EDITOR=vim")
                return 1

        editor_path = shutil.which(editor)
        if editor_path is None:
            self.ui.error(f"Editor '{editor}' not found in PATH")
            return 1

        try:
            result = subprocess.run([editor_path, config_file], check=False)
        except OSError as exc:
            self.ui.error(f"Error running editor: {exc}")
            return 1
        if result.returncode != 0:
            self.ui.error(f"Error running editor: exit status {result.returncode}")
            return 1

        try:
            self.validate_config_file(config_file)
        except ConfigError as exc:
            self.ui.error(f"Warning: Configuration file validation failed: {exc}")
            self.ui.error("Please check your configuration file for syntax errors.")
            return 1

        self.ui.output("Configuration file edited successfully.")
        return 0

    def ensure_config_file_exists(self, config_file: str | os.PathLike[str]) -> None:
        """Create the file with default settings if it does not exist."""
        path = Path(config_file)
        if path.exists():
            return
        try:
            path.parent.mkdir(mode=0o750, parents=True, exist_ok=True)
        except OSError as exc:
            raise ConfigError(f"failed to create config directory: {exc}") from exc
        try:
            config = ConfigManager(path).load()
        except ConfigError as exc:
            raise ConfigError(f"failed to create default config file: {exc}") from exc
        try:
            config.validate()
        except ConfigError as exc:
            raise ConfigError(f"default config validation failed: {exc}") from exc
        self.ui.output(f"Created default configuration file at: {config_file}")

    def validate_config_file(self, config_file: str | os.PathLike[str]) -> None:
        """Load and validate the file, raising ConfigError if it is unusable."""
        try:
            config = ConfigManager(config_file).load()
        except ConfigError as exc:
            raise ConfigError(f"failed to load config: {exc}") from exc
        config.validate()

    def help(self) -> str:
        return HELP

    def synopsis(self) -> str:
        return "Open configuration file in an editor"