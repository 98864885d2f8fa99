"""Console output and the command interface shared by all subcommands."""

from __future__ import annotations

import abc
import sys
from typing import TextIO


class UI:
    """Writes messages to an output and an error stream."""

    def __init__(self, stdout: TextIO | None = None, stderr: TextIO | None = None,
                 stdin: TextIO | None = None) -> None:
        self.stdout = stdout
        self.stderr = stderr
        self.stdin = stdin

    def _out(self) -> TextIO:
        return self.stdout if self.stdout is not None else sys.stdout

    def _err(self) -> TextIO:
        if self.stderr is not None:
            return self.stderr
        if self.stdout is not None:
            return self.stdout
        return sys.stderr

    def output(self, message: str) -> None:
        self._out().write(f"{message}\n")

    def info(self, message: str) -> None:
        self.output(message)

    def error(self, message: str) -> None:
        self._err().write(f"{message}\n")

    def warn(self, message: str) -> None:
        self.error(message)


class Command(abc.ABC):
    """A subcommand: runs with arguments and returns an exit code."""

    @abc.abstractmethod
    def run(self, args: list[str]) -> int:
        """Run the command and return its exit code."""

    @abc.abstractmethod
    def help(self) -> str:
        """Return the long help text."""

    @abc.abstractmethod
    def synopsis(self) -> str:
        """Return a one-line description."""


def usage(text: str) -> str:
    """Return help text with surrounding whitespace removed."""
    return text.strip()