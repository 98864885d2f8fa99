"""Choose and check the AWS profile for the git repository being worked in."""

from __future__ import annotations

import configparser
import os
import sys
from pathlib import Path

from .sso import SSOError, aws_config_path

AWS_PROFILE = "AWS_PROFILE"

# Repositories whose profile is named differently from the repository itself.
_PROFILE_OVERRIDES: dict[str, str] = {}


class ProfileError(Exception):
    """Raised when a profile does not match its repository."""


def _log(message: str) -> None:
    print(message, file=sys.stderr)


def validate_account_id(account_id: str, root_dir: str | os.PathLike[str]) -> None:
    """Check the account id against the one in the repository's terragrunt.hcl."""
    terragrunt_file = Path(root_dir) / "terragrunt.hcl"
    try:
        with open(terragrunt_file, encoding="utf-8") as handle:
            lines = handle.read().splitlines()
    except OSError:
        raise ProfileError(
            f"could not find terragrunt.hcl at root of git repo {root_dir}") from None

    found = ""
    for line in lines:
        fields = line.split()
        if len(fields) < 3 or fields[0] != "account_id":
            continue
        found = fields[2].strip('"')
        break

    if not found:
        raise ProfileError(f"could not determine account id from {terragrunt_file}")
    if found != account_id:
        raise ProfileError(
            f"account id {account_id} determined from profile did not match entry "
            f"in terragrunt file {terragrunt_file}")


def profile_from_repo_name(repo: str) -> str:
    """Map a repository name to its profile name; most map to themselves."""
    return _PROFILE_OVERRIDES.get(repo, repo)


def validate_profile(profile: str, root_dir: str | os.PathLike[str],
                     config_file: str | os.PathLike[str] | None = None) -> None:
    """Check that the profile exists and belongs to the repository."""
    if config_file is None:
        try:
            config_file = aws_config_path()
        except SSOError as exc:
            raise ProfileError(f"failed to get config file path: {exc}") from exc

    parser = configparser.ConfigParser(interpolation=None)
    try:
        with open(config_file, encoding="utf-8") as handle:
            parser.read_file(handle)
    except (OSError, configparser.Error) as exc:
        raise ProfileError(str(exc)) from exc

    section = f"profile {profile}"
    if not parser.has_section(section):
        raise ProfileError(f"could not find profile for {profile}")
    try:
        account_id = parser.get(section, "sso_account_id")
    except configparser.Error as exc:
        raise ProfileError(f"error parsing aws config {profile}: {exc}") from exc

    validate_account_id(account_id, root_dir)
    _log(f"Using profile {profile} ({account_id})")


def get_profile(cwd: str | os.PathLike[str] | None = None) -> str:
    """Return the profile for the enclosing git repository, or "default".

    Returns an empty string when AWS_PROFILE is already set.
    """
    value = os.environ.get(AWS_PROFILE)
    if value is not None:
        _log(f"{AWS_PROFILE} is already set to {value} (potentially by direnv?), skipping setup")
        return ""

    directory = Path(cwd) if cwd is not None else Path.cwd()
    while not (directory / ".git").exists():
        directory = directory.parent
        if directory.parent == directory:
            return "default"

    profile = profile_from_repo_name(directory.name)
    try:
        validate_profile(profile, directory)
    except ProfileError:
        return "default"
    return profile