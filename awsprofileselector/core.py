"""
Core functions for aws-profile-selector: reading profiles from the AWS config
file and persisting the selected profile for shell integration.
"""

import os
from pathlib import Path

from botocore.configloader import load_config
from botocore.exceptions import ConfigNotFound, ConfigParseError

CURRENT_PROFILE_FILENAME = "current-profile"


class ProfileConfigError(Exception):
    """Raised when the AWS config file cannot be read or parsed."""


class ProfileConfigNotFound(ProfileConfigError):
    """Raised when the AWS config file does not exist."""


class Profile:
    """A named profile section from the AWS config file."""

    def __init__(self, name, attributes=None):
        self.name = name
        self.attributes = dict(attributes or {})

    @property
    def account_id(self):
        return self.attributes.get("sso_account_id")

    @property
    def role_name(self):
        return self.attributes.get("sso_role_name")

    @property
    def region(self):
        return self.attributes.get("region")

    @property
    def sso_start_url(self):
        return self.attributes.get("sso_start_url")

    def display(self):
        """Return the one-line label shown in the selector."""
        parts = [self.name]
        if self.account_id:
            parts.append(f"({self.account_id})")
        if self.region:
            parts.append(f"[{self.region}]")
        if self.role_name:
            parts.append(f"{{{self.role_name}}}")
        return " ".join(parts)

    def __eq__(self, other):
        if not isinstance(other, Profile):
            return NotImplemented
        return self.name == other.name and self.attributes == other.attributes

    def __repr__(self):
        return f"Profile({self.name!r})"


def get_aws_config_path():
    """Get the AWS config file path, honouring AWS_CONFIG_FILE like botocore does."""
    return os.path.expanduser(os.environ.get("AWS_CONFIG_FILE") or "~/.aws/config")


def get_current_profile_path():
    """Get the path of the file holding the active profile name."""
    override = os.environ.get("AWS_CURRENT_PROFILE_FILE")
    if override:
        return os.path.expanduser(override)
    return os.path.expanduser(os.path.join("~/.aws", CURRENT_PROFILE_FILENAME))


def _resolve_sso_session(attributes, sso_sessions):
    """Fill sso_start_url/region from a referenced [sso-session NAME] section."""
    session_name = attributes.get("sso_session")
    if not session_name or session_name not in sso_sessions:
        return attributes

    session = sso_sessions[session_name]
    resolved = dict(attributes)
    if "sso_start_url" not in resolved and "sso_start_url" in session:
        resolved["sso_start_url"] = session["sso_start_url"]
    if "region" not in resolved and "sso_region" in session:
        resolved["region"] = session["sso_region"]
    return resolved


def read_aws_config(config_file=None):
    """
    Read all profiles from an AWS config file.

    Args:
        config_file: Path to config file (defaults to get_aws_config_path())

    Returns:
        list[Profile] sorted by profile name

    Raises:
        ProfileConfigNotFound: if the file does not exist
        ProfileConfigError: if the file is not valid INI
    """
    if config_file is None:
        config_file = get_aws_config_path()

    try:
        parsed = load_config(config_file)
    except ConfigNotFound:
        raise ProfileConfigNotFound(f"AWS config file not found at {config_file}")
    except ConfigParseError as e:
        raise ProfileConfigError(f"Unable to parse AWS config file {config_file}: {e}")

    sso_sessions = parsed.get("sso_sessions", {})
    profiles = []
    for name, attributes in parsed.get("profiles", {}).items():
        # Nested sections such as "s3 =" come back as dicts; only scalars are shown
        flat = {key: value for key, value in attributes.items() if isinstance(value, str)}
        profiles.append(Profile(name, _resolve_sso_session(flat, sso_sessions)))

    profiles.sort(key=lambda p: p.name)
    return profiles


def find_profile(profiles, name):
    """Return the profile called name, or None."""
    for profile in profiles:
        if profile.name == name:
            return profile
    return None


def read_current_profile(path=None):
    """Return the persisted profile name, or None if no profile is active."""
    if path is None:
        path = get_current_profile_path()
    if not os.path.exists(path):
        return None
    with open(path) as f:
        name = f.read().strip()
    return name or None


def write_current_profile(profile_name, path=None):
    """Persist profile_name as the active profile."""
    if path is None:
        path = get_current_profile_path()
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        f.write(profile_name)


def clear_current_profile(path=None):
    """
    Remove the active profile file.

    Returns:
        True if a file was removed, False if no profile was active
    """
    if path is None:
        path = get_current_profile_path()
    try:
        os.remove(path)
    except FileNotFoundError:
        return False
    return True


def format_shell_command(profile_name, shell=None):
    """
    Build the shell statement that sets (or unsets) AWS_PROFILE.

    Args:
        profile_name: Profile to export, or None to unset AWS_PROFILE
        shell: Shell path, defaults to $SHELL

    Returns:
        str: statement for nushell, fish, or POSIX shells
    """
    if shell is None:
        shell = os.environ.get("SHELL", "")
    shell_name = os.path.basename(shell)

    if shell_name.startswith("nu"):
        if profile_name is None:
            return "hide-env AWS_PROFILE"
        return f'$env.AWS_PROFILE = "{profile_name}"'
    if "fish" in shell_name:
        if profile_name is None:
            return "set -e AWS_PROFILE"
        return f'set -gx AWS_PROFILE "{profile_name}"'
    if profile_name is None:
        return "unset AWS_PROFILE"
    return f'export AWS_PROFILE="{profile_name}"'
