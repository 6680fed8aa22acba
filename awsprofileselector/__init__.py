"""
aws-profile-selector: pick an AWS CLI profile with an inline fuzzy finder.

A Python CLI utility that lists the profiles in ~/.aws/config in a small,
searchable list drawn directly in the terminal, and remembers the choice so
shell tooling can export AWS_PROFILE automatically.

Key features:
- Inline (non full-screen) fuzzy selection with arrow-key navigation
- Direct activation of a named profile, or of one not in the config
- Shell statements for bash/zsh, fish and nushell via --current
"""

__version__ = "0.1.0"
__license__ = "MIT"

from .core import (
    Profile,
    ProfileConfigError,
    ProfileConfigNotFound,
    clear_current_profile,
    format_shell_command,
    get_aws_config_path,
    get_current_profile_path,
    read_aws_config,
    read_current_profile,
    write_current_profile,
)
from .matcher import Candidate, RankedCandidate, rank, score
from .ui import SessionOutcome, TerminalError, select_profile

__all__ = [
    # Config reading
    "Profile",
    "ProfileConfigError",
    "ProfileConfigNotFound",
    "get_aws_config_path",
    "read_aws_config",
    # Active profile state
    "get_current_profile_path",
    "read_current_profile",
    "write_current_profile",
    "clear_current_profile",
    "format_shell_command",
    # Fuzzy matching
    "Candidate",
    "RankedCandidate",
    "score",
    "rank",
    # Interactive selection
    "SessionOutcome",
    "TerminalError",
    "select_profile",
]
