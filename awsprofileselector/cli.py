"""
Command-line interface for aws-profile-selector.
"""

import argparse
import sys

from . import __version__
from .core import (
    ProfileConfigError,
    ProfileConfigNotFound,
    clear_current_profile,
    find_profile,
    format_shell_command,
    get_aws_config_path,
    get_current_profile_path,
    read_aws_config,
    write_current_profile,
)
from .ui import DEFAULT_PAGE_SIZE, TerminalError, select_profile


def emit_shell_command(profile_name):
    """Print the AWS_PROFILE statement for the user's shell, without a newline."""
    sys.stdout.write(format_shell_command(profile_name))
    sys.stdout.flush()


def activate_profile(profile_name, current_shell_mode):
    """Persist profile_name, or print it as a shell statement in --current mode."""
    if current_shell_mode:
        emit_shell_command(profile_name)
        return
    write_current_profile(profile_name, get_current_profile_path())
    print(f"AWS profile activated: {profile_name}")


def deactivate_profile(current_shell_mode):
    if current_shell_mode:
        emit_shell_command(None)
        return
    if clear_current_profile(get_current_profile_path()):
        print("AWS profile deactivated")
    else:
        print("No active AWS profile to deactivate")


def load_profiles(config_file):
    """
    Read profiles for the selector.

    A missing config file is fatal. A malformed one is reported and treated
    as having no profiles.
    """
    try:
        return read_aws_config(config_file)
    except ProfileConfigNotFound:
        raise
    except ProfileConfigError as e:
        print(f"Warning: {e}", file=sys.stderr)
        return []


def positive_int(value):
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {value}")
    return number


def build_parser():
    parser = argparse.ArgumentParser(
        prog="aws-profile-selector",
        description="Interactively select an AWS CLI profile from ~/.aws/config",
        epilog="Examples:\n"
        "  aws-profile-selector                         # Pick a profile and save it to ~/.aws/current-profile\n"
        "  aws-profile-selector -a dev                  # Activate 'dev' without the selector\n"
        "  aws-profile-selector -n sandbox              # Activate a profile that is not in the config\n"
        "  aws-profile-selector -d                      # Deactivate the saved profile\n"
        '  eval "$(aws-profile-selector -c)"            # Pick a profile for the current shell only',
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "-a",
        "--activate",
        metavar="PROFILE",
        help="Activate a specific profile by name (skips interactive selection)",
    )
    parser.add_argument(
        "-d",
        "--deactivate",
        action="store_true",
        help="Deactivate AWS_PROFILE",
    )
    parser.add_argument(
        "-n",
        "--new",
        metavar="PROFILE",
        help="Set a profile name that is not available in the list",
    )
    parser.add_argument(
        "-c",
        "--current",
        action="store_true",
        help="Output a shell statement setting AWS_PROFILE (for eval in the current shell) "
        "instead of saving the profile",
    )
    parser.add_argument(
        "--profiles",
        action="store_true",
        help="List all profile names from the AWS config file and exit",
    )
    parser.add_argument(
        "--page-size",
        type=positive_int,
        default=DEFAULT_PAGE_SIZE,
        help=f"Number of profiles shown at once in the selector (default: {DEFAULT_PAGE_SIZE})",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser


def main(argv=None):
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    if args.deactivate:
        deactivate_profile(args.current)
        return 0

    # A new profile name does not need the config file
    if args.new:
        activate_profile(args.new, args.current)
        return 0

    config_file = get_aws_config_path()
    try:
        profiles = load_profiles(config_file)
    except ProfileConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if not profiles:
        print(f"No AWS profiles found in {config_file}", file=sys.stderr)
        return 1

    if args.profiles:
        for profile in profiles:
            print(profile.name)
        return 0

    if args.activate:
        if find_profile(profiles, args.activate) is None:
            print(f"Profile '{args.activate}' not found in AWS config", file=sys.stderr)
            print("Available profiles:", file=sys.stderr)
            for profile in profiles:
                print(f"  {profile.name}", file=sys.stderr)
            return 1
        activate_profile(args.activate, args.current)
        return 0

    try:
        outcome = select_profile(profiles, page_size=args.page_size)
    except TerminalError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if not outcome.is_selected:
        print("No profile selected", file=sys.stderr if args.current else sys.stdout)
        return 1

    activate_profile(outcome.name, args.current)
    return 0


if __name__ == "__main__":
    sys.exit(main())
