"""Argument parsing functionality for upak."""

import argparse

from constants import Constants
from nuget.models import is_valid_package_name, is_valid_version


def _package_name(value: str) -> str:
    if not is_valid_package_name(value):
        raise argparse.ArgumentTypeError(
            f"invalid package name '{value}' (letters, digits, '_', '.', '-'; "
            f"at most {Constants.PACKAGE_NAME_MAX_LENGTH} characters)"
        )
    return value


def _semver(value: str) -> str:
    if not is_valid_version(value):
        raise argparse.ArgumentTypeError(f"invalid version '{value}' (expected e.g. 13.0.3)")
    return value


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level parser with its category subcommands."""
    parser = argparse.ArgumentParser(
        prog="upak",
        description="upak: A CLI for automating unity package operations",
        add_help=True,
    )
    parser.add_argument("-v", "--version",
                        action="version",
                        version=f"upak {Constants.VERSION}")
    parser.add_argument("--safe",
                        dest="SAFE_MODE",
                        help="Ask for confirmation before every file or process operation.",
                        action="store_true")
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str.upper,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        default=None)
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)
    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to configuration file (YAML)",
                        action="store",
                        type=str)

    categories = parser.add_subparsers(dest="action", metavar="<category>")
    nuget = categories.add_parser(
        "nuget",
        help="A collection of tools for using nuget packages in unity",
        description="upak nuget: A collection of tools for using nuget packages in unity",
    )
    nuget.set_defaults(print_category_help=nuget.print_help)
    nuget_commands = nuget.add_subparsers(dest="nuget_command", metavar="<command>")
    install = nuget_commands.add_parser(
        "install",
        help="Install a nuget package",
        description="Download and install a nuget package to the parent unity project",
    )
    install.add_argument("package_name",
                         help="The full name of the package, eg. 'Newtonsoft.Json'",
                         type=_package_name)
    install.add_argument("package_version",
                         help="The version of the package to install, eg. '13.0.3'",
                         type=_semver)
    install.add_argument("--dotnet",
                         dest="RESOLVER",
                         help="Path to the dotnet executable (default: dotnet on PATH)",
                         action="store",
                         type=str)
    return parser


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    return build_parser().parse_args(argv)
