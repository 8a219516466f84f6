"""upak - automate Unity package operations

Entry point for the ``upak`` console script.

    Returns:
        int: Exit code
"""
import logging
import sys

from args import build_parser
from cli_config import resolve_config
from common.logging_utils import add_file_handler, configure_logging, extra_context, is_debug_enabled
from common.safe_mode import SafeMode, disabled
from constants import ExitCodes
from nuget import InstallState, NugetInstaller, PackageRequest

logger = logging.getLogger(__name__)


def run_nuget_install(args, config) -> int:
    """Run ``upak nuget install`` and map the outcome to an exit code."""
    try:
        request = PackageRequest.parse(args.package_name, args.package_version)
    except ValueError as e:
        logger.error("%s", e)
        return ExitCodes.USAGE_ERROR.value

    gate = SafeMode(enabled=True) if getattr(args, "SAFE_MODE", False) else disabled()
    installer = NugetInstaller(resolver=config.resolver, confirm=gate)
    outcome = installer.install_in_unity_project([request])

    # A declined safe-mode prompt is a user choice, not a failure
    if outcome.state in (InstallState.DONE, InstallState.ABORTED):
        return ExitCodes.SUCCESS.value
    logger.error("Installation of %s %s failed (%s)",
                 args.package_name, args.package_version, outcome.failed_stage)
    return ExitCodes.INSTALL_ERROR.value


def run(argv=None) -> int:
    """Parse ``argv``, configure logging and dispatch; returns the exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    config = resolve_config(args)
    configure_logging(config.log_level)
    log_file = getattr(args, "LOG_FILE", None)
    if log_file:
        add_file_handler(log_file)
        logger.info("Logging to file: %s", log_file)

    if is_debug_enabled(logger):
        logger.debug("CLI start", extra=extra_context(
            event="function_entry", component="cli", action=getattr(args, "action", None),
            resolver=config.resolver,
        ))

    if args.action is None:
        parser.print_help()
        return ExitCodes.SUCCESS.value
    if args.action == "nuget":
        if getattr(args, "nuget_command", None) != "install":
            args.print_category_help()
            return ExitCodes.SUCCESS.value
        return run_nuget_install(args, config)

    parser.print_help()
    return ExitCodes.USAGE_ERROR.value


def main():
    """Main function of the program."""
    sys.exit(run())


if __name__ == "__main__":
    main()
