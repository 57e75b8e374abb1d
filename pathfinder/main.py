#!/usr/bin/env python3
"""PathFinder - fuzzy-find a repository and jump to it.

Entry point for the CLI application.
"""

import argparse
import logging
import os
import sys

from .protocol import (
    COMMAND_RUN_EXTERNAL_PROGRAM,
    COMMAND_SCAN_REPOSITORY_ROOT,
    ON_SELECT_OPTION,
    ROOT_OPTION,
    STARTUP_MESSAGE_NAME,
    STARTUP_MESSAGE_PAYLOAD,
    PathFinderConfig,
)

logger = logging.getLogger(__name__)


def configure_logging(log_file: str | None, verbose: bool = False):
    """Send logs to a file; the TUI owns the terminal."""
    if not log_file:
        return
    logging.basicConfig(
        filename=log_file,
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_options(args) -> dict[str, str]:
    """Translate CLI arguments into the configuration mapping."""
    options: dict[str, str] = {}
    if args.root:
        options[ROOT_OPTION] = args.root
    if args.exec:
        options[ON_SELECT_OPTION] = f"exec:{args.exec}"

    if args.run:
        options[STARTUP_MESSAGE_NAME] = COMMAND_RUN_EXTERNAL_PROGRAM
        options[STARTUP_MESSAGE_PAYLOAD] = args.run
    else:
        options[STARTUP_MESSAGE_NAME] = COMMAND_SCAN_REPOSITORY_ROOT
        if args.max_depth is not None:
            options[STARTUP_MESSAGE_PAYLOAD] = args.max_depth
    return options


def cmd_find(args):
    """Launch the TUI finder."""
    from .app import PathFinderApp

    config = PathFinderConfig.load(build_options(args))
    logger.info(f"Starting in {config.root}")

    app = PathFinderApp(config)
    result = app.run()

    if result is None:
        return 1

    argv = config.on_select.argv(result)
    if argv is None:
        print(result)
        return 0

    logger.info(f"Executing {argv}")
    os.execvp(argv[0], argv)


def main():
    """Main entry point for the pathfinder CLI."""
    parser = argparse.ArgumentParser(
        description="Fuzzy-find a Git repository below a directory",
        prog="pathfinder",
    )
    parser.add_argument(
        "--version", "-v",
        action="store_true",
        help="Show version"
    )
    parser.add_argument("--root", "-r", help="Directory to scan (default: current directory)")
    parser.add_argument("--max-depth", "-d", help="Maximum directory depth to scan")
    parser.add_argument(
        "--run",
        metavar="PROGRAM[:PROGRAM...]",
        help="List candidates with external programs instead of scanning"
    )
    parser.add_argument(
        "--exec", "-e",
        metavar="COMMAND",
        help="Run COMMAND with the selection ({path} is replaced, otherwise appended)"
    )
    parser.add_argument("--log-file", help="Write logs to this file")
    parser.add_argument("--verbose", action="store_true", help="Debug-level logging")

    args = parser.parse_args()

    if args.version:
        from . import __version__
        print(f"pathfinder {__version__}")
        return

    configure_logging(args.log_file, args.verbose)
    sys.exit(cmd_find(args))


if __name__ == "__main__":
    main()
