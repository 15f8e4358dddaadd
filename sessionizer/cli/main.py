"""Main entry point for the tmux-sessionizer CLI."""

import argparse
import logging
import os
import sys
from typing import List, Optional

from ..errors import ConfigError
from ..models import ExistsPolicy
from ..settings import load_settings, setup_logging
from ..tmux_controller import TmuxController
from . import commands

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tmux-sessionizer",
        description="Pick a git repository and open a tmux session for it",
    )
    parser.add_argument(
        "directory",
        nargs="?",
        default=None,
        help="Directory to search for repositories (default: current directory)",
    )
    parser.add_argument(
        "-a", "--attach",
        action="store_true",
        help="Automatically attach to existing session if it exists",
    )
    parser.add_argument(
        "-k", "--kill",
        action="store_true",
        help="Automatically kill and recreate existing session if it exists",
    )
    parser.add_argument(
        "-c", "--current",
        action="store_true",
        help="Use current directory for session (skip directory selection)",
    )
    parser.add_argument(
        "--config",
        action="store_true",
        help="Open interactive configuration UI",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser


def resolve_search_dir(directory: Optional[str]) -> str:
    """Absolute search root: the given directory or the current one."""
    return os.path.abspath(directory) if directory else os.getcwd()


def run(argv: Optional[List[str]] = None) -> int:
    """Parse arguments and dispatch; returns the process exit code."""
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings()
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    setup_logging(settings, verbose=args.verbose)

    try:
        search_dir = resolve_search_dir(args.directory)
    except OSError as e:
        print(f"Error resolving path: {e}", file=sys.stderr)
        return 1

    if args.config:
        return commands.cmd_config(search_dir, use_current=args.current)

    policy = ExistsPolicy(force_attach=args.attach, force_recreate=args.kill)
    tmux = TmuxController(config=settings)

    if args.current:
        return commands.cmd_current(tmux, policy)
    return commands.cmd_open(tmux, search_dir, policy)


def main():
    """Main entry point for tmux-sessionizer."""
    sys.exit(run())


if __name__ == "__main__":
    main()
