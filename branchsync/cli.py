"""Command line entry point for branchsync."""

import argparse
import logging
import sys
from dataclasses import replace
from typing import List, Optional

from rich.text import Text

from . import __version__
from .config import Config, load_configuration
from .errors import SetupError
from .git_sync.manager import BranchSyncManager
from .platform import validate_git_availability
from .report import Reporter

VERBOSITY_LEVELS = {1: "INFO", 2: "DEBUG"}


def setup_logging(config: Config) -> None:
    """Configure the package loggers; log records go to stderr."""
    class StructuredFormatter(logging.Formatter):
        def format(self, record):
            if hasattr(record, 'operation'):
                record.msg = f"[{record.operation}] {record.msg}"
            return super().format(record)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(StructuredFormatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    ))

    logger = logging.getLogger('branchsync')
    logger.setLevel(getattr(logging, config.log_level))
    logger.handlers[:] = [handler]
    logger.propagate = False


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="branchsync",
        description="Fetch a remote and fast-forward, repoint or delete local branches to match it.",
    )
    parser.add_argument("-v", "--verbose", action="count", default=0,
                        help="log progress (-v) or every git command (-vv)")
    parser.add_argument("-C", dest="repo_dir", metavar="PATH",
                        help="run in PATH instead of the current directory")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Run branchsync; returns the process exit status."""
    args = build_parser().parse_args(argv)

    try:
        config = load_configuration()
        if args.repo_dir:
            config = replace(config, repo_dir=args.repo_dir)
    except ValueError as e:
        print(f"branchsync: {e}", file=sys.stderr)
        return 1

    if args.verbose:
        config.log_level = VERBOSITY_LEVELS[min(args.verbose, 2)]
    setup_logging(config)
    logger = logging.getLogger('branchsync.cli')

    available, error = validate_git_availability()
    if not available:
        logger.error(error)
        print(f"branchsync: {error}", file=sys.stderr)
        return 1

    reporter = Reporter()
    try:
        manager = BranchSyncManager(config)
        manager.run(on_result=reporter.report)
    except SetupError as e:
        logger.debug("Setup failed", exc_info=True)
        reporter.console.print(Text.assemble(("Error:", "red"), f" {e}"))
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        return 130

    return 0
