"""simulta command line entry point.

Parses arguments, configures logging and translates the run verdict into
an exit code.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from . import __version__
from .config import Config, FramingPolicy, get_config
from .coordinator import simulta
from .types import Failure, Success

__all__ = ["build_parser", "parse_names", "configure_logging", "main"]

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="simulta",
        description="simulta - run multiple commands simultaneously",
        epilog="Commands are run through $SHELL (sh when unset).",
    )
    parser.add_argument(
        "commands",
        nargs="*",
        metavar="command",
        help="shell command to run; quote commands containing spaces",
    )
    parser.add_argument(
        "--prefix",
        action="store_true",
        help="prefix each command's output with its index (by default) or name (if --names is used)",
    )
    parser.add_argument(
        "--names",
        metavar="NAME1,NAME2",
        help="comma-separated list of names to prefix commands with",
    )
    parser.add_argument(
        "--framing",
        choices=[policy.value for policy in FramingPolicy],
        help="cut output into one unit per line (default) or per read chunk",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def parse_names(value: str | None) -> list[str] | None:
    """Split a ``--names`` value on commas."""
    if value is None:
        return None
    return value.split(",")


def configure_logging(config: Config) -> None:
    """Configure logging for the CLI.

    Logs go to a debug file when SIMULTA_LOG_DEBUG is on; otherwise only
    warnings reach stderr, where they share the terminal with command
    output.
    """
    if config.log_debug and config.log_file:
        handler: logging.Handler = logging.FileHandler(config.log_file, encoding="utf-8")
        log_level = logging.DEBUG
    else:
        handler = logging.StreamHandler(sys.stderr)
        log_level = logging.WARNING
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    logging.basicConfig(level=logging.WARNING, handlers=[handler])
    logging.getLogger("simulta").setLevel(log_level)


def main(argv: list[str] | None = None) -> int:
    """Run the CLI and return its exit code."""
    parser = build_parser()
    args = parser.parse_intermixed_args(argv)

    if not args.commands:
        parser.print_help()
        return 0

    config = get_config()
    configure_logging(config)
    logger.debug(f"Starting simulta: {config}")

    framing = FramingPolicy(args.framing) if args.framing else config.framing
    result = asyncio.run(
        simulta(
            args.commands,
            stdout=sys.stdout.buffer,
            stderr=sys.stderr.buffer,
            names=parse_names(args.names),
            prefix=args.prefix,
            framing=framing,
            shell=config.shell,
        )
    )

    if isinstance(result, Success):
        return 0
    if isinstance(result, Failure):
        if result.error is not None:
            print(result.error, file=sys.stderr)
        return 1
    raise TypeError(f"Unexpected run result: {result!r}")


if __name__ == "__main__":
    sys.exit(main())
