"""Command-line entry for calendarseal.

Builds the encrypted calendar artifact, or decrypts one for inspection.
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
from typing import NoReturn, Optional

from . import __version__
from .config_loader import load_config, load_key
from .exceptions import CalendarSealError, ConfigurationError
from .logging_config import configure_logging
from .output.serializer import serialize
from .pipeline import decrypt_artifact, run

logger = logging.getLogger(__name__)


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"{value!r} is not an integer") from e
    if number <= 0:
        raise argparse.ArgumentTypeError(f"{value!r} must be positive")
    return number


def _create_parser() -> argparse.ArgumentParser:
    """Create argument parser for the calendarseal CLI.

    Returns:
        Configured argument parser
    """
    parser = argparse.ArgumentParser(
        prog="calendarseal",
        description="Encrypt the next week of one or more ICS calendars",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  CALENDAR_1=https://example.com/a.ics CAL_KEY=... calendarseal
  calendarseal --config calendarseal.yaml --days 14
  calendarseal decrypt docs/cal.aes
        """,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--config",
        metavar="PATH",
        help="YAML/JSON config file (default: ./calendarseal.yaml when present)",
    )
    parser.add_argument("--output", metavar="PATH", help="Artifact path (default: docs/cal.aes)")
    parser.add_argument(
        "--days", type=_positive_int, metavar="N", help="Window length in days (default: 7)"
    )
    parser.add_argument("--timezone", metavar="TZ", help="Reference timezone (default: local)")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command")
    decrypt = subparsers.add_parser("decrypt", help="Decrypt an artifact and print its JSON")
    decrypt.add_argument("artifact", metavar="PATH", help="Encrypted artifact to read")
    # Separate dest: subparser defaults would otherwise overwrite a top-level --config
    decrypt.add_argument("--config", dest="decrypt_config", metavar="PATH", help="Config file")

    return parser


def _build(args: argparse.Namespace) -> int:
    config = load_config(args.config)
    overrides = {
        "output_path": args.output,
        "window_days": args.days,
        "timezone": args.timezone,
    }
    config = dataclasses.replace(config, **{k: v for k, v in overrides.items() if v is not None})
    if not args.debug:
        configure_logging(config.log_level)

    run(config)
    return 0


def _decrypt(args: argparse.Namespace) -> int:
    calendar = decrypt_artifact(args.artifact, load_key(args.decrypt_config or args.config))
    print(serialize(calendar).decode("utf-8"))
    return 0


def main(argv: Optional[list[str]] = None) -> NoReturn:
    """Run the calendarseal CLI and exit with its status."""
    parser = _create_parser()
    args = parser.parse_args(argv)
    configure_logging(debug_mode=args.debug)

    try:
        status = _decrypt(args) if args.command == "decrypt" else _build(args)
    except ConfigurationError as exc:
        logger.error("Configuration error: %s", exc)
        status = 2
    except CalendarSealError as exc:
        logger.error("%s: %s", type(exc).__name__, exc)
        status = 1
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        status = 130  # 128 + SIGINT

    sys.exit(status)


if __name__ == "__main__":
    main()
