"""
ChainProof CLI - Main Entry Point

Every subcommand receives the resolved RuntimeConfig as
``args.runtime_config``. Configuration is read from CHAINPROOF_*
environment variables (and a .env file), optionally layered over a YAML
file given with --config.

Usage:
    chainproof [--config FILE] [--log-level LEVEL] [--debug] <command> ...

Commands:
    merkle root|proof|verify     Commitment roots and inclusion proofs
    bits decode|encode|validate|adjust|check
                                 Compact difficulty values
    genesis                      Genesis commitment for the configured params
    config --show                Effective configuration

Exit codes:
    0  success
    1  runtime error (bad input, unreadable config, ...)
    2  a proof, bits value or target check did not verify
"""

from __future__ import annotations

import argparse
import logging
import sys
import traceback
from pathlib import Path
from typing import Sequence

import yaml

from chainproof_cli import __version__
from chainproof_cli.commands import config, difficulty, genesis, merkle
from core.config.runtime import LoggingConfig, RuntimeConfig


EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def setup_logging(settings: LoggingConfig, level_override: str | None = None) -> None:
    """Send library log records to stderr, and to a file when configured."""
    level_name = (level_override or settings.level).upper()

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if settings.file:
        handlers.append(logging.FileHandler(settings.file))

    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format=settings.format,
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers,
        force=True,
    )


def load_config(path: Path | None = None) -> RuntimeConfig:
    """YAML file (when given) overlaid with CHAINPROOF_* environment variables."""
    if path is None:
        return RuntimeConfig.from_env()
    return RuntimeConfig.from_yaml(path).with_env_overrides()


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chainproof",
        description="Merkle commitments, inclusion proofs and compact difficulty values.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-c", "--config",
        type=Path,
        metavar="FILE",
        help="YAML configuration file; CHAINPROOF_* variables still override it",
    )
    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        help="Override the configured log level",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Print a traceback when a command fails",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")
    for module in (merkle, difficulty, genesis, config):
        module.add_parser(subparsers)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """
    Parse ``argv`` (default: sys.argv[1:]), run the selected command and
    return its exit code.
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return EXIT_RUNTIME_ERROR

    try:
        args.runtime_config = load_config(args.config)
    except (OSError, ValueError, TypeError, yaml.YAMLError) as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    setup_logging(args.runtime_config.logging, args.log_level)

    try:
        return args.func(args)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except Exception as e:
        if args.debug:
            traceback.print_exc()
        else:
            print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR


if __name__ == "__main__":
    sys.exit(main())
