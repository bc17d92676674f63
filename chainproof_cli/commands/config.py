"""
CLI Config Command

Print the effective configuration after YAML and CHAINPROOF_* overrides.

Usage:
    chainproof config --show
    chainproof --config chainproof.yaml config --show
"""

from __future__ import annotations

import json
from argparse import Namespace


EXIT_SUCCESS = 0


def config_cmd(args: Namespace) -> int:
    if not args.show:
        print("Usage: chainproof config --show")
        return EXIT_SUCCESS

    print(json.dumps(args.runtime_config.to_dict(), indent=2))
    return EXIT_SUCCESS


def add_parser(subparsers) -> None:
    """Register the ``config`` command."""
    config_parser = subparsers.add_parser(
        "config",
        help="Show effective configuration",
        description="Display the configuration after file and environment overrides.",
    )
    config_parser.add_argument(
        "--show", action="store_true", help="Print the configuration as JSON"
    )
    config_parser.set_defaults(func=config_cmd)
