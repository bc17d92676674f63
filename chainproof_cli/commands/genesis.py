"""
CLI Genesis Command

Show the genesis commitment for the configured parameters.

Usage:
    chainproof genesis [--json] [--serialize]
"""

from __future__ import annotations

import logging
import sys
from argparse import Namespace

from core.chain.genesis import (
    GenesisCommitment,
    default_genesis,
    genesis_info,
    validate_genesis_block,
)
from core.config.runtime import GenesisParams
from core.schemas.errors import BlockValidationException


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


def load_commitment(params: GenesisParams) -> GenesisCommitment:
    """Reuse the cached commitment when the parameters are the defaults."""
    if params == GenesisParams():
        return default_genesis()
    logger.info("Building genesis from non-default parameters")
    return GenesisCommitment.create(params)


def genesis_cmd(args: Namespace) -> int:
    """Print the genesis block summary or its serialization."""
    genesis = load_commitment(args.runtime_config.genesis)

    try:
        validate_genesis_block(genesis.block, genesis)
    except BlockValidationException as e:
        print(f"Error: genesis block failed validation: {e.message}", file=sys.stderr)
        return EXIT_VERIFICATION_FAILED

    if args.serialize:
        print(genesis.block.serialize().hex())
        return EXIT_SUCCESS

    info = genesis_info(genesis)
    if args.json:
        print(info.model_dump_json(indent=2))
    else:
        print(f"hash: {info.hash}")
        print(f"version: {info.version}")
        print(f"prev_hash: {info.prev_hash}")
        print(f"merkle_root: {info.merkle_root}")
        print(f"timestamp: {info.timestamp} ({info.timestamp_iso})")
        print(f"bits: {info.bits}")
        print(f"nonce: {info.nonce}")
        print(f"difficulty: {info.difficulty:.8g}")
        print(f"size: {info.size}")
        print(f"tx_count: {info.tx_count}")
    return EXIT_SUCCESS


def add_parser(subparsers) -> None:
    """Register the ``genesis`` command."""
    genesis_parser = subparsers.add_parser(
        "genesis",
        help="Show the genesis commitment",
        description="Build and display the genesis block for the configured parameters.",
    )
    genesis_parser.add_argument("--json", action="store_true", help="JSON output")
    genesis_parser.add_argument(
        "--serialize", action="store_true", help="Print the serialized block as hex"
    )
    genesis_parser.set_defaults(func=genesis_cmd)
