"""
CLI Merkle Commands

Build commitment roots and inclusion proofs from the command line, and
verify serialized proofs offline.

Leaves are given in display form (64 hex characters, byte-reversed), or
as raw text payloads with --payloads, in which case each payload is
identified with double SHA-256 first.

Usage:
    chainproof merkle root <leaf> [<leaf> ...] [--payloads] [--json]
    chainproof merkle proof --index N <leaf> [<leaf> ...] [--hex] [--json]
    chainproof merkle verify <proof-hex> [--root ROOT] [--json]
"""

from __future__ import annotations

import logging
import sys
from argparse import Namespace
from typing import Sequence

from core.crypto.hashing import display_to_hash, from_hex, hash_to_display, transaction_id
from core.merkle.merkle_proofs import MerkleProof
from core.merkle.merkle_tree import MerkleTree
from core.schemas.errors import ChainProofException


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


def parse_leaves(values: Sequence[str], payloads: bool = False) -> list[bytes]:
    """Turn CLI arguments into leaf digests."""
    if payloads:
        return [transaction_id(v.encode("utf-8")) for v in values]
    return [display_to_hash(v) for v in values]


def root_cmd(args: Namespace) -> int:
    """Print the root of the tree built from the given leaves."""
    try:
        leaves = parse_leaves(args.leaves, args.payloads)
    except ChainProofException as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    tree = MerkleTree.build(leaves)
    info = tree.info()

    if args.json:
        print(info.model_dump_json(indent=2))
    else:
        print(f"root: {info.root}")
        print(f"leaves: {info.leaf_count}")
        print(f"depth: {info.depth}")
        print(f"proof_size: {info.proof_size}")
    return EXIT_SUCCESS


def proof_cmd(args: Namespace) -> int:
    """Print the inclusion proof for one leaf."""
    try:
        leaves = parse_leaves(args.leaves, args.payloads)
    except ChainProofException as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    proof = MerkleTree.build(leaves).generate_proof(args.index)
    if proof is None:
        print(
            f"Error: no leaf at index {args.index} (tree has {len(leaves)} leaves)",
            file=sys.stderr,
        )
        return EXIT_RUNTIME_ERROR

    if args.hex:
        print(proof.to_bytes().hex())
    elif args.json:
        print(proof.to_report().model_dump_json(indent=2))
    else:
        print(f"leaf: {hash_to_display(proof.leaf)}")
        print(f"index: {proof.index}")
        print(f"root: {hash_to_display(proof.root)}")
        print(f"path ({len(proof.path)}):")
        for step in proof.path:
            side = "right" if step.sibling_is_right else "left"
            print(f"  {side} {hash_to_display(step.sibling)}")
    return EXIT_SUCCESS


def verify_cmd(args: Namespace) -> int:
    """
    Verify a hex-encoded serialized proof.

    With --root the proof must also commit to that root; otherwise it is
    checked against the root it carries.
    """
    try:
        proof = MerkleProof.from_bytes(from_hex(args.proof))
        expected_root = display_to_hash(args.root) if args.root else None
    except (ChainProofException, ValueError) as e:
        message = e.message if isinstance(e, ChainProofException) else str(e)
        print(f"Error: {message}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    ok = proof.verify()
    if ok and expected_root is not None and proof.root != expected_root:
        logger.info("Proof is internally valid but commits to a different root")
        ok = False

    if args.json:
        print(proof.to_report(verified=ok).model_dump_json(indent=2))
    else:
        print(f"leaf: {hash_to_display(proof.leaf)}")
        print(f"index: {proof.index}")
        print(f"root: {hash_to_display(proof.root)}")
        print(f"verified: {str(ok).lower()}")

    if ok:
        logger.info("Proof verified")
        return EXIT_SUCCESS
    logger.warning("Proof verification failed")
    return EXIT_VERIFICATION_FAILED


def add_parser(subparsers) -> None:
    """Register the ``merkle`` command group."""
    merkle_parser = subparsers.add_parser(
        "merkle",
        help="Build roots and proofs, verify proofs",
        description="Commitment tree operations over 32-byte leaf digests.",
    )
    merkle_sub = merkle_parser.add_subparsers(dest="merkle_command", help="Merkle operation")

    root_parser = merkle_sub.add_parser("root", help="Compute the root of a set of leaves")
    root_parser.add_argument("leaves", nargs="*", help="Leaf digests in display hex")
    root_parser.add_argument(
        "--payloads", action="store_true", help="Treat arguments as text payloads"
    )
    root_parser.add_argument("--json", action="store_true", help="JSON output")
    root_parser.set_defaults(func=root_cmd)

    proof_parser = merkle_sub.add_parser("proof", help="Generate an inclusion proof")
    proof_parser.add_argument("leaves", nargs="+", help="Leaf digests in display hex")
    proof_parser.add_argument(
        "--index", "-i", type=int, required=True, help="Index of the leaf to prove"
    )
    proof_parser.add_argument(
        "--payloads", action="store_true", help="Treat arguments as text payloads"
    )
    proof_parser.add_argument(
        "--hex", action="store_true", help="Print the serialized proof as hex"
    )
    proof_parser.add_argument("--json", action="store_true", help="JSON output")
    proof_parser.set_defaults(func=proof_cmd)

    verify_parser = merkle_sub.add_parser("verify", help="Verify a serialized proof")
    verify_parser.add_argument("proof", help="Serialized proof as hex")
    verify_parser.add_argument(
        "--root", type=str, default=None, help="Expected root in display hex"
    )
    verify_parser.add_argument("--json", action="store_true", help="JSON output")
    verify_parser.set_defaults(func=verify_cmd)

    merkle_parser.set_defaults(func=lambda args: merkle_parser.print_help() or EXIT_SUCCESS)
