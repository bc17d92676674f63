"""
CLI Difficulty Commands

Inspect and convert compact difficulty ("bits") values.

Integer arguments accept decimal or 0x-prefixed hex.

Usage:
    chainproof bits decode <bits> [--json]
    chainproof bits encode <target> [--json]
    chainproof bits validate <bits> [--json]
    chainproof bits adjust <bits> --actual SECONDS [--expected SECONDS] [--json]
    chainproof bits check <hash> <bits>
"""

from __future__ import annotations

import json
import logging
import sys
from argparse import ArgumentTypeError, Namespace

from core.crypto.hashing import display_to_hash
from core.pow.difficulty import (
    adjust_difficulty,
    bits_to_target,
    calculate_difficulty,
    describe_bits,
    estimate_hash_rate,
    meets_target,
    target_to_bits,
)
from core.schemas.errors import ChainProofException
from core.schemas.reports import DifficultyReport


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


def parse_int(value: str) -> int:
    """argparse type: decimal or 0x-prefixed hex."""
    try:
        return int(value, 0)
    except ValueError:
        raise ArgumentTypeError(f"not an integer: {value!r}")


def print_report_human(report: DifficultyReport) -> None:
    print(f"bits: {report.bits}")
    print(f"exponent: {report.exponent}")
    print(f"mantissa: 0x{report.mantissa:06x}")
    print(f"target: {report.target}")
    print(f"difficulty: {report.difficulty:.8g}")
    print(f"valid: {str(report.valid).lower()}")
    if report.error:
        print(f"error: {report.error}")


def decode_cmd(args: Namespace) -> int:
    """Decode bits into exponent, mantissa, target and difficulty."""
    report = describe_bits(args.bits)
    if args.json:
        print(report.model_dump_json(indent=2))
    else:
        print_report_human(report)
        block_time = args.runtime_config.chain.target_block_time
        rate = estimate_hash_rate(report.difficulty, block_time)
        print(f"hash_rate: {rate:.6g} H/s at {block_time}s per block")
    return EXIT_SUCCESS


def encode_cmd(args: Namespace) -> int:
    """Encode a full target as compact bits."""
    try:
        bits = target_to_bits(args.target)
    except ChainProofException as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    if args.json:
        print(json.dumps({
            "target": hex(args.target),
            "bits": f"0x{bits:08x}",
            "difficulty": calculate_difficulty(args.target),
        }, indent=2))
    else:
        print(f"0x{bits:08x}")
    return EXIT_SUCCESS


def validate_cmd(args: Namespace) -> int:
    """Exit 0 for acceptable bits, 2 otherwise."""
    report = describe_bits(args.bits)
    if args.json:
        print(report.model_dump_json(indent=2))
    elif report.valid:
        print(f"{report.bits}: valid")
    else:
        print(f"{report.bits}: invalid ({report.error})")
    return EXIT_SUCCESS if report.valid else EXIT_VERIFICATION_FAILED


def adjust_cmd(args: Namespace) -> int:
    """Retarget from an observed window duration."""
    expected = args.expected
    if expected is None:
        expected = args.runtime_config.chain.target_timespan

    new_bits = adjust_difficulty(args.actual, expected, args.bits)
    if args.json:
        print(json.dumps({
            "previous": describe_bits(args.bits).model_dump(),
            "adjusted": describe_bits(new_bits).model_dump(),
            "actual_seconds": args.actual,
            "expected_seconds": expected,
        }, indent=2))
    else:
        print(f"0x{new_bits:08x}")
    return EXIT_SUCCESS


def check_cmd(args: Namespace) -> int:
    """Exit 0 if the hash satisfies the bits' target, 2 otherwise."""
    try:
        digest = display_to_hash(args.hash)
    except ChainProofException as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    ok = meets_target(digest, bits_to_target(args.bits))
    print(f"meets_target: {str(ok).lower()}")
    return EXIT_SUCCESS if ok else EXIT_VERIFICATION_FAILED


def add_parser(subparsers) -> None:
    """Register the ``bits`` command group."""
    bits_parser = subparsers.add_parser(
        "bits",
        help="Inspect and convert compact difficulty values",
        description="Compact difficulty (bits) codec, validation and retargeting.",
    )
    bits_sub = bits_parser.add_subparsers(dest="bits_command", help="Bits operation")

    decode_parser = bits_sub.add_parser("decode", help="Decode a bits value")
    decode_parser.add_argument("bits", type=parse_int, help="Compact bits")
    decode_parser.add_argument("--json", action="store_true", help="JSON output")
    decode_parser.set_defaults(func=decode_cmd)

    encode_parser = bits_sub.add_parser("encode", help="Encode a target as bits")
    encode_parser.add_argument("target", type=parse_int, help="Full target")
    encode_parser.add_argument("--json", action="store_true", help="JSON output")
    encode_parser.set_defaults(func=encode_cmd)

    validate_parser = bits_sub.add_parser("validate", help="Validate a bits value")
    validate_parser.add_argument("bits", type=parse_int, help="Compact bits")
    validate_parser.add_argument("--json", action="store_true", help="JSON output")
    validate_parser.set_defaults(func=validate_cmd)

    adjust_parser = bits_sub.add_parser("adjust", help="Retarget after a window")
    adjust_parser.add_argument("bits", type=parse_int, help="Bits in force during the window")
    adjust_parser.add_argument(
        "--actual", type=int, required=True, help="Seconds the window actually took"
    )
    adjust_parser.add_argument(
        "--expected",
        type=int,
        default=None,
        help="Seconds the window should take (default: block time * interval)",
    )
    adjust_parser.add_argument("--json", action="store_true", help="JSON output")
    adjust_parser.set_defaults(func=adjust_cmd)

    check_parser = bits_sub.add_parser("check", help="Test a hash against a target")
    check_parser.add_argument("hash", help="Hash in display hex")
    check_parser.add_argument("bits", type=parse_int, help="Compact bits")
    check_parser.set_defaults(func=check_cmd)

    bits_parser.set_defaults(func=lambda args: bits_parser.print_help() or EXIT_SUCCESS)
