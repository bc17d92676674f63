"""
Proof-of-work Module

Compact difficulty ("bits") codec, retargeting and the target inequality.
"""

from .difficulty import (
    MAX_ADJUSTMENT_FACTOR,
    MAX_EXPONENT,
    MAX_TARGET,
    MAX_TARGET_BITS,
    adjust_difficulty,
    bits_to_target,
    calculate_difficulty,
    describe_bits,
    difficulty_from_bits,
    digest_to_int,
    estimate_hash_rate,
    expand_compact,
    is_valid_bits,
    meets_target,
    split_bits,
    target_to_bits,
    validate_bits,
)

__all__ = [
    "MAX_ADJUSTMENT_FACTOR",
    "MAX_EXPONENT",
    "MAX_TARGET",
    "MAX_TARGET_BITS",
    "adjust_difficulty",
    "bits_to_target",
    "calculate_difficulty",
    "describe_bits",
    "difficulty_from_bits",
    "digest_to_int",
    "estimate_hash_rate",
    "expand_compact",
    "is_valid_bits",
    "meets_target",
    "split_bits",
    "target_to_bits",
    "validate_bits",
]
