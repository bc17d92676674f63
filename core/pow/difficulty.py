"""
Compact Difficulty Codec
Conversion between compact "bits" values and full-precision targets.

A bits value packs a 1-byte exponent and a 3-byte mantissa:
    bits = (exponent << 24) | mantissa
    target = mantissa * 256 ** (exponent - 3)

This module provides:
- bits_to_target / target_to_bits
- validate_bits: reject zero, out-of-range exponent, zero mantissa,
  and targets above MAX_TARGET
- calculate_difficulty: MAX_TARGET / target with rational intermediates
- adjust_difficulty: retarget clamped to a factor of 4 and MAX_TARGET
- meets_target: proof-of-work inequality for a 32-byte digest

All functions are pure; nothing here holds state.
"""
from __future__ import annotations

import logging
from fractions import Fraction

from core.crypto.hashing import DIGEST_SIZE
from core.schemas.errors import InvalidDifficultyException
from core.schemas.reports import DifficultyReport


logger = logging.getLogger(__name__)

# Lowest difficulty: 0x00ffff * 256 ** (0x1d - 3)
MAX_TARGET_BITS = 0x1D00FFFF
MAX_TARGET = 0x00FFFF << (8 * (0x1D - 3))

# Largest exponent accepted by validate_bits (bytes in a digest)
MAX_EXPONENT = DIGEST_SIZE

MANTISSA_MASK = 0x00FFFFFF
MANTISSA_BYTES = 3

# Retarget bound: the target moves by at most this factor per adjustment
MAX_ADJUSTMENT_FACTOR = 4

# Hashes per unit of difficulty (the 32-bit nonce space)
HASHES_PER_DIFFICULTY = 2 ** 32


def split_bits(bits: int) -> tuple[int, int]:
    """Split a bits value into (exponent, mantissa)."""
    return bits >> 24, bits & MANTISSA_MASK


def expand_compact(bits: int) -> int:
    """
    Expand bits into a target without clamping.

    For exponent <= 3 the mantissa is shifted right (truncated); otherwise
    it is shifted left by whole bytes.
    """
    exponent, mantissa = split_bits(bits)
    if exponent <= MANTISSA_BYTES:
        return mantissa >> (8 * (MANTISSA_BYTES - exponent))
    return mantissa << (8 * (exponent - MANTISSA_BYTES))


def bits_to_target(bits: int) -> int:
    """
    Convert compact bits to a target, clamped to MAX_TARGET.

    Example:
        >>> hex(bits_to_target(0x1d00ffff))
        '0xffff0000000000000000000000000000000000000000000000000000'
    """
    target = expand_compact(bits)
    if target > MAX_TARGET:
        return MAX_TARGET
    return target


def _normalize_sign_bit(mantissa: int, exponent: int) -> tuple[int, int]:
    """
    Keep the mantissa's top bit clear.

    A mantissa whose most significant byte is >= 0x80 would read as
    negative in the compact format, so one byte of precision is dropped
    and the exponent grows by one.
    """
    if mantissa & 0x800000:
        return mantissa >> 8, exponent + 1
    return mantissa, exponent


def target_to_bits(target: int) -> int:
    """
    Encode a target as compact bits.

    Targets of up to 3 bytes are stored verbatim with the byte length as
    exponent. Longer targets keep their top 3 bytes, adjusted by
    _normalize_sign_bit.

    Returns:
        Compact bits, or 0 for a target <= 0

    Raises:
        InvalidDifficultyException: If the exponent would not fit in a byte
    """
    if target <= 0:
        return 0

    length = (target.bit_length() + 7) // 8
    if length <= MANTISSA_BYTES:
        mantissa, exponent = target, length
    else:
        mantissa = target >> (8 * (length - MANTISSA_BYTES))
        mantissa, exponent = _normalize_sign_bit(mantissa, length)

    if exponent > 0xFF:
        raise InvalidDifficultyException(
            f"Target needs a {exponent}-byte exponent and cannot be encoded"
        )
    return (exponent << 24) | mantissa


def validate_bits(bits: int) -> None:
    """
    Check that a bits value is acceptable.

    Raises:
        InvalidDifficultyException: If bits is zero, the exponent is 0 or
            above MAX_EXPONENT, the mantissa is zero, or the target exceeds
            MAX_TARGET
    """
    if bits == 0:
        raise InvalidDifficultyException("Difficulty bits must not be zero", bits=bits)

    exponent, mantissa = split_bits(bits)
    if exponent == 0 or exponent > MAX_EXPONENT:
        raise InvalidDifficultyException(
            f"Invalid exponent {exponent} (must be 1..{MAX_EXPONENT})",
            bits=bits,
        )
    if mantissa == 0:
        raise InvalidDifficultyException("Mantissa must not be zero", bits=bits)
    if expand_compact(bits) > MAX_TARGET:
        raise InvalidDifficultyException("Target exceeds maximum target", bits=bits)


def is_valid_bits(bits: int) -> bool:
    try:
        validate_bits(bits)
    except InvalidDifficultyException:
        return False
    return True


def calculate_difficulty(target: int) -> float:
    """MAX_TARGET / target as a float; 0 for a target <= 0."""
    if target <= 0:
        return 0.0
    return float(Fraction(MAX_TARGET, target))


def difficulty_from_bits(bits: int) -> float:
    return calculate_difficulty(bits_to_target(bits))


def adjust_difficulty(actual_duration: int, target_duration: int, current_bits: int) -> int:
    """
    Retarget from observed versus expected duration.

    new_target = current_target * actual / target (truncating), clamped
    to [current_target / 4, current_target * 4] and then to MAX_TARGET.

    Args:
        actual_duration: Seconds the last window actually took
        target_duration: Seconds the window should have taken
        current_bits: Bits in force during the window

    Returns:
        New compact bits; current_bits unchanged if a duration is <= 0
    """
    if actual_duration <= 0 or target_duration <= 0:
        return current_bits

    current_target = bits_to_target(current_bits)
    new_target = current_target * int(actual_duration) // int(target_duration)

    lower = current_target // MAX_ADJUSTMENT_FACTOR
    upper = current_target * MAX_ADJUSTMENT_FACTOR
    new_target = max(lower, min(new_target, upper))
    new_target = min(new_target, MAX_TARGET)

    new_bits = target_to_bits(new_target)
    logger.debug(
        "Adjusted difficulty: actual=%ds target=%ds bits 0x%08x -> 0x%08x",
        actual_duration, target_duration, current_bits, new_bits,
    )
    return new_bits


def digest_to_int(digest: bytes) -> int:
    """Read a digest as an integer, last byte most significant."""
    return int.from_bytes(digest, "little")


def meets_target(digest: bytes, target: int) -> bool:
    """
    Proof-of-work inequality: digest (little-endian integer) <= target.

    Returns False, without raising, for anything that is not 32 bytes.
    """
    if not isinstance(digest, (bytes, bytearray)) or len(digest) != DIGEST_SIZE:
        return False
    return digest_to_int(digest) <= target


def estimate_hash_rate(difficulty: float, block_time: int) -> float:
    """Hashes per second needed to find a block every ``block_time`` seconds."""
    if block_time <= 0:
        return 0.0
    return difficulty * HASHES_PER_DIFFICULTY / block_time


def describe_bits(bits: int) -> DifficultyReport:
    """Decode a bits value into a report, recording why it is invalid."""
    exponent, mantissa = split_bits(bits)
    error: str | None = None
    try:
        validate_bits(bits)
    except InvalidDifficultyException as e:
        error = e.message
    target = bits_to_target(bits)
    return DifficultyReport(
        bits=f"0x{bits:08x}",
        exponent=exponent,
        mantissa=mantissa,
        target=hex(target),
        difficulty=calculate_difficulty(target),
        valid=error is None,
        error=error,
    )


__all__ = [
    "MAX_TARGET_BITS",
    "MAX_TARGET",
    "MAX_EXPONENT",
    "MAX_ADJUSTMENT_FACTOR",
    "split_bits",
    "expand_compact",
    "bits_to_target",
    "target_to_bits",
    "validate_bits",
    "is_valid_bits",
    "calculate_difficulty",
    "difficulty_from_bits",
    "adjust_difficulty",
    "digest_to_int",
    "meets_target",
    "estimate_hash_rate",
    "describe_bits",
]
