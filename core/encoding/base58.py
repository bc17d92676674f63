"""
Base58 and Base58Check codec.

Leading zero bytes are preserved as leading '1' characters. Base58Check
prepends a 1-byte version and appends checksum(version || payload).
"""
from __future__ import annotations

from core.crypto.hashing import CHECKSUM_SIZE, checksum, verify_checksum
from core.schemas.errors import (
    ChecksumException,
    FormatException,
    TruncatedDataException,
)


BASE58_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"

_DECODE_MAP: dict[str, int] = {char: i for i, char in enumerate(BASE58_ALPHABET)}


def b58encode(data: bytes) -> str:
    """Encode bytes as Base58. Empty input encodes to the empty string."""
    if not data:
        return ""

    leading_zeros = len(data) - len(data.lstrip(b"\x00"))
    num = int.from_bytes(data, "big")

    encoded: list[str] = []
    while num > 0:
        num, remainder = divmod(num, 58)
        encoded.append(BASE58_ALPHABET[remainder])

    return "1" * leading_zeros + "".join(reversed(encoded))


def validate_base58(encoded: str) -> None:
    """
    Check that a string is non-empty and uses only the Base58 alphabet.

    Raises:
        FormatException: On an empty string or the first invalid character
    """
    if not encoded:
        raise FormatException("Base58 string is empty")
    for position, char in enumerate(encoded):
        if char not in _DECODE_MAP:
            raise FormatException(
                f"Invalid Base58 character {char!r} at position {position}",
                details={"position": position},
            )


def is_valid_base58(encoded: str) -> bool:
    try:
        validate_base58(encoded)
    except FormatException:
        return False
    return True


def b58decode(encoded: str) -> bytes:
    """
    Decode a Base58 string.

    Raises:
        FormatException: If the string contains a character outside the alphabet
    """
    if not encoded:
        return b""
    validate_base58(encoded)

    leading_ones = len(encoded) - len(encoded.lstrip("1"))
    num = 0
    for char in encoded:
        num = num * 58 + _DECODE_MAP[char]

    body = num.to_bytes((num.bit_length() + 7) // 8, "big") if num else b""
    return b"\x00" * leading_ones + body


def b58check_encode(payload: bytes, version: int) -> str:
    """Encode version || payload || checksum as Base58."""
    if not 0 <= version <= 0xFF:
        raise ValueError(f"Version must fit in one byte, got {version}")
    versioned = bytes([version]) + payload
    return b58encode(versioned + checksum(versioned))


def b58check_decode(encoded: str) -> tuple[bytes, int]:
    """
    Decode a Base58Check string.

    Returns:
        (payload, version)

    Raises:
        FormatException: On invalid Base58 characters
        TruncatedDataException: If fewer than 5 bytes decode
        ChecksumException: If the checksum does not match
    """
    decoded = b58decode(encoded)
    minimum = 1 + CHECKSUM_SIZE
    if len(decoded) < minimum:
        raise TruncatedDataException(
            f"Base58Check payload needs at least {minimum} bytes, got {len(decoded)}",
            needed=minimum,
            available=len(decoded),
        )

    versioned, check = decoded[:-CHECKSUM_SIZE], decoded[-CHECKSUM_SIZE:]
    if not verify_checksum(versioned, check):
        raise ChecksumException("Base58Check checksum mismatch")

    return versioned[1:], versioned[0]


__all__ = [
    "BASE58_ALPHABET",
    "b58encode",
    "b58decode",
    "b58check_encode",
    "b58check_decode",
    "validate_base58",
    "is_valid_base58",
]
