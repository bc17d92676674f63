"""
Hashing Utilities
Hash primitives shared by the commitment tree, proofs and block headers.

This module provides:
- SHA-256 and double SHA-256 over raw bytes
- The Merkle combine rule: double_sha256(left || right)
- Display form for digests (byte-reversed hex)
- Plain hex encoding/decoding with optional 0x prefix
- 4-byte checksums used by Base58Check

Determinism Notes:
- Always hash raw bytes exactly as given
- Operand order in merkle_combine is left then right, never swapped
"""
from __future__ import annotations

import hashlib
import hmac

from core.schemas.errors import FormatException


DIGEST_SIZE = 32
CHECKSUM_SIZE = 4

# All-zero digest: "no commitment" (root of an empty tree, genesis prev hash)
ZERO_HASH: bytes = bytes(DIGEST_SIZE)


def sha256(data: bytes) -> bytes:
    """
    Compute SHA-256 hash of raw bytes.

    Args:
        data: Raw bytes to hash

    Returns:
        32-byte SHA-256 digest

    Example:
        >>> sha256(b"hello").hex()
        '2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824'
    """
    return hashlib.sha256(data).digest()


def double_sha256(data: bytes) -> bytes:
    """
    Compute sha256(sha256(data)).

    Used for every tree-node combination, block header hashes and
    transaction identifiers.

    Args:
        data: Raw bytes to hash

    Returns:
        32-byte digest
    """
    return sha256(sha256(data))


def require_digest(value: bytes, field_name: str = "digest") -> bytes:
    """
    Check that a value is a 32-byte digest.

    Args:
        value: Candidate digest
        field_name: Name used in the error details

    Returns:
        The value as immutable bytes

    Raises:
        FormatException: If the value is not exactly 32 bytes
    """
    if not isinstance(value, (bytes, bytearray, memoryview)):
        raise FormatException(
            f"{field_name} must be bytes, got {type(value).__name__}",
            field_name=field_name,
        )
    value = bytes(value)
    if len(value) != DIGEST_SIZE:
        raise FormatException(
            f"{field_name} must be {DIGEST_SIZE} bytes, got {len(value)}",
            field_name=field_name,
            expected=DIGEST_SIZE,
            actual=len(value),
        )
    return value


def merkle_combine(left: bytes, right: bytes) -> bytes:
    """
    Compute the parent digest of two child digests.

    parent = double_sha256(left || right)

    Args:
        left: Left child digest (32 bytes)
        right: Right child digest (32 bytes)

    Returns:
        Parent digest (32 bytes)

    Raises:
        FormatException: If either operand is not 32 bytes
    """
    left = require_digest(left, "left")
    right = require_digest(right, "right")
    return double_sha256(left + right)


def transaction_id(payload: bytes) -> bytes:
    """Leaf digest of an arbitrary payload: double_sha256(payload)."""
    return double_sha256(payload)


def is_zero_hash(digest: bytes) -> bool:
    """True only for the 32-byte all-zero digest."""
    return len(digest) == DIGEST_SIZE and not any(digest)


def hash_to_display(digest: bytes) -> str:
    """
    Render a digest in display form.

    The display form is 64 hex characters with the byte order reversed
    relative to internal storage (last stored byte printed first).

    Args:
        digest: 32-byte digest

    Returns:
        64-character lowercase hex string

    Raises:
        FormatException: If digest is not 32 bytes
    """
    digest = require_digest(digest)
    return digest[::-1].hex()


def display_to_hash(text: str) -> bytes:
    """
    Parse a display-form digest back into internal byte order.

    Args:
        text: 64-character hex string in display order

    Returns:
        32-byte digest in internal order

    Raises:
        FormatException: If text is not 64 hex characters
    """
    if len(text) != DIGEST_SIZE * 2:
        raise FormatException(
            f"Display hash must be {DIGEST_SIZE * 2} hex characters, got {len(text)}",
            field_name="display_hash",
            expected=DIGEST_SIZE * 2,
            actual=len(text),
        )
    try:
        decoded = bytes.fromhex(text)
    except ValueError as e:
        raise FormatException(f"Invalid hex characters in display hash: {e}") from e
    return decoded[::-1]


def to_hex(data: bytes) -> str:
    """
    Convert bytes to hexadecimal string with 0x prefix.

    Example:
        >>> to_hex(bytes.fromhex("deadbeef"))
        '0xdeadbeef'
    """
    return "0x" + data.hex()


def from_hex(hex_string: str) -> bytes:
    """
    Convert a hexadecimal string to bytes.

    The 0x/0X prefix is optional. An odd number of digits is padded
    with a leading zero.

    Raises:
        ValueError: If the string contains non-hex characters
    """
    if hex_string.startswith(("0x", "0X")):
        hex_string = hex_string[2:]

    if len(hex_string) % 2 != 0:
        hex_string = "0" + hex_string

    try:
        return bytes.fromhex(hex_string)
    except ValueError as e:
        raise ValueError(f"Invalid hex characters in string: {e}") from e


def checksum(data: bytes) -> bytes:
    """First 4 bytes of double_sha256(data)."""
    return double_sha256(data)[:CHECKSUM_SIZE]


def verify_checksum(data: bytes, expected: bytes) -> bool:
    """
    Check a 4-byte checksum in constant time.

    Returns False (never raises) for a checksum of the wrong length.
    """
    if len(expected) != CHECKSUM_SIZE:
        return False
    return hmac.compare_digest(checksum(data), bytes(expected))


__all__ = [
    "DIGEST_SIZE",
    "CHECKSUM_SIZE",
    "ZERO_HASH",
    "sha256",
    "double_sha256",
    "require_digest",
    "merkle_combine",
    "transaction_id",
    "is_zero_hash",
    "hash_to_display",
    "display_to_hash",
    "to_hex",
    "from_hex",
    "checksum",
    "verify_checksum",
]
