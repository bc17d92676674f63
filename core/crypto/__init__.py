"""
Core cryptographic utilities.

Hash primitives used by the commitment tree, proofs and block headers.
"""
from .hashing import (
    DIGEST_SIZE,
    ZERO_HASH,
    sha256,
    double_sha256,
    require_digest,
    merkle_combine,
    transaction_id,
    is_zero_hash,
    hash_to_display,
    display_to_hash,
    to_hex,
    from_hex,
    checksum,
    verify_checksum,
)

__all__ = [
    "DIGEST_SIZE",
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
