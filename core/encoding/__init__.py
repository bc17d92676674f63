"""
Byte-level codecs: VarInt length prefixes and Base58/Base58Check.
"""
from .varint import (
    MAX_VARINT,
    varint_size,
    encode_varint,
    decode_varint,
)
from .base58 import (
    BASE58_ALPHABET,
    b58encode,
    b58decode,
    b58check_encode,
    b58check_decode,
    validate_base58,
    is_valid_base58,
)

__all__ = [
    "MAX_VARINT",
    "varint_size",
    "encode_varint",
    "decode_varint",
    "BASE58_ALPHABET",
    "b58encode",
    "b58decode",
    "b58check_encode",
    "b58check_decode",
    "validate_base58",
    "is_valid_base58",
]
