"""
Variable-length integer codec.

Wire format (little-endian payloads):
    value < 0xfd          -> 1 byte, the value itself
    value <= 0xffff       -> 0xfd + 2 bytes
    value <= 0xffffffff   -> 0xfe + 4 bytes
    otherwise             -> 0xff + 8 bytes

Used for repetition counts and length prefixes in block containers.
"""
from __future__ import annotations

import struct

from core.schemas.errors import TruncatedDataException


MAX_VARINT = 0xFFFFFFFFFFFFFFFF

PREFIX_UINT16 = 0xFD
PREFIX_UINT32 = 0xFE
PREFIX_UINT64 = 0xFF

# prefix byte -> (struct format, payload width)
_WIDE_FORMS: dict[int, tuple[str, int]] = {
    PREFIX_UINT16: ("<H", 2),
    PREFIX_UINT32: ("<I", 4),
    PREFIX_UINT64: ("<Q", 8),
}


def _check_range(value: int) -> None:
    if value < 0 or value > MAX_VARINT:
        raise ValueError(f"VarInt value out of range: {value}")


def varint_size(value: int) -> int:
    """Number of bytes encode_varint(value) will produce."""
    _check_range(value)
    if value < PREFIX_UINT16:
        return 1
    if value <= 0xFFFF:
        return 3
    if value <= 0xFFFFFFFF:
        return 5
    return 9


def encode_varint(value: int) -> bytes:
    """
    Encode a non-negative integer as a VarInt.

    Raises:
        ValueError: If value is negative or does not fit in 64 bits

    Example:
        >>> encode_varint(253).hex()
        'fdfd00'
    """
    _check_range(value)
    if value < PREFIX_UINT16:
        return bytes([value])
    if value <= 0xFFFF:
        return bytes([PREFIX_UINT16]) + struct.pack("<H", value)
    if value <= 0xFFFFFFFF:
        return bytes([PREFIX_UINT32]) + struct.pack("<I", value)
    return bytes([PREFIX_UINT64]) + struct.pack("<Q", value)


def decode_varint(data: bytes, offset: int = 0) -> tuple[int, int]:
    """
    Decode a VarInt starting at ``offset``.

    Args:
        data: Buffer holding the encoded value
        offset: Position of the prefix byte

    Returns:
        (value, consumed) where consumed is the number of bytes read

    Raises:
        TruncatedDataException: If the prefix byte or its payload is missing
    """
    if offset < 0:
        raise ValueError(f"VarInt: offset must be non-negative, got {offset}")
    if offset >= len(data):
        raise TruncatedDataException(
            "VarInt: no prefix byte available",
            needed=1,
            available=0,
        )

    first = data[offset]
    if first < PREFIX_UINT16:
        return first, 1

    fmt, width = _WIDE_FORMS[first]
    available = len(data) - offset - 1
    if available < width:
        raise TruncatedDataException(
            f"VarInt: prefix 0x{first:02x} needs {width} more bytes, {available} available",
            needed=width,
            available=available,
        )
    (value,) = struct.unpack_from(fmt, data, offset + 1)
    return value, 1 + width


__all__ = [
    "MAX_VARINT",
    "varint_size",
    "encode_varint",
    "decode_varint",
]
