"""
Genesis Commitment
Construction and validation of the first block of a chain.

The genesis block is a pure function of GenesisParams. It is handed to
callers as an explicit immutable GenesisCommitment; default_genesis()
is a read-only accessor over the commitment for default parameters,
computed once on first use.
"""
from __future__ import annotations

import logging
import struct
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from functools import lru_cache
from typing import Optional

from core.config.runtime import GenesisParams
from core.crypto.hashing import ZERO_HASH, hash_to_display
from core.encoding.varint import encode_varint
from core.chain.block import Block, BlockHeader, Transaction
from core.merkle.merkle_tree import build_merkle_root
from core.schemas.errors import BlockValidationException
from core.schemas.reports import GenesisInfo


logger = logging.getLogger(__name__)

COINBASE_PREV_INDEX = 0xFFFFFFFF
COINBASE_SEQUENCE = 0xFFFFFFFF


def build_coinbase_payload(message: str, reward: int) -> bytes:
    """
    Serialize the genesis coinbase transaction.

    version (u32) | 1 input | null outpoint (32 zero bytes, index 0xffffffff) |
    script (VarInt length + message) | sequence | 1 output |
    value (u64) | empty output script | lock time (u32)
    """
    script = message.encode("utf-8")
    return b"".join([
        struct.pack("<I", 1),
        encode_varint(1),
        ZERO_HASH,
        struct.pack("<I", COINBASE_PREV_INDEX),
        encode_varint(len(script)),
        script,
        struct.pack("<I", COINBASE_SEQUENCE),
        encode_varint(1),
        struct.pack("<Q", reward),
        encode_varint(0),
        struct.pack("<I", 0),
    ])


def create_genesis_block(params: Optional[GenesisParams] = None) -> Block:
    """Build the genesis block for ``params`` (defaults when omitted)."""
    params = params or GenesisParams()
    coinbase = Transaction(build_coinbase_payload(params.coinbase_message, params.reward))
    header = BlockHeader(
        version=params.version,
        prev_hash=ZERO_HASH,
        merkle_root=build_merkle_root([coinbase.txid]),
        timestamp=params.timestamp,
        bits=params.bits,
        nonce=params.nonce,
    )
    return Block(header, (coinbase,))


@dataclass(frozen=True)
class GenesisCommitment:
    """
    The genesis block together with the parameters that produced it.

    Attributes:
        params: Parameters the block was built from
        block: The genesis block
        hash: Header hash of the block
    """
    params: GenesisParams
    block: Block
    hash: bytes

    @classmethod
    def create(cls, params: Optional[GenesisParams] = None) -> "GenesisCommitment":
        params = replace(params) if params else GenesisParams()
        block = create_genesis_block(params)
        commitment = cls(params=params, block=block, hash=block.hash())
        logger.debug("Created genesis commitment %s", hash_to_display(commitment.hash))
        return commitment

    def is_genesis_hash(self, digest: bytes) -> bool:
        return digest == self.hash


@lru_cache(maxsize=1)
def default_genesis() -> GenesisCommitment:
    """Commitment for default GenesisParams, built once."""
    return GenesisCommitment.create(GenesisParams())


def is_genesis_block(block: Optional[Block], genesis: GenesisCommitment) -> bool:
    if block is None:
        return False
    return block.hash() == genesis.hash


def validate_genesis_block(block: Optional[Block], genesis: GenesisCommitment) -> None:
    """
    Check a candidate genesis block field by field against ``genesis``.

    Raises:
        BlockValidationException: On the first mismatching field
    """
    if block is None:
        raise BlockValidationException("Genesis block is missing", reason="missing")

    params = genesis.params
    header = block.header

    if header.version != params.version:
        raise BlockValidationException(
            f"Genesis version mismatch: expected {params.version}, got {header.version}",
            reason="version",
        )
    if header.prev_hash != ZERO_HASH:
        raise BlockValidationException(
            "Genesis previous hash must be all zero", reason="prev_hash"
        )
    if header.timestamp != params.timestamp:
        raise BlockValidationException(
            f"Genesis timestamp mismatch: expected {params.timestamp}, got {header.timestamp}",
            reason="timestamp",
        )
    if header.bits != params.bits:
        raise BlockValidationException(
            f"Genesis bits mismatch: expected 0x{params.bits:08x}, got 0x{header.bits:08x}",
            reason="bits",
        )
    if header.nonce != params.nonce:
        raise BlockValidationException(
            f"Genesis nonce mismatch: expected {params.nonce}, got {header.nonce}",
            reason="nonce",
        )
    if block.tx_count != 1:
        raise BlockValidationException(
            f"Genesis block must hold exactly one transaction, got {block.tx_count}",
            reason="tx_count",
        )
    if block.merkle_root() != header.merkle_root:
        raise BlockValidationException(
            "Genesis merkle root does not match its transaction",
            reason="merkle_root_mismatch",
        )
    if not is_genesis_block(block, genesis):
        raise BlockValidationException("Genesis hash mismatch", reason="hash")


def genesis_info(genesis: GenesisCommitment) -> GenesisInfo:
    block = genesis.block
    header = block.header
    timestamp_iso = (
        datetime.fromtimestamp(header.timestamp, tz=timezone.utc)
        .isoformat()
        .replace("+00:00", "Z")
    )
    return GenesisInfo(
        hash=hash_to_display(genesis.hash),
        version=header.version,
        prev_hash=hash_to_display(header.prev_hash),
        merkle_root=hash_to_display(header.merkle_root),
        timestamp=header.timestamp,
        timestamp_iso=timestamp_iso,
        bits=f"0x{header.bits:08x}",
        nonce=header.nonce,
        difficulty=header.difficulty(),
        size=block.size(),
        tx_count=block.tx_count,
    )


__all__ = [
    "build_coinbase_payload",
    "create_genesis_block",
    "GenesisCommitment",
    "default_genesis",
    "is_genesis_block",
    "validate_genesis_block",
    "genesis_info",
]
