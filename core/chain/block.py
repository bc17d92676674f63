"""
Block Containers
Fixed-layout block header and the transaction container around it.

This module provides:
- Transaction: opaque payload identified by double_sha256(payload)
- BlockHeader: 80-byte little-endian header with hash and target checks
- Block: header + ordered transactions, length-framed serialization,
  merkle root recomputation and structural validation

Header Layout (80 bytes, integers little-endian):
    version (u32) | prev_hash (32) | merkle_root (32) |
    timestamp (u32) | bits (u32) | nonce (u32)

Block Layout:
    header (80) | tx count (VarInt) | [payload length (VarInt) | payload] * count
"""
from __future__ import annotations

import logging
import struct
import time
from dataclasses import dataclass, field
from typing import Optional, Sequence

from core.config.runtime import ChainParams
from core.crypto.hashing import (
    ZERO_HASH,
    double_sha256,
    hash_to_display,
    require_digest,
    transaction_id,
)
from core.encoding.varint import decode_varint, encode_varint, varint_size
from core.merkle.merkle_proofs import MerkleProof
from core.merkle.merkle_tree import MerkleTree, build_merkle_root
from core.pow.difficulty import bits_to_target, calculate_difficulty, meets_target
from core.schemas.errors import (
    BlockValidationException,
    FormatException,
    TruncatedDataException,
)


logger = logging.getLogger(__name__)

BLOCK_HEADER_SIZE = 80
BLOCK_VERSION_1 = 1

_HEADER = struct.Struct("<I32s32sIII")


@dataclass(frozen=True)
class Transaction:
    """An opaque transaction payload and its identifier."""
    payload: bytes
    txid: bytes = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "payload", bytes(self.payload))
        object.__setattr__(self, "txid", transaction_id(self.payload))

    @property
    def size(self) -> int:
        return len(self.payload)

    def serialized_size(self) -> int:
        """Framed size inside a block: length prefix + payload."""
        return varint_size(len(self.payload)) + len(self.payload)

    def __repr__(self) -> str:
        return f"Transaction(txid={hash_to_display(self.txid)}, size={self.size})"


@dataclass(frozen=True)
class BlockHeader:
    """
    Block header.

    Attributes:
        version: Header format version (>= 1)
        prev_hash: Hash of the previous header (ZERO_HASH for genesis)
        merkle_root: Root of the transaction commitment tree
        timestamp: Unix seconds
        bits: Compact difficulty target
        nonce: Proof-of-work counter
    """
    version: int
    prev_hash: bytes
    merkle_root: bytes
    timestamp: int
    bits: int
    nonce: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "prev_hash", require_digest(self.prev_hash, "prev_hash"))
        object.__setattr__(
            self, "merkle_root", require_digest(self.merkle_root, "merkle_root")
        )

    def serialize(self) -> bytes:
        try:
            return _HEADER.pack(
                self.version,
                self.prev_hash,
                self.merkle_root,
                self.timestamp,
                self.bits,
                self.nonce,
            )
        except struct.error as e:
            raise FormatException(f"Header field does not fit in 32 bits: {e}") from e

    @classmethod
    def deserialize(cls, data: bytes) -> "BlockHeader":
        """
        Parse an 80-byte header.

        Raises:
            FormatException: If data is not exactly 80 bytes
        """
        if len(data) != BLOCK_HEADER_SIZE:
            raise FormatException(
                f"Block header must be {BLOCK_HEADER_SIZE} bytes, got {len(data)}",
                field_name="header",
                expected=BLOCK_HEADER_SIZE,
                actual=len(data),
            )
        version, prev_hash, merkle_root, timestamp, bits, nonce = _HEADER.unpack(data)
        return cls(version, prev_hash, merkle_root, timestamp, bits, nonce)

    def hash(self) -> bytes:
        return double_sha256(self.serialize())

    def target(self) -> int:
        return bits_to_target(self.bits)

    def difficulty(self) -> float:
        return calculate_difficulty(self.target())

    def meets_target(self) -> bool:
        """True if the header hash satisfies its own bits."""
        return meets_target(self.hash(), self.target())

    def is_valid(
        self,
        now: Optional[int] = None,
        max_time_offset: int = ChainParams.max_time_offset,
    ) -> bool:
        """
        Basic header sanity: version >= 1, timestamp at most
        ``max_time_offset`` seconds in the future, bits != 0.
        """
        if self.version < BLOCK_VERSION_1:
            return False
        if now is None:
            now = int(time.time())
        if self.timestamp > now + max_time_offset:
            return False
        if self.bits == 0:
            return False
        return True

    def __repr__(self) -> str:
        return (
            f"BlockHeader(version={self.version}, "
            f"prev_hash={hash_to_display(self.prev_hash)}, "
            f"merkle_root={hash_to_display(self.merkle_root)}, "
            f"timestamp={self.timestamp}, bits=0x{self.bits:08x}, nonce={self.nonce})"
        )


@dataclass(frozen=True)
class Block:
    """A header plus its ordered transactions."""
    header: BlockHeader
    transactions: tuple[Transaction, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "transactions", tuple(self.transactions))

    @classmethod
    def assemble(
        cls,
        prev_hash: bytes,
        payloads: Sequence[bytes],
        timestamp: int,
        bits: int,
        nonce: int = 0,
        version: int = BLOCK_VERSION_1,
    ) -> "Block":
        """Build a block whose header commits to ``payloads``."""
        transactions = tuple(Transaction(p) for p in payloads)
        root = build_merkle_root([tx.txid for tx in transactions])
        header = BlockHeader(version, prev_hash, root, timestamp, bits, nonce)
        return cls(header, transactions)

    def hash(self) -> bytes:
        return self.header.hash()

    @property
    def tx_count(self) -> int:
        return len(self.transactions)

    def transaction_ids(self) -> list[bytes]:
        return [tx.txid for tx in self.transactions]

    def merkle_root(self) -> bytes:
        """Root recomputed from the transactions (ZERO_HASH when empty)."""
        if not self.transactions:
            return ZERO_HASH
        return build_merkle_root(self.transaction_ids())

    def merkle_tree(self) -> MerkleTree:
        return MerkleTree.build(self.transaction_ids())

    def prove_transaction(self, txid: bytes) -> Optional[MerkleProof]:
        """Inclusion proof for ``txid``; None if the block does not hold it."""
        ids = self.transaction_ids()
        if txid not in ids:
            return None
        return self.merkle_tree().generate_proof(ids.index(txid))

    def has_transaction(self, txid: bytes) -> bool:
        return self.get_transaction(txid) is not None

    def get_transaction(self, txid: bytes) -> Optional[Transaction]:
        for tx in self.transactions:
            if tx.txid == txid:
                return tx
        return None

    def size(self) -> int:
        """Serialized size in bytes."""
        return (
            BLOCK_HEADER_SIZE
            + varint_size(len(self.transactions))
            + sum(tx.serialized_size() for tx in self.transactions)
        )

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def serialize(self) -> bytes:
        parts = [self.header.serialize(), encode_varint(len(self.transactions))]
        for tx in self.transactions:
            parts.append(encode_varint(len(tx.payload)))
            parts.append(tx.payload)
        return b"".join(parts)

    @classmethod
    def deserialize(
        cls,
        data: bytes,
        max_transactions: int = ChainParams.max_transactions,
    ) -> "Block":
        """
        Parse a serialized block.

        Raises:
            TruncatedDataException: If the header, a length prefix or a
                payload is cut short
            BlockValidationException: If the declared count exceeds
                ``max_transactions`` or bytes remain after the last payload
        """
        if len(data) < BLOCK_HEADER_SIZE:
            raise TruncatedDataException(
                f"Block needs at least {BLOCK_HEADER_SIZE} header bytes, got {len(data)}",
                needed=BLOCK_HEADER_SIZE,
                available=len(data),
            )
        header = BlockHeader.deserialize(bytes(data[:BLOCK_HEADER_SIZE]))
        offset = BLOCK_HEADER_SIZE

        count, consumed = decode_varint(data, offset)
        offset += consumed
        if count > max_transactions:
            raise BlockValidationException(
                f"Transaction count {count} exceeds limit {max_transactions}",
                reason="too_many_transactions",
            )

        transactions: list[Transaction] = []
        for i in range(count):
            length, consumed = decode_varint(data, offset)
            offset += consumed
            remaining = len(data) - offset
            if remaining < length:
                raise TruncatedDataException(
                    f"Transaction {i} declares {length} bytes, only {remaining} remain",
                    needed=length,
                    available=remaining,
                )
            transactions.append(Transaction(bytes(data[offset:offset + length])))
            offset += length

        if offset != len(data):
            raise BlockValidationException(
                f"{len(data) - offset} trailing bytes after last transaction",
                reason="trailing_data",
            )

        return cls(header, tuple(transactions))

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate(
        self,
        params: Optional[ChainParams] = None,
        now: Optional[int] = None,
    ) -> None:
        """
        Structural validation.

        Raises:
            BlockValidationException: For an invalid header, oversize block,
                no transactions, too many transactions or a merkle root
                that does not match the transactions
        """
        params = params or ChainParams()

        if not self.header.is_valid(now=now, max_time_offset=params.max_time_offset):
            raise BlockValidationException("Invalid block header", reason="invalid_header")

        size = self.size()
        if size > params.max_block_size:
            raise BlockValidationException(
                f"Block size {size} exceeds limit {params.max_block_size}",
                reason="block_too_large",
            )

        if not self.transactions:
            raise BlockValidationException("Block has no transactions", reason="empty_block")

        if len(self.transactions) > params.max_transactions:
            raise BlockValidationException(
                f"Block has {len(self.transactions)} transactions, "
                f"limit is {params.max_transactions}",
                reason="too_many_transactions",
            )

        if self.merkle_root() != self.header.merkle_root:
            raise BlockValidationException(
                "Merkle root does not match transactions",
                reason="merkle_root_mismatch",
                details={
                    "expected": hash_to_display(self.header.merkle_root),
                    "computed": hash_to_display(self.merkle_root()),
                },
            )

        logger.debug("Block %s validated", hash_to_display(self.hash()))

    def is_valid(self, params: Optional[ChainParams] = None, now: Optional[int] = None) -> bool:
        try:
            self.validate(params, now)
        except BlockValidationException:
            return False
        return True

    def __repr__(self) -> str:
        return (
            f"Block(hash={hash_to_display(self.hash())}, "
            f"transactions={len(self.transactions)}, size={self.size()})"
        )


__all__ = [
    "BLOCK_HEADER_SIZE",
    "BLOCK_VERSION_1",
    "Transaction",
    "BlockHeader",
    "Block",
]
