"""
Chain Containers

Block header, block container and the genesis commitment.

Usage:
    from core.chain import Block, default_genesis

    genesis = default_genesis()
    block = Block.assemble(genesis.hash, payloads, timestamp, bits)
    block.validate()
"""
from .block import (
    BLOCK_HEADER_SIZE,
    BLOCK_VERSION_1,
    Block,
    BlockHeader,
    Transaction,
)
from .genesis import (
    GenesisCommitment,
    build_coinbase_payload,
    create_genesis_block,
    default_genesis,
    genesis_info,
    is_genesis_block,
    validate_genesis_block,
)

__all__ = [
    "BLOCK_HEADER_SIZE",
    "BLOCK_VERSION_1",
    "Block",
    "BlockHeader",
    "Transaction",
    "GenesisCommitment",
    "build_coinbase_payload",
    "create_genesis_block",
    "default_genesis",
    "genesis_info",
    "is_genesis_block",
    "validate_genesis_block",
]
