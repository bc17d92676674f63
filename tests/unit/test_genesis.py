"""
Genesis Commitment Unit Tests
Tests for core/chain/genesis.py
"""
import struct
from dataclasses import FrozenInstanceError, replace

import pytest

from core.chain.block import Block
from core.chain.genesis import (
    GenesisCommitment,
    build_coinbase_payload,
    create_genesis_block,
    default_genesis,
    genesis_info,
    is_genesis_block,
    validate_genesis_block,
)
from core.config.runtime import GenesisParams
from core.crypto.hashing import ZERO_HASH, hash_to_display
from core.schemas.errors import BlockValidationException


class TestCoinbasePayload:
    """Tests for the genesis coinbase serialization."""

    def test_layout(self):
        payload = build_coinbase_payload("hi", 5_000_000_000)

        assert payload[0:4] == struct.pack("<I", 1)
        assert payload[4] == 1
        assert payload[5:37] == ZERO_HASH
        assert payload[37:41] == b"\xff\xff\xff\xff"
        assert payload[41] == 2
        assert payload[42:44] == b"hi"
        assert payload[44:48] == b"\xff\xff\xff\xff"
        assert payload[48] == 1
        assert struct.unpack_from("<Q", payload, 49)[0] == 5_000_000_000
        assert payload[57] == 0
        assert payload[58:62] == bytes(4)
        assert len(payload) == 62


class TestCreateGenesis:
    """Tests for create_genesis_block()."""

    def test_header_fields(self):
        params = GenesisParams()
        block = create_genesis_block(params)

        assert block.header.version == params.version
        assert block.header.prev_hash == ZERO_HASH
        assert block.header.timestamp == 1635724800
        assert block.header.bits == 0x1D00FFFF
        assert block.header.nonce == 0
        assert block.tx_count == 1

    def test_merkle_root_is_coinbase_txid(self):
        block = create_genesis_block()

        assert block.header.merkle_root == block.transactions[0].txid

    def test_deterministic(self):
        assert create_genesis_block().hash() == create_genesis_block().hash()

    def test_message_changes_hash(self):
        other = create_genesis_block(GenesisParams(coinbase_message="another chain"))

        assert other.hash() != create_genesis_block().hash()


class TestGenesisCommitment:
    """Tests for GenesisCommitment and the cached accessor."""

    def test_default_is_cached(self):
        assert default_genesis() is default_genesis()

    def test_hash_matches_block(self):
        genesis = default_genesis()

        assert genesis.hash == genesis.block.hash()
        assert genesis.is_genesis_hash(genesis.hash)
        assert not genesis.is_genesis_hash(ZERO_HASH)

    def test_commitment_is_frozen(self):
        with pytest.raises(AttributeError):
            default_genesis().hash = ZERO_HASH

    def test_params_immutable(self):
        with pytest.raises(FrozenInstanceError):
            GenesisParams().nonce = 99

    def test_default_params_cannot_be_altered(self):
        genesis = default_genesis()

        with pytest.raises(FrozenInstanceError):
            genesis.params.bits = 0x1C00FFFF

        assert default_genesis().params.bits == 0x1D00FFFF
        validate_genesis_block(create_genesis_block(), default_genesis())

    def test_explicit_commitment_independent_of_default(self):
        custom = GenesisCommitment.create(GenesisParams(nonce=7))

        assert custom.hash != default_genesis().hash
        assert custom.block.header.nonce == 7


class TestIdentification:
    """Tests for is_genesis_block()."""

    def test_genesis_block_recognised(self):
        genesis = default_genesis()

        assert is_genesis_block(create_genesis_block(), genesis)

    def test_other_block_rejected(self):
        genesis = default_genesis()
        other = Block.assemble(genesis.hash, [b"tx"], 1635725400, 0x1D00FFFF)

        assert not is_genesis_block(other, genesis)
        assert not is_genesis_block(None, genesis)


class TestValidateGenesis:
    """Tests for validate_genesis_block()."""

    def test_valid(self):
        genesis = default_genesis()

        validate_genesis_block(genesis.block, genesis)

    def test_missing(self):
        with pytest.raises(BlockValidationException):
            validate_genesis_block(None, default_genesis())

    @pytest.mark.parametrize("field,value,reason", [
        ("version", 2, "version"),
        ("timestamp", 1, "timestamp"),
        ("bits", 0x1C00FFFF, "bits"),
        ("nonce", 1, "nonce"),
    ])
    def test_header_field_mismatch(self, field, value, reason):
        genesis = default_genesis()
        header = replace(genesis.block.header, **{field: value})
        block = Block(header, genesis.block.transactions)

        with pytest.raises(BlockValidationException) as exc_info:
            validate_genesis_block(block, genesis)

        assert exc_info.value.details["reason"] == reason

    def test_nonzero_prev_hash(self):
        genesis = default_genesis()
        header = replace(genesis.block.header, prev_hash=b"\x01" * 32)

        with pytest.raises(BlockValidationException) as exc_info:
            validate_genesis_block(Block(header, genesis.block.transactions), genesis)

        assert exc_info.value.details["reason"] == "prev_hash"

    def test_extra_transaction(self):
        genesis = default_genesis()
        block = Block(genesis.block.header, genesis.block.transactions * 2)

        with pytest.raises(BlockValidationException) as exc_info:
            validate_genesis_block(block, genesis)

        assert exc_info.value.details["reason"] == "tx_count"

    def test_wrong_merkle_root(self):
        genesis = default_genesis()
        header = replace(genesis.block.header, merkle_root=ZERO_HASH)

        with pytest.raises(BlockValidationException) as exc_info:
            validate_genesis_block(Block(header, genesis.block.transactions), genesis)

        assert exc_info.value.details["reason"] == "merkle_root_mismatch"


class TestGenesisInfo:
    """Tests for GenesisInfo reports."""

    def test_info(self):
        genesis = default_genesis()
        info = genesis_info(genesis)

        assert info.hash == hash_to_display(genesis.hash)
        assert info.prev_hash == "0" * 64
        assert info.timestamp == 1635724800
        assert info.timestamp_iso == "2021-11-01T00:00:00Z"
        assert info.bits == "0x1d00ffff"
        assert info.difficulty == 1.0
        assert info.tx_count == 1
        assert info.size == genesis.block.size()
