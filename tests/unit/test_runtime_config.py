"""
Runtime Configuration Unit Tests
Tests for core/config/runtime.py
"""
import pytest

from core.config.runtime import (
    ChainParams,
    GenesisParams,
    LoggingConfig,
    RuntimeConfig,
    get_default_config,
    set_default_config,
)


class TestDefaults:
    """Tests for default values."""

    def test_chain_defaults(self):
        chain = ChainParams()

        assert chain.max_target_bits == 0x1D00FFFF
        assert chain.target_block_time == 600
        assert chain.adjustment_interval == 2016
        assert chain.target_timespan == 600 * 2016
        assert chain.max_time_offset == 7200

    def test_genesis_defaults(self):
        genesis = GenesisParams()

        assert genesis.timestamp == 1635724800
        assert genesis.bits == 0x1D00FFFF
        assert genesis.nonce == 0
        assert genesis.reward == 5_000_000_000

    def test_logging_defaults(self):
        assert LoggingConfig().level == "INFO"
        assert LoggingConfig().file is None


class TestFromDict:
    """Tests for RuntimeConfig.from_dict()."""

    def test_empty_dict_gives_defaults(self):
        config = RuntimeConfig.from_dict({})

        assert config.chain == ChainParams()
        assert config.genesis == GenesisParams()

    def test_partial_sections(self):
        config = RuntimeConfig.from_dict({
            "chain": {"target_block_time": 60},
            "logging": {"level": "DEBUG"},
            "extra": {"note": "x"},
        })

        assert config.chain.target_block_time == 60
        assert config.chain.adjustment_interval == 2016
        assert config.logging.level == "DEBUG"
        assert config.extra == {"note": "x"}

    def test_unknown_key_rejected(self):
        with pytest.raises(TypeError):
            RuntimeConfig.from_dict({"chain": {"no_such_field": 1}})

    def test_to_dict_round_trip(self):
        config = RuntimeConfig.from_dict({"genesis": {"nonce": 5}})

        assert RuntimeConfig.from_dict(config.to_dict()) == config


class TestFromYaml:
    """Tests for RuntimeConfig.from_yaml()."""

    def test_load(self, tmp_path):
        path = tmp_path / "chainproof.yaml"
        path.write_text(
            "chain:\n"
            "  max_transactions: 50\n"
            "genesis:\n"
            "  coinbase_message: test chain\n"
        )

        config = RuntimeConfig.from_yaml(path)

        assert config.chain.max_transactions == 50
        assert config.genesis.coinbase_message == "test chain"

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")

        assert RuntimeConfig.from_yaml(path) == RuntimeConfig()

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            RuntimeConfig.from_yaml(tmp_path / "missing.yaml")


class TestEnvironment:
    """Tests for CHAINPROOF_* environment variables."""

    def test_from_env(self, clean_env):
        clean_env.setenv("CHAINPROOF_TARGET_BLOCK_TIME", "120")
        clean_env.setenv("CHAINPROOF_GENESIS_BITS", "0x1c00ffff")
        clean_env.setenv("CHAINPROOF_LOG_LEVEL", "debug")

        config = RuntimeConfig.from_env()

        assert config.chain.target_block_time == 120
        assert config.genesis.bits == 0x1C00FFFF
        assert config.logging.level == "DEBUG"

    def test_invalid_integer(self, clean_env):
        clean_env.setenv("CHAINPROOF_MAX_BLOCK_SIZE", "big")

        with pytest.raises(ValueError, match="CHAINPROOF_MAX_BLOCK_SIZE"):
            RuntimeConfig.from_env()

    def test_with_env_overrides(self, clean_env):
        base = RuntimeConfig.from_dict({"chain": {"max_transactions": 50}})
        clean_env.setenv("CHAINPROOF_GENESIS_NONCE", "9")

        overridden = base.with_env_overrides()

        assert overridden.genesis.nonce == 9
        assert overridden.chain.max_transactions == 50
        assert base.genesis.nonce == 0
        assert overridden.chain is not base.chain

        overridden.chain.max_transactions = 1
        assert base.chain.max_transactions == 50

    def test_no_overrides_returns_same(self, clean_env):
        base = RuntimeConfig()

        assert base.with_env_overrides() is base


class TestDefaultConfig:
    """Tests for the process-wide default."""

    def test_get_default_is_cached(self, clean_env):
        assert get_default_config() is get_default_config()

    def test_set_default(self):
        config = RuntimeConfig.from_dict({"chain": {"target_block_time": 30}})
        set_default_config(config)

        assert get_default_config() is config
