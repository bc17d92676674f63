"""
Runtime Configuration

Central configuration for chain parameters, the genesis commitment and logging.
"""

from __future__ import annotations

import os
from dataclasses import asdict, dataclass, field, replace
from typing import Any, Optional
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


ENV_PREFIX = "CHAINPROOF_"

DEFAULT_COINBASE_MESSAGE = (
    "ChainProof 01/Nov/2021 Deterministic commitments for an ordered ledger"
)


@dataclass
class ChainParams:
    """Consensus-adjacent limits used by block validation and retargeting."""
    max_target_bits: int = 0x1D00FFFF
    target_block_time: int = 600
    adjustment_interval: int = 2016
    max_block_size: int = 1024 * 1024
    max_transactions: int = 10000
    max_time_offset: int = 2 * 60 * 60

    @property
    def target_timespan(self) -> int:
        """Expected seconds for one adjustment window."""
        return self.target_block_time * self.adjustment_interval


@dataclass(frozen=True)
class GenesisParams:
    """Fixed header fields and coinbase message of the genesis block."""
    version: int = 1
    timestamp: int = 1635724800  # 2021-11-01 00:00:00 UTC
    bits: int = 0x1D00FFFF
    nonce: int = 0
    coinbase_message: str = DEFAULT_COINBASE_MESSAGE
    reward: int = 50 * 100_000_000


@dataclass
class LoggingConfig:
    """Configuration for log output (applied by the CLI, never by the library)."""
    level: str = "INFO"
    file: Optional[str] = None
    format: str = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _parse_int(value: str) -> int:
    """Parse decimal or 0x-prefixed hex."""
    return int(value, 0)


# env suffix -> (section, key, parser)
_ENV_FIELDS: dict[str, tuple[str, str, Any]] = {
    "MAX_TARGET_BITS": ("chain", "max_target_bits", _parse_int),
    "TARGET_BLOCK_TIME": ("chain", "target_block_time", _parse_int),
    "ADJUSTMENT_INTERVAL": ("chain", "adjustment_interval", _parse_int),
    "MAX_BLOCK_SIZE": ("chain", "max_block_size", _parse_int),
    "MAX_TRANSACTIONS": ("chain", "max_transactions", _parse_int),
    "MAX_TIME_OFFSET": ("chain", "max_time_offset", _parse_int),
    "GENESIS_TIMESTAMP": ("genesis", "timestamp", _parse_int),
    "GENESIS_BITS": ("genesis", "bits", _parse_int),
    "GENESIS_NONCE": ("genesis", "nonce", _parse_int),
    "GENESIS_MESSAGE": ("genesis", "coinbase_message", str),
    "LOG_LEVEL": ("logging", "level", str.upper),
    "LOG_FILE": ("logging", "file", str),
}


@dataclass
class RuntimeConfig:
    """
    Chain limits, genesis parameters and logging settings in one object.

    Sources, lowest precedence first: dataclass defaults, a YAML file or
    dict, then CHAINPROOF_* environment variables.
    """
    chain: ChainParams = field(default_factory=ChainParams)
    genesis: GenesisParams = field(default_factory=GenesisParams)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    extra: dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def _get_env_overrides() -> dict[str, Any]:
        """
        Collect CHAINPROOF_* variables into a nested overrides dict.

        Recognised suffixes:
        - MAX_TARGET_BITS, TARGET_BLOCK_TIME, ADJUSTMENT_INTERVAL
        - MAX_BLOCK_SIZE, MAX_TRANSACTIONS, MAX_TIME_OFFSET
        - GENESIS_TIMESTAMP, GENESIS_BITS, GENESIS_NONCE, GENESIS_MESSAGE
        - LOG_LEVEL, LOG_FILE

        Integer values accept decimal or 0x-prefixed hex.
        """
        overrides: dict[str, Any] = {}
        for suffix, (section, key, parse) in _ENV_FIELDS.items():
            raw = os.getenv(ENV_PREFIX + suffix)
            if raw:
                try:
                    overrides.setdefault(section, {})[key] = parse(raw)
                except ValueError as e:
                    raise ValueError(
                        f"Invalid value for {ENV_PREFIX + suffix}: {raw!r}"
                    ) from e
        return overrides

    @classmethod
    def from_env(cls) -> "RuntimeConfig":
        """Defaults overlaid with CHAINPROOF_* variables."""
        return cls.from_dict(cls._get_env_overrides())

    @classmethod
    def from_yaml(cls, path: str | Path) -> "RuntimeConfig":
        """Read a YAML mapping with optional chain, genesis, logging and extra sections."""
        import yaml
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f)

        return cls.from_dict(data or {})

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RuntimeConfig":
        """Build from a nested dict; missing sections and keys keep their defaults."""
        chain_data = data.get("chain", {})
        genesis_data = data.get("genesis", {})
        logging_data = data.get("logging", {})

        return cls(
            chain=ChainParams(**chain_data) if chain_data else ChainParams(),
            genesis=GenesisParams(**genesis_data) if genesis_data else GenesisParams(),
            logging=LoggingConfig(**logging_data) if logging_data else LoggingConfig(),
            extra=data.get("extra", {}),
        )

    def with_env_overrides(self) -> "RuntimeConfig":
        """
        Copy of this config with CHAINPROOF_* variables applied on top.

        Returns self unchanged when no variable is set.
        """
        overrides = self._get_env_overrides()
        if not overrides:
            return self

        sections = {
            section: replace(getattr(self, section), **overrides.get(section, {}))
            for section in ("chain", "genesis", "logging")
        }
        return replace(self, extra=dict(self.extra), **sections)

    def to_dict(self) -> dict[str, Any]:
        """Plain nested dict, the inverse of from_dict()."""
        return {
            "chain": asdict(self.chain),
            "genesis": asdict(self.genesis),
            "logging": asdict(self.logging),
            "extra": self.extra,
        }


# Process-wide instance, built from the environment on first use
_default_config: Optional[RuntimeConfig] = None


def get_default_config() -> RuntimeConfig:
    """Return the process-wide config, loading it from the environment once."""
    global _default_config
    if _default_config is None:
        _default_config = RuntimeConfig.from_env()
    return _default_config


def set_default_config(config: Optional[RuntimeConfig]) -> None:
    """Replace the process-wide config; None makes the next get reload it."""
    global _default_config
    _default_config = config
