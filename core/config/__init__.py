"""
Runtime Configuration Module

Provides configuration loading and management for ChainProof.
"""

from .runtime import (
    ChainParams,
    GenesisParams,
    LoggingConfig,
    RuntimeConfig,
    get_default_config,
    set_default_config,
)

__all__ = [
    "ChainParams",
    "GenesisParams",
    "LoggingConfig",
    "RuntimeConfig",
    "get_default_config",
    "set_default_config",
]
