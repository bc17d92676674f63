"""
CLI command modules.
"""

from chainproof_cli.commands import config, difficulty, genesis, merkle

__all__ = ["config", "difficulty", "genesis", "merkle"]
