"""
ChainProof CLI

Command-line interface for commitment trees, difficulty values and the
genesis commitment.

Usage:
    python -m chainproof_cli merkle root <leaf> [<leaf> ...]
    python -m chainproof_cli merkle proof --index 2 <leaf> [<leaf> ...]
    python -m chainproof_cli merkle verify <proof-hex>
    python -m chainproof_cli bits decode 0x1d00ffff
    python -m chainproof_cli genesis
"""

__version__ = "0.1.0"
