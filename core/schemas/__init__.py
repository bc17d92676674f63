"""
Schemas
File: __init__.py

Purpose: Export the error taxonomy and the JSON-facing report models.
"""

# Error models and exceptions
from .errors import (
    BlockValidationException,
    ChainProofError,
    ChainProofException,
    ChecksumException,
    ErrorCodes,
    FormatException,
    InvalidDifficultyException,
    InvalidProofException,
    TruncatedDataException,
)

# Report models
from .reports import (
    DifficultyReport,
    GenesisInfo,
    ProofReport,
    ProofStepReport,
    TreeInfo,
)

__all__ = [
    # Errors
    "BlockValidationException",
    "ChainProofError",
    "ChainProofException",
    "ChecksumException",
    "ErrorCodes",
    "FormatException",
    "InvalidDifficultyException",
    "InvalidProofException",
    "TruncatedDataException",
    # Reports
    "DifficultyReport",
    "GenesisInfo",
    "ProofReport",
    "ProofStepReport",
    "TreeInfo",
]
