"""
Schemas
File: reports.py

Purpose: JSON-facing report models for trees, proofs, difficulty values
and the genesis commitment. Digests are carried in display form
(byte-reversed hex), never in internal byte order.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


_HEX64 = r"^[0-9a-f]{64}$"


class TreeInfo(BaseModel):
    """Summary of a built commitment tree."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    leaf_count: int = Field(..., ge=0)
    depth: int = Field(..., ge=0, description="Levels including the leaf level")
    total_nodes: int = Field(..., ge=0)
    proof_size: int = Field(..., ge=0, description="Serialized proof size in bytes")
    root: str = Field(..., pattern=_HEX64)


class ProofStepReport(BaseModel):
    """One sibling on the path from a leaf to the root."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    sibling: str = Field(..., pattern=_HEX64)
    sibling_is_right: bool


class ProofReport(BaseModel):
    """Inclusion proof in a form suitable for JSON transport."""

    model_config = ConfigDict(extra="forbid")

    leaf: str = Field(..., pattern=_HEX64)
    index: int = Field(..., ge=0, le=0xFFFFFFFF)
    root: str = Field(..., pattern=_HEX64)
    tree_depth: int = Field(default=0, ge=0, le=0xFFFFFFFF)
    path: list[ProofStepReport] = Field(default_factory=list)
    verified: bool | None = Field(
        default=None,
        description="Verification outcome, when the report was produced by a verifier",
    )


class DifficultyReport(BaseModel):
    """Decoded view of a compact bits value."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    bits: str = Field(..., pattern=r"^0x[0-9a-f]{8}$")
    exponent: int = Field(..., ge=0, le=0xFF)
    mantissa: int = Field(..., ge=0, le=0xFFFFFF)
    target: str = Field(..., description="Target as 0x-prefixed hex")
    difficulty: float = Field(..., ge=0.0)
    valid: bool
    error: str | None = None


class GenesisInfo(BaseModel):
    """Summary of the genesis commitment."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    hash: str = Field(..., pattern=_HEX64)
    version: int
    prev_hash: str = Field(..., pattern=_HEX64)
    merkle_root: str = Field(..., pattern=_HEX64)
    timestamp: int
    timestamp_iso: str
    bits: str
    nonce: int
    difficulty: float
    size: int
    tx_count: int


__all__ = [
    "TreeInfo",
    "ProofStepReport",
    "ProofReport",
    "DifficultyReport",
    "GenesisInfo",
]
