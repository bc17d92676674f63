"""
Merkle Proofs
Inclusion proofs: standalone verification and byte serialization.

This module provides:
- MerkleProof: frozen inclusion proof (leaf, index, root, path, depth)
- verify_merkle_path: verifier that needs no tree instance
- decode_merkle_proof: parser for the fixed-then-variable byte layout
- MerkleProver / MerkleVerifier: class-based convenience wrappers

Direction Convention:
- ProofStep.sibling_is_right is True when the current node is a left
  child (current index even), False when it is a right child
- The verifier recomputes with the same merkle_combine rule the tree uses

Byte Layout:
    leaf (32) | index (u32 LE) | root (32) | tree depth (u32 LE) |
    path length (u32 LE) | siblings (32 each) | flags (1 byte each, 0/1)
"""
from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import NamedTuple, Optional, Sequence

from core.crypto.hashing import (
    DIGEST_SIZE,
    display_to_hash,
    hash_to_display,
    merkle_combine,
    require_digest,
    transaction_id,
)
from core.merkle.merkle_tree import (
    PROOF_FIXED_SIZE,
    PROOF_STEP_SIZE,
    MerkleTree,
    build_merkle_root,
)
from core.schemas.errors import (
    FormatException,
    InvalidProofException,
    TruncatedDataException,
)
from core.schemas.reports import ProofReport, ProofStepReport


MAX_UINT32 = 0xFFFFFFFF

_HEADER = struct.Struct("<32sI32sII")


class ProofStep(NamedTuple):
    """One combine step on the way from a leaf to the root."""
    sibling: bytes
    sibling_is_right: bool


@dataclass(frozen=True)
class MerkleProof:
    """
    A Merkle inclusion proof for a single leaf.

    Attributes:
        leaf: The leaf digest being proven (32 bytes)
        index: 0-based position of the leaf in the input order
        root: The root this proof claims to reach
        path: Sibling steps, leaf level first
        tree_depth: Depth of the tree the proof was taken from
    """
    leaf: bytes
    index: int
    root: bytes
    path: tuple[ProofStep, ...] = ()
    tree_depth: int = 0

    def __post_init__(self) -> None:
        """Validate proof structure."""
        if self.index < 0:
            raise FormatException(
                f"Leaf index must be non-negative, got {self.index}",
                field_name="index",
                actual=self.index,
            )
        object.__setattr__(self, "leaf", require_digest(self.leaf, "leaf"))
        object.__setattr__(self, "root", require_digest(self.root, "root"))
        steps = tuple(
            ProofStep(require_digest(step[0], f"path[{i}].sibling"), bool(step[1]))
            for i, step in enumerate(self.path)
        )
        object.__setattr__(self, "path", steps)

    @classmethod
    def from_parts(
        cls,
        leaf: bytes,
        index: int,
        root: bytes,
        siblings: Sequence[bytes],
        flags: Sequence[bool],
        tree_depth: int = 0,
    ) -> "MerkleProof":
        """
        Assemble a proof from parallel sibling and flag sequences.

        Raises:
            InvalidProofException: If the sequences differ in length
        """
        if len(siblings) != len(flags):
            raise InvalidProofException(
                f"Proof has {len(siblings)} siblings but {len(flags)} flags",
                leaf_index=index,
            )
        path = tuple(ProofStep(s, f) for s, f in zip(siblings, flags))
        return cls(leaf=leaf, index=index, root=root, path=path, tree_depth=tree_depth)

    @property
    def siblings(self) -> list[bytes]:
        return [step.sibling for step in self.path]

    @property
    def flags(self) -> list[bool]:
        return [step.sibling_is_right for step in self.path]

    @property
    def size(self) -> int:
        """Serialized size in bytes."""
        return PROOF_FIXED_SIZE + PROOF_STEP_SIZE * len(self.path)

    def verify(self) -> bool:
        """Check the proof against its own claimed root."""
        return verify_merkle_path(
            self.leaf, self.root, self.siblings, self.flags, self.index
        )

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_bytes(self) -> bytes:
        if self.index > MAX_UINT32 or self.tree_depth > MAX_UINT32:
            raise ValueError("Proof index and depth must fit in 32 bits")
        header = _HEADER.pack(
            self.leaf, self.index, self.root, self.tree_depth, len(self.path)
        )
        siblings = b"".join(step.sibling for step in self.path)
        flags = bytes(1 if step.sibling_is_right else 0 for step in self.path)
        return header + siblings + flags

    @classmethod
    def from_bytes(cls, data: bytes) -> "MerkleProof":
        """Parse a proof; bytes after the declared path are ignored."""
        proof, _ = decode_merkle_proof(data)
        return proof

    def to_report(self, verified: Optional[bool] = None) -> ProofReport:
        return ProofReport(
            leaf=hash_to_display(self.leaf),
            index=self.index,
            root=hash_to_display(self.root),
            tree_depth=self.tree_depth,
            path=[
                ProofStepReport(
                    sibling=hash_to_display(step.sibling),
                    sibling_is_right=step.sibling_is_right,
                )
                for step in self.path
            ],
            verified=verified,
        )

    @classmethod
    def from_report(cls, report: ProofReport) -> "MerkleProof":
        return cls(
            leaf=display_to_hash(report.leaf),
            index=report.index,
            root=display_to_hash(report.root),
            path=tuple(
                ProofStep(display_to_hash(step.sibling), step.sibling_is_right)
                for step in report.path
            ),
            tree_depth=report.tree_depth,
        )


def verify_merkle_path(
    leaf: bytes,
    root: bytes,
    siblings: Sequence[bytes],
    flags: Sequence[bool],
    index: int,
) -> bool:
    """
    Verify that ``leaf`` at ``index`` is committed to by ``root``.

    Algorithm:
    1. Start with the leaf digest and its index
    2. For each sibling (leaf level first):
       - The flag must equal (index is even); otherwise fail
       - Even index: current = combine(current, sibling)
       - Odd index: current = combine(sibling, current)
       - index = index // 2
    3. Succeed iff the result equals the claimed root

    Returns:
        True if the proof is valid, False otherwise

    Raises:
        InvalidProofException: If siblings and flags differ in length
        FormatException: If leaf, root or any sibling is not 32 bytes
    """
    if len(siblings) != len(flags):
        raise InvalidProofException(
            f"Proof has {len(siblings)} siblings but {len(flags)} flags",
            leaf_index=index,
        )
    if index < 0:
        return False

    current = require_digest(leaf, "leaf")
    root = require_digest(root, "root")
    current_index = index

    for sibling, sibling_is_right in zip(siblings, flags):
        expected_flag = current_index % 2 == 0
        if bool(sibling_is_right) != expected_flag:
            return False

        if expected_flag:
            # Current node is left child
            current = merkle_combine(current, sibling)
        else:
            # Current node is right child
            current = merkle_combine(sibling, current)

        current_index //= 2

    return current == root


def verify_merkle_proof(proof: Optional[MerkleProof]) -> bool:
    if proof is None:
        return False
    return proof.verify()


def decode_merkle_proof(data: bytes, offset: int = 0) -> tuple[MerkleProof, int]:
    """
    Parse a serialized proof starting at ``offset``.

    Returns:
        (proof, consumed)

    Raises:
        TruncatedDataException: If the fixed prefix or the declared path
            does not fit in the remaining bytes
        FormatException: If a direction flag byte is neither 0 nor 1
    """
    if offset < 0:
        raise ValueError(f"Merkle proof offset must be non-negative, got {offset}")
    available = len(data) - offset
    if available < PROOF_FIXED_SIZE:
        raise TruncatedDataException(
            f"Merkle proof needs at least {PROOF_FIXED_SIZE} bytes, got {available}",
            needed=PROOF_FIXED_SIZE,
            available=max(available, 0),
        )

    leaf, index, root, tree_depth, count = _HEADER.unpack_from(data, offset)
    position = offset + PROOF_FIXED_SIZE

    needed = count * PROOF_STEP_SIZE
    remaining = len(data) - position
    if remaining < needed:
        raise TruncatedDataException(
            f"Merkle proof declares {count} path entries ({needed} bytes), "
            f"only {remaining} bytes remain",
            needed=needed,
            available=remaining,
        )

    siblings: list[bytes] = []
    for _ in range(count):
        siblings.append(bytes(data[position:position + DIGEST_SIZE]))
        position += DIGEST_SIZE

    flags: list[bool] = []
    for i in range(count):
        flag = data[position]
        if flag not in (0, 1):
            raise FormatException(
                f"Direction flag {i} must be 0 or 1, got {flag}",
                field_name=f"flags[{i}]",
            )
        flags.append(flag == 1)
        position += 1

    proof = MerkleProof.from_parts(
        leaf=leaf,
        index=index,
        root=root,
        siblings=siblings,
        flags=flags,
        tree_depth=tree_depth,
    )
    return proof, position - offset


class MerkleProver:
    """
    Convenience class for generating Merkle proofs.

    Provides static methods for proof generation from:
    - Leaf digests (bytes)
    - Raw payloads (identified with transaction_id first)

    Example:
        >>> leaves = [transaction_id(b"a"), transaction_id(b"b")]
        >>> proof = MerkleProver.prove(leaves, index=1)
        >>> proof.leaf == leaves[1]
        True
    """

    @staticmethod
    def prove(leaves: Sequence[bytes], index: int) -> Optional[MerkleProof]:
        """
        Generate a proof for the leaf at ``index``.

        Returns:
            MerkleProof, or None for an empty sequence or bad index
        """
        return MerkleTree.build(leaves).generate_proof(index)

    @staticmethod
    def prove_payload(payloads: Sequence[bytes], index: int) -> Optional[MerkleProof]:
        """Generate a proof for the payload at ``index``."""
        leaves = [transaction_id(p) for p in payloads]
        return MerkleTree.build(leaves).generate_proof(index)

    @staticmethod
    def compute_root(leaves: Sequence[bytes]) -> bytes:
        return build_merkle_root(leaves)

    @staticmethod
    def compute_root_from_payloads(payloads: Sequence[bytes]) -> bytes:
        return build_merkle_root([transaction_id(p) for p in payloads])


class MerkleVerifier:
    """
    Convenience class for verifying Merkle proofs.

    Example:
        >>> proof = MerkleProver.prove(leaves, index=1)
        >>> MerkleVerifier.verify(proof)
        True
    """

    @staticmethod
    def verify(proof: Optional[MerkleProof]) -> bool:
        return verify_merkle_proof(proof)

    @staticmethod
    def verify_bytes(data: bytes) -> bool:
        """
        Parse and verify a serialized proof.

        Raises:
            TruncatedDataException: For a truncated encoding
            FormatException: For a malformed flag byte
        """
        return MerkleProof.from_bytes(data).verify()

    @staticmethod
    def verify_leaf_in_root(
        leaf: bytes,
        index: int,
        siblings: Sequence[bytes],
        flags: Sequence[bool],
        root: bytes,
    ) -> bool:
        """Verify a leaf against a root from raw components."""
        return verify_merkle_path(leaf, root, siblings, flags, index)

    @staticmethod
    def verify_payload_in_root(
        payload: bytes,
        index: int,
        siblings: Sequence[bytes],
        flags: Sequence[bool],
        root: bytes,
    ) -> bool:
        """Verify a raw payload; it is identified with transaction_id first."""
        return verify_merkle_path(transaction_id(payload), root, siblings, flags, index)


__all__ = [
    "ProofStep",
    "MerkleProof",
    "verify_merkle_path",
    "verify_merkle_proof",
    "decode_merkle_proof",
    "MerkleProver",
    "MerkleVerifier",
]
