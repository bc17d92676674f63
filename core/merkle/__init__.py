"""
Merkle Tree and Commitments
Deterministic commitment tree construction + proof generation/verification.

This module provides:
- MerkleTree / TreeNode: immutable tree over 32-byte leaf digests
- MerkleProof / ProofStep: inclusion proofs with a fixed byte layout
- build_merkle_root: Compute root from leaf digests
- build_merkle_proof: Generate proof for a specific leaf
- verify_merkle_path: Verify a proof without a tree

Canonical Commitment Rules:
1. Leaf digests: transaction_id(payload) = double_sha256(payload)
2. Parent hashing: double_sha256(left + right)
3. Padding: Last node pairs with itself if a level has an odd count
4. Empty tree: 32 zero bytes
5. Single leaf: root = leaf

Usage:
    from core.merkle import MerkleTree
    from core.crypto import transaction_id

    tree = MerkleTree.build([transaction_id(p) for p in payloads])
    proof = tree.generate_proof(2)
    assert proof.verify()
    assert MerkleProof.from_bytes(proof.to_bytes()) == proof
"""
from .merkle_tree import (
    PROOF_FIXED_SIZE,
    PROOF_STEP_SIZE,
    TreeNode,
    MerkleTree,
    pair_index,
    build_merkle_root,
    build_merkle_proof,
    compute_tree_depth,
)

from .merkle_proofs import (
    ProofStep,
    MerkleProof,
    verify_merkle_path,
    verify_merkle_proof,
    decode_merkle_proof,
    MerkleProver,
    MerkleVerifier,
)


__all__ = [
    # Core types
    "TreeNode",
    "MerkleTree",
    "ProofStep",
    "MerkleProof",
    "PROOF_FIXED_SIZE",
    "PROOF_STEP_SIZE",
    # Core functions
    "pair_index",
    "build_merkle_root",
    "build_merkle_proof",
    "compute_tree_depth",
    "verify_merkle_path",
    "verify_merkle_proof",
    "decode_merkle_proof",
    # Convenience classes
    "MerkleProver",
    "MerkleVerifier",
]
