"""
Merkle Tree Implementation
Deterministic commitment tree over 32-byte leaf digests.

This module provides:
- MerkleTree: built once from leaf digests, immutable afterwards
- Root lookup, per-index leaf lookup, proof generation
- Functional helpers for callers that only need a root or a proof

Canonical Commitment Rules (Hard Contracts):
1. Leaves are 32-byte digests, used as given (no re-hashing)
2. Parent hashing: parent = double_sha256(left || right)
3. Padding rule: at a level with an odd node count, the last node is
   paired with itself
4. Empty leaves: root is ZERO_HASH (32 zero bytes)
5. Single leaf: root = leaf, depth 1, no combine step

Storage Notes:
- Nodes live in an arena of levels; levels[0] holds the leaves
- A node knows its (level, position); its parent is
  levels[level + 1][position // 2], looked up by index
- Children are held by the parent; for a padded pair left is right
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterator, Optional, Sequence

from core.crypto.hashing import (
    ZERO_HASH,
    hash_to_display,
    merkle_combine,
    require_digest,
)
from core.schemas.reports import TreeInfo

if TYPE_CHECKING:
    from core.merkle.merkle_proofs import MerkleProof


logger = logging.getLogger(__name__)

# Bytes in a serialized proof before the path: leaf, index, root, depth, count
PROOF_FIXED_SIZE = 32 + 4 + 32 + 4 + 4
# Bytes per path entry: sibling digest + direction flag
PROOF_STEP_SIZE = 32 + 1


def parent_count(level_size: int) -> int:
    """Number of parents produced from a level of ``level_size`` nodes."""
    return (level_size + 1) // 2


def pair_index(position: int, level_size: int) -> int:
    """
    Position of the node paired with ``position`` on its level.

    An even position pairs with the next node, an odd one with the
    previous node. The last node of an odd-sized level pairs with itself.
    """
    partner = position ^ 1
    if partner >= level_size:
        return position
    return partner


@dataclass(frozen=True, eq=False)
class TreeNode:
    """
    A node of the commitment tree.

    Attributes:
        digest: 32-byte node digest
        level: 0 for leaves, increasing towards the root
        position: Index of the node within its level
        left: Left child (None for leaves)
        right: Right child (None for leaves; may be ``left`` when padded)
    """
    digest: bytes
    level: int
    position: int
    left: Optional["TreeNode"] = None
    right: Optional["TreeNode"] = None

    @property
    def is_leaf(self) -> bool:
        return self.left is None and self.right is None

    @property
    def leaf_index(self) -> Optional[int]:
        """Input position of a leaf; None for internal nodes."""
        return self.position if self.is_leaf else None


class MerkleTree:
    """
    Commitment tree built from an ordered sequence of leaf digests.

    The tree is immutable once ``build`` returns, so one instance may be
    read from several threads without locking.

    Example:
        >>> tree = MerkleTree.build([transaction_id(b"a"), transaction_id(b"b")])
        >>> proof = tree.generate_proof(1)
        >>> proof.verify()
        True
    """

    def __init__(self, levels: Sequence[Sequence[TreeNode]]) -> None:
        self._levels: tuple[tuple[TreeNode, ...], ...] = tuple(
            tuple(level) for level in levels
        )

    # ------------------------------------------------------------------
    # Build
    # ------------------------------------------------------------------

    @classmethod
    def build(cls, leaves: Sequence[bytes]) -> "MerkleTree":
        """
        Build a tree from leaf digests.

        Args:
            leaves: Ordered 32-byte leaf digests. Order is preserved.

        Returns:
            MerkleTree (empty when ``leaves`` is empty)

        Raises:
            FormatException: If any leaf is not 32 bytes
        """
        if len(leaves) == 0:
            logger.debug("Built empty merkle tree")
            return cls(())

        current: list[TreeNode] = [
            TreeNode(require_digest(leaf, f"leaf[{i}]"), level=0, position=i)
            for i, leaf in enumerate(leaves)
        ]
        levels: list[list[TreeNode]] = [current]

        while len(current) > 1:
            next_level: list[TreeNode] = []
            for i in range(0, len(current), 2):
                left = current[i]
                right = current[pair_index(i, len(current))]
                next_level.append(
                    TreeNode(
                        merkle_combine(left.digest, right.digest),
                        level=len(levels),
                        position=i // 2,
                        left=left,
                        right=right,
                    )
                )
            levels.append(next_level)
            current = next_level

        logger.debug("Built merkle tree: leaves=%d depth=%d", len(leaves), len(levels))
        return cls(levels)

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def root_node(self) -> Optional[TreeNode]:
        if not self._levels:
            return None
        return self._levels[-1][0]

    def root(self) -> bytes:
        """Root digest, or ZERO_HASH for an empty tree."""
        node = self.root_node
        if node is None:
            return ZERO_HASH
        return node.digest

    @property
    def depth(self) -> int:
        """Number of levels including the leaf level (0 when empty)."""
        return len(self._levels)

    @property
    def leaf_count(self) -> int:
        if not self._levels:
            return 0
        return len(self._levels[0])

    @property
    def levels(self) -> tuple[tuple[TreeNode, ...], ...]:
        return self._levels

    def __len__(self) -> int:
        return self.leaf_count

    def leaf(self, index: int) -> Optional[TreeNode]:
        """Leaf at ``index``, or None when out of range."""
        if index < 0 or index >= self.leaf_count:
            return None
        return self._levels[0][index]

    def leaf_digests(self) -> list[bytes]:
        if not self._levels:
            return []
        return [node.digest for node in self._levels[0]]

    def parent_of(self, node: TreeNode) -> Optional[TreeNode]:
        """Parent of ``node``; None for the root."""
        parent_level = node.level + 1
        if parent_level >= len(self._levels):
            return None
        return self._levels[parent_level][node.position // 2]

    def sibling_of(self, node: TreeNode) -> Optional[TreeNode]:
        """
        The other child of ``node``'s parent.

        For the last node of an odd-sized level this is the node itself.
        None for the root.
        """
        parent = self.parent_of(node)
        if parent is None:
            return None
        if parent.left is node:
            return parent.right
        return parent.left

    def path_to_root(self, node: TreeNode) -> Iterator[TreeNode]:
        """Ancestors of ``node`` from its parent up to the root."""
        current = self.parent_of(node)
        while current is not None:
            yield current
            current = self.parent_of(current)

    # ------------------------------------------------------------------
    # Proofs
    # ------------------------------------------------------------------

    def generate_proof(self, index: int) -> Optional["MerkleProof"]:
        """
        Generate an inclusion proof for the leaf at ``index``.

        Walks from the leaf towards the root, recording at each step the
        sibling digest and whether the sibling sits on the right.

        Returns:
            MerkleProof, or None if the tree is empty or index out of range
        """
        from core.merkle.merkle_proofs import MerkleProof, ProofStep

        leaf = self.leaf(index)
        if leaf is None:
            return None

        path: list[ProofStep] = []
        current = leaf
        parent = self.parent_of(current)
        while parent is not None:
            sibling = parent.right if parent.left is current else parent.left
            path.append(ProofStep(sibling.digest, parent.right is sibling))
            current = parent
            parent = self.parent_of(current)

        return MerkleProof(
            leaf=leaf.digest,
            index=index,
            root=self.root(),
            path=tuple(path),
            tree_depth=self.depth,
        )

    def verify_proof(self, proof: Optional["MerkleProof"]) -> bool:
        """Verify ``proof``; a missing proof never verifies."""
        if proof is None:
            return False
        return proof.verify()

    # ------------------------------------------------------------------
    # Info
    # ------------------------------------------------------------------

    def info(self) -> TreeInfo:
        total_nodes = sum(len(level) for level in self._levels)
        path_length = max(self.depth - 1, 0)
        return TreeInfo(
            leaf_count=self.leaf_count,
            depth=self.depth,
            total_nodes=total_nodes,
            proof_size=PROOF_FIXED_SIZE + PROOF_STEP_SIZE * path_length,
            root=hash_to_display(self.root()),
        )

    def __repr__(self) -> str:
        return (
            f"MerkleTree(leaves={self.leaf_count}, depth={self.depth}, "
            f"root={hash_to_display(self.root())})"
        )


def build_merkle_root(leaves: Sequence[bytes]) -> bytes:
    """
    Compute the root of ``leaves`` without keeping the tree.

    Padding Rule: the last node of an odd-sized level pairs with itself.
    Example: [a, b, c] -> [parent(a,b), parent(c,c)] -> root

    Returns:
        32-byte root; ZERO_HASH for no leaves; the leaf itself for one leaf
    """
    if len(leaves) == 0:
        return ZERO_HASH

    current_level: list[bytes] = [
        require_digest(leaf, f"leaf[{i}]") for i, leaf in enumerate(leaves)
    ]

    while len(current_level) > 1:
        next_level: list[bytes] = []
        for i in range(0, len(current_level), 2):
            partner = current_level[pair_index(i, len(current_level))]
            next_level.append(merkle_combine(current_level[i], partner))
        current_level = next_level

    return current_level[0]


def build_merkle_proof(leaves: Sequence[bytes], index: int) -> Optional["MerkleProof"]:
    """Build a tree over ``leaves`` and return the proof for ``index``."""
    return MerkleTree.build(leaves).generate_proof(index)


def compute_tree_depth(num_leaves: int) -> int:
    """
    Depth of a tree with ``num_leaves`` leaves, counting the leaf level.

    0 for an empty tree, 1 for a single leaf; otherwise the number of
    levels produced by halving (rounding up) until one node remains.
    """
    if num_leaves <= 0:
        return 0

    depth = 1
    n = num_leaves
    while n > 1:
        n = parent_count(n)
        depth += 1
    return depth


__all__ = [
    "PROOF_FIXED_SIZE",
    "PROOF_STEP_SIZE",
    "TreeNode",
    "MerkleTree",
    "pair_index",
    "build_merkle_root",
    "build_merkle_proof",
    "compute_tree_depth",
]
