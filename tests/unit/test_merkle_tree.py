"""
Merkle Tree Unit Tests
Tests for core/merkle/merkle_tree.py

Required behaviour:
1. Root determinism - same leaves -> same root across runs
2. Padding correctness - odd leaf count pairs the last node with itself
3. Proof generation - every index yields a verifying proof
4. Empty leaves - root is ZERO_HASH, no proofs
5. Single leaf - root equals leaf, depth 1
6. Node arena - parent/sibling lookup by index
"""
import pytest

from conftest import make_leaves
from core.crypto.hashing import ZERO_HASH, merkle_combine, sha256
from core.merkle.merkle_tree import (
    PROOF_FIXED_SIZE,
    PROOF_STEP_SIZE,
    MerkleTree,
    build_merkle_proof,
    build_merkle_root,
    compute_tree_depth,
    pair_index,
)
from core.schemas.errors import FormatException


def reference_root(leaves: list[bytes]) -> bytes:
    """Recursive restatement of the pairing rule."""
    if not leaves:
        return ZERO_HASH
    if len(leaves) == 1:
        return leaves[0]
    level = list(leaves)
    if len(level) % 2 == 1:
        level.append(level[-1])
    parents = [merkle_combine(level[i], level[i + 1]) for i in range(0, len(level), 2)]
    return reference_root(parents)


class TestEmptyTree:
    """Tests for empty tree behavior."""

    def test_empty_root_is_zero_hash(self):
        tree = MerkleTree.build([])

        assert tree.root() == ZERO_HASH
        assert build_merkle_root([]) == ZERO_HASH

    def test_empty_tree_shape(self):
        tree = MerkleTree.build([])

        assert tree.depth == 0
        assert tree.leaf_count == 0
        assert tree.root_node is None
        assert len(tree) == 0

    def test_empty_tree_proof_is_none(self):
        assert MerkleTree.build([]).generate_proof(0) is None
        assert build_merkle_proof([], 0) is None

    def test_empty_tree_leaf_lookup_is_none(self):
        assert MerkleTree.build([]).leaf(0) is None


class TestSingleLeaf:
    """Tests for single leaf tree behavior."""

    def test_single_leaf_root_equals_leaf(self):
        leaf = sha256(b"single leaf")
        tree = MerkleTree.build([leaf])

        assert tree.root() == leaf
        assert tree.depth == 1

    def test_single_leaf_is_also_root(self):
        leaf = sha256(b"only one")
        tree = MerkleTree.build([leaf])

        node = tree.leaf(0)
        assert node is tree.root_node
        assert node.is_leaf
        assert tree.parent_of(node) is None

    def test_single_leaf_proof_has_empty_path(self):
        leaf = sha256(b"only one")
        proof = MerkleTree.build([leaf]).generate_proof(0)

        assert proof.path == ()
        assert proof.root == leaf
        assert proof.verify()


class TestPadding:
    """Tests for the odd-level pairing rule."""

    def test_two_leaves(self):
        a, b = make_leaves(2)

        assert build_merkle_root([a, b]) == merkle_combine(a, b)

    def test_three_leaves_duplicates_last(self):
        a, b, c = make_leaves(3)
        expected = merkle_combine(merkle_combine(a, b), merkle_combine(c, c))

        assert build_merkle_root([a, b, c]) == expected

    def test_four_leaves(self):
        a, b, c, d = make_leaves(4)
        expected = merkle_combine(merkle_combine(a, b), merkle_combine(c, d))

        assert build_merkle_root([a, b, c, d]) == expected

    def test_five_leaves_pads_two_levels(self):
        a, b, c, d, e = make_leaves(5)
        ab = merkle_combine(a, b)
        cd = merkle_combine(c, d)
        ee = merkle_combine(e, e)
        expected = merkle_combine(merkle_combine(ab, cd), merkle_combine(ee, ee))

        assert build_merkle_root([a, b, c, d, e]) == expected

    @pytest.mark.parametrize("count", range(1, 18))
    def test_matches_recursive_definition(self, count):
        leaves = make_leaves(count)

        assert MerkleTree.build(leaves).root() == reference_root(leaves)
        assert build_merkle_root(leaves) == reference_root(leaves)

    def test_pair_index(self):
        assert pair_index(0, 4) == 1
        assert pair_index(1, 4) == 0
        assert pair_index(2, 3) == 2
        assert pair_index(4, 5) == 4

    def test_padded_parent_has_same_child_twice(self):
        tree = MerkleTree.build(make_leaves(3))
        padded = tree.levels[1][1]

        assert padded.left is padded.right
        assert tree.sibling_of(tree.leaf(2)) is tree.leaf(2)


class TestRootDeterminism:
    """Tests for deterministic root computation."""

    def test_same_leaves_same_root(self, leaves):
        assert MerkleTree.build(leaves).root() == MerkleTree.build(list(leaves)).root()

    def test_order_matters(self, leaves):
        assert build_merkle_root(leaves) != build_merkle_root(list(reversed(leaves)))

    def test_leaves_not_rehashed(self, leaves):
        tree = MerkleTree.build(leaves)

        assert tree.leaf_digests() == leaves


class TestDepth:
    """Tests for depth bookkeeping."""

    @pytest.mark.parametrize("count,depth", [
        (0, 0), (1, 1), (2, 2), (3, 3), (4, 3), (5, 4), (8, 4), (9, 5), (16, 5), (17, 6),
    ])
    def test_depth(self, count, depth):
        assert compute_tree_depth(count) == depth
        assert MerkleTree.build(make_leaves(count)).depth == depth

    def test_levels_shrink_by_half(self):
        tree = MerkleTree.build(make_leaves(7))

        assert [len(level) for level in tree.levels] == [7, 4, 2, 1]


class TestNodeArena:
    """Tests for index-based parent lookup."""

    def test_parent_of_leaf(self, leaves):
        tree = MerkleTree.build(leaves)
        leaf = tree.leaf(3)
        parent = tree.parent_of(leaf)

        assert parent.level == 1
        assert parent.position == 1
        assert parent.right is leaf

    def test_path_to_root_ends_at_root(self, leaves):
        tree = MerkleTree.build(leaves)
        path = list(tree.path_to_root(tree.leaf(4)))

        assert len(path) == tree.depth - 1
        assert path[-1] is tree.root_node

    def test_leaf_index(self, leaves):
        tree = MerkleTree.build(leaves)

        assert tree.leaf(2).leaf_index == 2
        assert tree.root_node.leaf_index is None
        assert not tree.root_node.is_leaf


class TestLeafLookup:
    """Tests for bounds-checked lookup."""

    def test_out_of_range_is_none(self, leaves):
        tree = MerkleTree.build(leaves)

        assert tree.leaf(len(leaves)) is None
        assert tree.leaf(-1) is None
        assert tree.generate_proof(len(leaves)) is None
        assert tree.generate_proof(-1) is None

    def test_lookup_preserves_input_order(self, leaves):
        tree = MerkleTree.build(leaves)

        for i, leaf in enumerate(leaves):
            assert tree.leaf(i).digest == leaf


class TestProofGeneration:
    """Tests for generate_proof()."""

    @pytest.mark.parametrize("count", [1, 2, 3, 4, 5, 7, 8, 13])
    def test_every_index_verifies(self, count):
        leaves = make_leaves(count)
        tree = MerkleTree.build(leaves)

        for i in range(count):
            proof = tree.generate_proof(i)
            assert proof is not None
            assert proof.leaf == leaves[i]
            assert proof.root == tree.root()
            assert len(proof.path) == tree.depth - 1
            assert tree.verify_proof(proof)

    def test_direction_flags_follow_index_parity(self, leaves):
        proof = MerkleTree.build(leaves).generate_proof(3)

        # 3 -> odd, 1 -> odd, 0 -> even
        assert proof.flags == [False, False, True]

    def test_padded_leaf_sibling_is_itself(self):
        leaves = make_leaves(3)
        proof = MerkleTree.build(leaves).generate_proof(2)

        assert proof.path[0].sibling == leaves[2]
        assert proof.path[0].sibling_is_right is True

    def test_verify_none_is_false(self, leaves):
        assert not MerkleTree.build(leaves).verify_proof(None)


class TestValidation:
    """Tests for input validation."""

    def test_short_leaf_rejected(self):
        with pytest.raises(FormatException) as exc_info:
            MerkleTree.build([sha256(b"ok"), b"\x01" * 31])

        assert exc_info.value.details["field"] == "leaf[1]"

    def test_short_leaf_rejected_by_root_helper(self):
        with pytest.raises(FormatException):
            build_merkle_root([b"short"])


class TestInfo:
    """Tests for TreeInfo reports."""

    def test_info_fields(self, leaves):
        tree = MerkleTree.build(leaves)
        info = tree.info()

        assert info.leaf_count == 5
        assert info.depth == 4
        assert info.total_nodes == 5 + 3 + 2 + 1
        assert info.proof_size == PROOF_FIXED_SIZE + PROOF_STEP_SIZE * 3

    def test_info_empty(self):
        info = MerkleTree.build([]).info()

        assert info.root == "0" * 64
        assert info.proof_size == PROOF_FIXED_SIZE
