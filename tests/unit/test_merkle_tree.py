"""
Module 03 - Merkle Tree Unit Tests
Tests for hashtree/merkle/merkle_tree.py

Covers:
1. Root determinism across builds
2. Zero-leaf and all-empty batches
3. Dense batches (no empty-subtree substitution)
4. Odd-level padding with the empty-subtree hash
5. Worked example: [A, B, C] with total size 4
6. Lifecycle and argument errors
"""
import pytest

from fixtures.common import CountingDigest, FailingDigest, make_leaves, scenario_leaves
from hashtree.crypto.hashing import TreeHasher, sha256
from hashtree.merkle.empty_cache import EmptySubtreeCache
from hashtree.merkle.merkle_tree import (
    MerkleTree,
    build_merkle_root,
    compute_tree_height,
    is_power_of_two,
    log2_exact,
)
from hashtree.schemas.errors import (
    HashFailureException,
    InvalidArgumentException,
    InvalidStateException,
)


def H(left: bytes, right: bytes) -> bytes:
    return sha256(left + right)


EMPTY = sha256(b"")


def balanced_root(nodes: list[bytes]) -> bytes:
    while len(nodes) > 1:
        nodes = [H(nodes[i], nodes[i + 1]) for i in range(0, len(nodes), 2)]
    return nodes[0]


class TestHelpers:

    @pytest.mark.parametrize("n", [1, 2, 4, 8, 1024])
    def test_powers_of_two(self, n):
        assert is_power_of_two(n)

    @pytest.mark.parametrize("n", [0, -2, 3, 6, 12])
    def test_not_powers_of_two(self, n):
        assert not is_power_of_two(n)

    def test_log2_exact(self):
        assert log2_exact(1) == 0
        assert log2_exact(16) == 4

    def test_log2_exact_rejects_non_power(self):
        with pytest.raises(InvalidArgumentException):
            log2_exact(12)

    def test_tree_height(self):
        assert compute_tree_height(1) == 1
        assert compute_tree_height(2) == 2
        assert compute_tree_height(8) == 4


class TestWorkedExample:
    """leaves = [A, B, C], total_size = 4."""

    def test_levels_and_root(self):
        a, b, c = scenario_leaves()
        tree = MerkleTree()
        tree.build([a, b, c], total_size=4)

        assert tree.level(0) == [a, b, c]
        assert tree.level(1) == [H(a, b), H(c, EMPTY)]
        assert tree.root_hash() == H(H(a, b), H(c, EMPTY))
        assert tree.tree_height == 3
        assert len(tree.levels) == 3


class TestRootDeterminism:

    def test_same_input_same_root(self):
        leaves = make_leaves(5)
        roots = []
        for _ in range(5):
            tree = MerkleTree()
            tree.build(leaves, total_size=8)
            roots.append(tree.root_hash())

        assert all(r == roots[0] for r in roots)

    def test_leaf_order_matters(self):
        leaves = make_leaves(3)
        assert build_merkle_root(leaves, 4) != build_merkle_root(leaves[::-1], 4)

    def test_capacity_changes_root(self):
        leaves = make_leaves(3)
        assert build_merkle_root(leaves, 4) != build_merkle_root(leaves, 8)


class TestZeroLeaves:

    @pytest.mark.parametrize("total_size", [1, 2, 4, 16])
    def test_root_is_iterated_empty_hash(self, total_size):
        tree = MerkleTree()
        tree.build([], total_size=total_size)

        expected = EMPTY
        for _ in range(tree.tree_height - 1):
            expected = H(expected, expected)

        assert tree.root_hash() == expected
        assert tree.root_hash() == tree.empty_cache.get(tree.tree_height - 1)

    def test_levels_still_count_tree_height(self):
        tree = MerkleTree()
        tree.build([], total_size=8)
        assert len(tree.levels) == 4
        assert tree.non_empty_leaf_count == 0

    def test_all_empty_leaves_match_zero_leaves(self):
        explicit = MerkleTree()
        explicit.build([b"", b"", b""], total_size=4)
        implicit = MerkleTree()
        implicit.build([], total_size=4)

        assert explicit.root_hash() == implicit.root_hash()
        assert explicit.level(0) == [EMPTY, EMPTY, EMPTY]


class TestDense:

    @pytest.mark.parametrize("size", [1, 2, 4, 8])
    def test_plain_balanced_combination(self, size):
        leaves = make_leaves(size)
        assert build_merkle_root(leaves, size) == balanced_root(leaves)

    def test_no_empty_hash_used(self):
        digest = CountingDigest()
        tree = MerkleTree(hasher=TreeHasher(node_digest=digest))
        tree.build(make_leaves(8), total_size=8)

        assert b"" not in digest.calls
        assert len(tree.empty_cache) == 0
        # 4 + 2 + 1 parents
        assert digest.count == 7

    def test_single_slot_root_is_leaf(self):
        leaf = sha256(b"only")
        assert build_merkle_root([leaf], 1) == leaf


class TestOddLevelPadding:

    def test_five_of_eight(self):
        a, b, c, d, e = make_leaves(5)
        e1 = H(EMPTY, EMPTY)

        tree = MerkleTree()
        tree.build([a, b, c, d, e], total_size=8)

        assert tree.level(1) == [H(a, b), H(c, d), H(e, EMPTY)]
        assert tree.level(2) == [H(H(a, b), H(c, d)), H(H(e, EMPTY), e1)]
        assert len(tree.level(2)) == 2

    def test_parent_count_is_ceil_half(self):
        tree = MerkleTree()
        tree.build(make_leaves(7), total_size=16)
        counts = [len(level) for level in tree.levels]
        assert counts == [7, 4, 2, 1, 1]

    def test_last_parent_uses_cached_height(self):
        leaves = make_leaves(3)
        tree = MerkleTree()
        tree.build(leaves, total_size=16)

        # level 1 has two nodes, level 2 has one real node -> padded at height 2
        level2 = tree.level(2)
        assert tree.level(3) == [H(level2[0], tree.empty_cache.get(2))]

    def test_cache_covers_largest_empty_gap(self):
        tree = MerkleTree()
        tree.build(make_leaves(3), total_size=16)
        # 13 missing leaves -> floor(log2(13)) + 1 = 4 heights
        assert len(tree.empty_cache) >= 4

    def test_matches_explicitly_padded_dense_tree(self):
        leaves = make_leaves(5)
        padded = leaves + [EMPTY] * 3
        assert build_merkle_root(leaves, 8) == balanced_root(padded)

    def test_interior_empty_leaf_maps_to_empty_hash(self):
        a, b = make_leaves(2)
        tree = MerkleTree()
        tree.build([a, b"", b], total_size=4)

        assert tree.level(0) == [a, EMPTY, b]
        assert tree.non_empty_leaf_count == 2


class TestHashLeaves:

    def test_leaves_hashed_with_leaf_digest(self):
        hasher = TreeHasher.from_names("sha256", leaf="sha3_256")
        tree = MerkleTree(hasher=hasher, hash_leaves=True)
        tree.build([b"x", b"y"], total_size=2)

        assert tree.level(0) == [hasher.hash_leaf(b"x"), hasher.hash_leaf(b"y")]

    def test_empty_leaf_not_rehashed(self):
        tree = MerkleTree(hash_leaves=True)
        tree.build([b"x", b""], total_size=2)
        assert tree.level(0)[1] == EMPTY


class TestLifecycle:

    def test_unbuilt_root_is_none(self):
        assert MerkleTree().root_hash() is None

    def test_unbuilt_level_raises(self):
        with pytest.raises(InvalidStateException):
            MerkleTree().level(0)

    def test_second_build_rejected_and_root_unchanged(self):
        tree = MerkleTree()
        tree.build(make_leaves(3), total_size=4)
        root = tree.root_hash()

        with pytest.raises(InvalidStateException, match="already built"):
            tree.build(make_leaves(4, prefix="other"), total_size=4)

        assert tree.root_hash() == root

    def test_levels_are_copies(self):
        tree = MerkleTree()
        tree.build(make_leaves(2), total_size=2)
        tree.levels[0].clear()
        tree.level(0).clear()
        assert tree.leaf_count == 2

    def test_level_out_of_range(self):
        tree = MerkleTree()
        tree.build(make_leaves(2), total_size=2)
        with pytest.raises(InvalidArgumentException):
            tree.level(2)


class TestArgumentErrors:

    def test_total_size_three(self):
        tree = MerkleTree()
        with pytest.raises(InvalidArgumentException, match="power of two"):
            tree.build(make_leaves(2), total_size=3)

        assert tree.root_hash() is None
        assert not tree.is_built

    def test_total_size_zero(self):
        with pytest.raises(InvalidArgumentException):
            MerkleTree().build([], total_size=0)

    def test_too_many_leaves(self):
        tree = MerkleTree()
        with pytest.raises(InvalidArgumentException, match="exceed") as exc_info:
            tree.build(make_leaves(5), total_size=4)

        assert exc_info.value.details["leaf_count"] == 5
        assert tree.root_hash() is None

    def test_instance_reusable_after_argument_error(self):
        tree = MerkleTree()
        with pytest.raises(InvalidArgumentException):
            tree.build(make_leaves(2), total_size=3)

        tree.build(make_leaves(2), total_size=4)
        assert tree.root_hash() is not None

    def test_invalid_argument_is_value_error(self):
        with pytest.raises(ValueError):
            MerkleTree().build([], total_size=6)

    def test_mismatched_cache_rejected(self):
        cache = EmptySubtreeCache(TreeHasher.from_names("sha512"))
        with pytest.raises(InvalidArgumentException):
            MerkleTree(hasher=TreeHasher(), empty_cache=cache)


class TestSharedCache:

    def test_fresh_cache_and_its_hasher_are_used(self):
        cache = EmptySubtreeCache(TreeHasher.from_names("sha512"))
        tree = MerkleTree(empty_cache=cache)
        tree.build([b"a"], total_size=2)

        assert tree.empty_cache is cache
        assert tree.hasher is cache.hasher
        assert len(tree.root_hash()) == 64

    def test_node_on_unbuilt_tree_raises(self):
        with pytest.raises(InvalidStateException):
            MerkleTree().node(0, 0)


class TestHashFailure:

    def test_failure_propagates_and_poisons_tree(self):
        tree = MerkleTree(hasher=TreeHasher(node_digest=FailingDigest(succeed_calls=2)))

        with pytest.raises(HashFailureException):
            tree.build(make_leaves(4), total_size=8)

        assert tree.root_hash() is None
        with pytest.raises(InvalidStateException, match="discard"):
            tree.build(make_leaves(4), total_size=8)
