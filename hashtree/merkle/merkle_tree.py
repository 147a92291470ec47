"""
Module 03 - Merkle Tree Implementation
Level-materializing tree construction over a padded leaf batch.

This module provides:
- MerkleTree: builds every level bottom-up, once, then answers root and
  proof queries against the immutable levels
- Power-of-two helpers and a one-shot build_merkle_root()

Canonical Commitment Rules (Hard Contracts):
1. Capacity: total_size is a power of two and >= len(leaves)
2. Level 0: the leaf batch as given; b"" becomes the empty-leaf hash
   (with hash_leaves=True every other leaf becomes leaf_digest(leaf))
3. Parent hashing: combine(left, right) = node_digest(left + right)
4. Padding rule: a trailing unpaired node at height h is combined with the
   empty-subtree hash of height h (never duplicated, never dropped)
5. No non-empty leaves: root = empty-subtree hash at height tree_height - 1

Determinism Notes:
- This module never sorts leaves; it trusts input order
"""
from __future__ import annotations

import logging
from typing import Optional, Sequence

from hashtree.crypto.hashing import TreeHasher
from hashtree.merkle.empty_cache import EmptySubtreeCache, resolve_cache
from hashtree.schemas.errors import (
    HashFailureException,
    InvalidArgumentException,
    InvalidStateException,
)
from hashtree.schemas.proof import ProofNode


logger = logging.getLogger(__name__)


def is_power_of_two(n: int) -> bool:
    """True for 1, 2, 4, 8, ...; False for zero and negatives."""
    return n > 0 and n & (n - 1) == 0


def log2_exact(n: int) -> int:
    """Base-2 logarithm of a power of two."""
    if not is_power_of_two(n):
        raise InvalidArgumentException(
            f"Expected a power of two, got {n}", argument="n"
        )
    return n.bit_length() - 1


def compute_tree_height(total_size: int) -> int:
    """
    Number of levels of a tree with `total_size` leaf slots, root included.

    A single slot has height 1, two slots have height 2, four have 3, etc.
    """
    return log2_exact(total_size) + 1


class MerkleTree:
    """
    A binary hash tree materialized level by level.

    The tree may be built exactly once. After a successful build it is
    read-only, so root and proof queries are safe to call concurrently.
    Builds themselves are not synchronized.

    Example:
        >>> tree = MerkleTree()
        >>> tree.build([a, b, c], total_size=4)
        >>> proof = tree.get_proof(2)
    """

    def __init__(
        self,
        hasher: Optional[TreeHasher] = None,
        hash_leaves: bool = False,
        empty_cache: Optional[EmptySubtreeCache] = None,
    ) -> None:
        self.hasher, self._empty_cache = resolve_cache(hasher, empty_cache)
        self.hash_leaves = hash_leaves
        self._levels: list[list[bytes]] = []
        self._total_size = 0
        self._tree_height = 0
        self._non_empty_leaf_count = 0
        self._built = False
        self._failed = False

    # ------------------------------------------------------------------
    # Build
    # ------------------------------------------------------------------

    def build(self, leaves: Sequence[bytes], total_size: int) -> None:
        """
        Materialize every level bottom-up from `leaves`.

        Args:
            leaves: Ordered leaf batch; b"" marks an empty leaf
            total_size: Power-of-two capacity, >= len(leaves)

        Raises:
            InvalidStateException: If the tree was already built, or a previous
                build aborted on a hash failure
            InvalidArgumentException: If total_size is not a power of two or
                the batch does not fit
            HashFailureException: If the hash capability fails; the instance
                must then be discarded
        """
        if self._built:
            raise InvalidStateException("Merkle tree is already built")
        if self._failed:
            raise InvalidStateException(
                "A previous build failed on this tree; discard it and build a new one"
            )
        if not is_power_of_two(total_size):
            raise InvalidArgumentException(
                f"Total size must be a power of two, got {total_size}",
                argument="total_size",
            )
        if len(leaves) > total_size:
            raise InvalidArgumentException(
                f"{len(leaves)} leaves exceed total size {total_size}",
                argument="leaves",
                details={"leaf_count": len(leaves), "total_size": total_size},
            )

        tree_height = compute_tree_height(total_size)
        non_empty = sum(1 for leaf in leaves if len(leaf) > 0)
        logger.debug(
            f"Building tree: {len(leaves)} leaves ({non_empty} non-empty), "
            f"total_size={total_size}, height={tree_height}"
        )

        try:
            self._empty_cache.precompute(
                EmptySubtreeCache.max_height_for(total_size - non_empty)
            )
            levels = [[self._leaf_node(leaf) for leaf in leaves]]
            for height in range(tree_height - 1):
                levels.append(self._next_level(levels[height], height))
        except HashFailureException:
            self._failed = True
            logger.warning("Hash capability failed during tree build; tree is unusable")
            raise

        self._levels = levels
        self._total_size = total_size
        self._tree_height = tree_height
        self._non_empty_leaf_count = non_empty
        self._built = True

    def _leaf_node(self, leaf: bytes) -> bytes:
        if len(leaf) == 0:
            return self._empty_cache.empty_leaf_hash
        if self.hash_leaves:
            return self.hasher.hash_leaf(leaf)
        return bytes(leaf)

    def _next_level(self, level: list[bytes], height: int) -> list[bytes]:
        count = len(level)
        parents = [
            self.hasher.combine(level[i], level[i + 1])
            for i in range(0, count - 1, 2)
        ]
        if count % 2 == 1:
            parents.append(self.hasher.combine(level[-1], self._empty_cache.get(height)))
        return parents

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def root_hash(self) -> Optional[bytes]:
        """
        Return the commitment.

        None if unbuilt; the top empty-subtree hash if no leaf carried data;
        otherwise the single hash of the top level.
        """
        if not self._built:
            return None
        if self._non_empty_leaf_count == 0:
            return self._empty_cache.get(self._tree_height - 1)
        return self._levels[-1][0]

    def get_proof(self, index: int) -> list[ProofNode]:
        """Inclusion proof for the leaf at `index`, leaf to root."""
        from hashtree.merkle.merkle_proofs import ProofGenerator

        return ProofGenerator.generate(self, index)

    def require_built(self) -> None:
        """Raise InvalidStateException unless a build has completed."""
        if not self._built:
            raise InvalidStateException("Merkle tree has not been built")

    @property
    def is_built(self) -> bool:
        return self._built

    @property
    def total_size(self) -> int:
        return self._total_size

    @property
    def tree_height(self) -> int:
        return self._tree_height

    @property
    def leaf_count(self) -> int:
        """Number of supplied leaves, empty sentinels included."""
        return len(self._levels[0]) if self._levels else 0

    @property
    def non_empty_leaf_count(self) -> int:
        return self._non_empty_leaf_count

    @property
    def empty_cache(self) -> EmptySubtreeCache:
        return self._empty_cache

    @property
    def levels(self) -> list[list[bytes]]:
        """Copies of all levels, leaf level first."""
        return [list(level) for level in self._levels]

    def level(self, height: int) -> list[bytes]:
        """Copy of one level; 0 is the leaf level."""
        self.require_built()
        if height < 0 or height >= self._tree_height:
            raise InvalidArgumentException(
                f"Level {height} out of range for tree of height {self._tree_height}",
                argument="height",
            )
        return list(self._levels[height])

    def node(self, height: int, index: int) -> Optional[bytes]:
        """Node at (height, index), or None past the last real node."""
        self.require_built()
        level = self._levels[height]
        return level[index] if index < len(level) else None


def build_merkle_root(
    leaves: Sequence[bytes],
    total_size: int,
    hasher: Optional[TreeHasher] = None,
    hash_leaves: bool = False,
) -> bytes:
    """
    Build a throwaway tree and return its root.

    Example:
        >>> root = build_merkle_root([sha256(b"a"), sha256(b"b")], total_size=4)
        >>> len(root)
        32
    """
    tree = MerkleTree(hasher=hasher, hash_leaves=hash_leaves)
    tree.build(leaves, total_size)
    return tree.root_hash()


__all__ = [
    "MerkleTree",
    "is_power_of_two",
    "log2_exact",
    "compute_tree_height",
    "build_merkle_root",
]
