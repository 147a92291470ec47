"""
Module 03 - Recursive Root Computation
Root-only tree hashing by divide and conquer, without storing levels.

Rules:
1. The batch length must be a power of two (pad with b"" beforehand)
2. A range whose first leaf is b"" is an all-empty subtree and resolves to
   the cached empty-subtree hash for its width
3. Two-leaf ranges: combine(leaf_hash(a), leaf_hash(b))
4. Leaves use the hasher's leaf digest, internal nodes its node digest
5. b"" always hashes to the memoized empty-leaf hash; other leaves are
   hashed directly with no domain-separation prefix

Rule 2 is only sound when empty leaves form one trailing block. That is
validated up front unless require_trailing_empty is switched off.

Working memory is the recursion depth, O(log n).
"""
from __future__ import annotations

import logging
from typing import Optional, Sequence

from hashtree.crypto.hashing import TreeHasher
from hashtree.merkle.empty_cache import EmptySubtreeCache, resolve_cache
from hashtree.merkle.merkle_tree import is_power_of_two
from hashtree.schemas.errors import InvalidArgumentException


logger = logging.getLogger(__name__)


def first_empty_index(leaves: Sequence[bytes]) -> int:
    """Index of the first b"" leaf, or len(leaves) if there is none."""
    for i, leaf in enumerate(leaves):
        if len(leaf) == 0:
            return i
    return len(leaves)


def check_trailing_empty(leaves: Sequence[bytes]) -> None:
    """
    Ensure every empty leaf sits in one contiguous block at the end.

    Raises:
        InvalidArgumentException: If a non-empty leaf follows an empty one
    """
    start = first_empty_index(leaves)
    for i in range(start, len(leaves)):
        if len(leaves[i]) > 0:
            raise InvalidArgumentException(
                f"Non-empty leaf at index {i} follows an empty leaf at index {start}",
                argument="leaves",
                details={"first_empty_index": start, "offending_index": i},
            )


class RecursiveMerkleRoot:
    """
    Streaming root computation over a power-of-two leaf batch.

    Unlike MerkleTree, no levels are kept, so no proofs can be derived.
    The instance remembers the last computed root and may be reused.

    Example:
        >>> hasher = TreeHasher.from_names("sha256", leaf="sha3_256")
        >>> RecursiveMerkleRoot(hasher).generate([b"a", b"b", b"", b""])
    """

    def __init__(
        self,
        hasher: Optional[TreeHasher] = None,
        require_trailing_empty: bool = True,
        empty_cache: Optional[EmptySubtreeCache] = None,
    ) -> None:
        self.hasher, self._empty_cache = resolve_cache(hasher, empty_cache)
        self.require_trailing_empty = require_trailing_empty
        self._root: Optional[bytes] = None

    @property
    def root(self) -> Optional[bytes]:
        """Last computed root, None before the first generate()."""
        return self._root

    def get_root(self) -> Optional[bytes]:
        return self._root

    @property
    def empty_cache(self) -> EmptySubtreeCache:
        return self._empty_cache

    def generate(self, leaves: Sequence[bytes]) -> bytes:
        """
        Compute and remember the root of `leaves`.

        Raises:
            InvalidArgumentException: If the batch length is not a power of two,
                or empty leaves are not trailing (when required)
            HashFailureException: If the hash capability fails
        """
        if not is_power_of_two(len(leaves)):
            raise InvalidArgumentException(
                f"Leaf count must be a power of two, got {len(leaves)}",
                argument="leaves",
            )
        if self.require_trailing_empty:
            check_trailing_empty(leaves)

        logger.debug(f"Computing recursive root over {len(leaves)} leaves")
        root = self._subtree_root(leaves, 0, len(leaves))
        self._root = root
        return root

    def _leaf_hash(self, leaf: bytes) -> bytes:
        if len(leaf) == 0:
            return self._empty_cache.empty_leaf_hash
        return self.hasher.hash_leaf(leaf)

    def _subtree_root(self, leaves: Sequence[bytes], start: int, width: int) -> bytes:
        if len(leaves[start]) == 0:
            return self._empty_cache.for_width(width)
        if width == 1:
            return self._leaf_hash(leaves[start])
        if width == 2:
            left = self._leaf_hash(leaves[start])
            right = self._leaf_hash(leaves[start + 1])
            return self.hasher.combine(left, right)

        half = width // 2
        left = self._subtree_root(leaves, start, half)
        right = self._subtree_root(leaves, start + half, half)
        return self.hasher.combine(left, right)


__all__ = [
    "RecursiveMerkleRoot",
    "check_trailing_empty",
    "first_empty_index",
]
