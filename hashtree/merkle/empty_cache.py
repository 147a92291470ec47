"""
Module 03 - Empty Subtree Cache
Per-height hashes of subtrees whose every leaf is the empty sentinel.

Rules:
1. Height 0: the empty-leaf hash, leaf_digest(b""), computed at most once
2. Height h >= 1: combine(empty[h-1], empty[h-1])
3. Only as many heights as the largest empty gap needs are precomputed;
   higher heights are filled lazily on demand

One cache value is built per commitment and shared read-only by both
builder strategies.
"""
from __future__ import annotations

import logging
from typing import Optional

from hashtree.crypto.hashing import TreeHasher
from hashtree.schemas.errors import InvalidArgumentException


logger = logging.getLogger(__name__)


class EmptySubtreeCache:
    """
    Memoized empty-subtree hashes, indexed by subtree height.

    Example:
        >>> cache = EmptySubtreeCache(TreeHasher())
        >>> cache.get(1) == cache.hasher.combine(cache.get(0), cache.get(0))
        True
    """

    def __init__(self, hasher: Optional[TreeHasher] = None) -> None:
        self.hasher = hasher or TreeHasher()
        self._empty_leaf_hash: Optional[bytes] = None
        self._hashes: list[bytes] = []

    @staticmethod
    def max_height_for(empty_leaf_count: int) -> int:
        """
        Number of heights needed to cover `empty_leaf_count` missing leaves.

        floor(log2(empty_leaf_count)) + 1, or 0 when nothing is missing.
        """
        if empty_leaf_count < 0:
            raise InvalidArgumentException(
                f"Empty leaf count must be non-negative, got {empty_leaf_count}",
                argument="empty_leaf_count",
            )
        return empty_leaf_count.bit_length()

    @property
    def empty_leaf_hash(self) -> bytes:
        """Hash of the zero-length leaf, memoized."""
        if self._empty_leaf_hash is None:
            self._empty_leaf_hash = self.hasher.empty_leaf_hash()
        return self._empty_leaf_hash

    def precompute(self, max_height: int) -> None:
        """Fill heights 0..max_height-1."""
        if max_height > 0:
            self.get(max_height - 1)
        logger.debug(f"Empty subtree cache holds {len(self._hashes)} heights")

    def get(self, height: int) -> bytes:
        """Return the empty-subtree hash at `height`, computing missing heights."""
        if height < 0:
            raise InvalidArgumentException(
                f"Subtree height must be non-negative, got {height}",
                argument="height",
            )
        if not self._hashes:
            self._hashes.append(self.empty_leaf_hash)
        while len(self._hashes) <= height:
            below = self._hashes[-1]
            self._hashes.append(self.hasher.combine(below, below))
        return self._hashes[height]

    def for_width(self, width: int) -> bytes:
        """Empty-subtree hash for a power-of-two range of `width` leaves."""
        if width <= 0 or width & (width - 1):
            raise InvalidArgumentException(
                f"Range width must be a power of two, got {width}",
                argument="width",
            )
        return self.get(width.bit_length() - 1)

    def heights(self) -> list[bytes]:
        """Copy of the currently cached hashes, lowest height first."""
        return list(self._hashes)

    def __len__(self) -> int:
        return len(self._hashes)

    def __contains__(self, height: object) -> bool:
        return isinstance(height, int) and 0 <= height < len(self._hashes)


def resolve_cache(
    hasher: Optional[TreeHasher],
    empty_cache: Optional[EmptySubtreeCache],
) -> tuple[TreeHasher, EmptySubtreeCache]:
    """
    Pair a hasher with an empty-subtree cache built from the same hasher.

    A missing hasher is taken from the cache; a missing cache is created.

    Raises:
        InvalidArgumentException: If both are given and the cache was built
            with a different hasher
    """
    if empty_cache is None:
        hasher = hasher if hasher is not None else TreeHasher()
        return hasher, EmptySubtreeCache(hasher)
    if hasher is not None and empty_cache.hasher != hasher:
        raise InvalidArgumentException(
            "Empty subtree cache was built with a different hasher",
            argument="empty_cache",
        )
    return empty_cache.hasher, empty_cache


__all__ = ["EmptySubtreeCache", "resolve_cache"]
