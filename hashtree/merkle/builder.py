"""
Module 03 - Tree Builders
One builder abstraction, two interchangeable strategies.

- MaterializingBuilder: keeps every level (MerkleTree), so proofs can be
  derived afterwards
- StreamingBuilder: computes only the root (RecursiveMerkleRoot) with
  O(log n) working memory

Both strategies hash non-empty leaves with the leaf digest and share one
EmptySubtreeCache, so for a batch whose empty leaves are trailing they
produce byte-identical roots.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional, Sequence

from hashtree.crypto.hashing import TreeHasher
from hashtree.merkle.empty_cache import EmptySubtreeCache, resolve_cache
from hashtree.merkle.merkle_tree import MerkleTree, is_power_of_two
from hashtree.merkle.recursive import RecursiveMerkleRoot
from hashtree.schemas.errors import ConfigurationException, InvalidArgumentException

if TYPE_CHECKING:
    from hashtree.config.runtime import RuntimeConfig


logger = logging.getLogger(__name__)


class BuilderStrategy(str, Enum):
    """How a commitment is computed."""

    MATERIALIZING = "materializing"
    STREAMING = "streaming"

    @classmethod
    def parse(cls, value: "str | BuilderStrategy") -> "BuilderStrategy":
        try:
            return cls(value)
        except ValueError as e:
            raise ConfigurationException(
                f"Unknown builder strategy: {value!r}", key="strategy"
            ) from e


@dataclass(frozen=True)
class BuildResult:
    """Outcome of a build: the root and, when materialized, the tree."""
    root: bytes
    strategy: BuilderStrategy
    tree: Optional[MerkleTree] = None

    @property
    def supports_proofs(self) -> bool:
        return self.tree is not None


class TreeBuilder(ABC):
    """Builds a commitment over a leaf batch padded to `total_size`."""

    strategy: BuilderStrategy

    def __init__(
        self,
        hasher: Optional[TreeHasher] = None,
        empty_cache: Optional[EmptySubtreeCache] = None,
    ) -> None:
        self.hasher, self.empty_cache = resolve_cache(hasher, empty_cache)

    @abstractmethod
    def build(self, leaves: Sequence[bytes], total_size: int) -> BuildResult:
        """Compute the commitment for `leaves`."""


class MaterializingBuilder(TreeBuilder):
    """Builds a full MerkleTree; use when proofs will be requested."""

    strategy = BuilderStrategy.MATERIALIZING

    def build(self, leaves: Sequence[bytes], total_size: int) -> BuildResult:
        tree = MerkleTree(hasher=self.hasher, hash_leaves=True, empty_cache=self.empty_cache)
        tree.build(leaves, total_size)
        return BuildResult(root=tree.root_hash(), strategy=self.strategy, tree=tree)


class StreamingBuilder(TreeBuilder):
    """Computes the root only; use when no proofs are needed."""

    strategy = BuilderStrategy.STREAMING

    def __init__(
        self,
        hasher: Optional[TreeHasher] = None,
        empty_cache: Optional[EmptySubtreeCache] = None,
        require_trailing_empty: bool = True,
    ) -> None:
        super().__init__(hasher, empty_cache)
        self.require_trailing_empty = require_trailing_empty

    def build(self, leaves: Sequence[bytes], total_size: int) -> BuildResult:
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
        padded = list(leaves) + [b""] * (total_size - len(leaves))
        recursive = RecursiveMerkleRoot(
            hasher=self.hasher,
            require_trailing_empty=self.require_trailing_empty,
            empty_cache=self.empty_cache,
        )
        return BuildResult(root=recursive.generate(padded), strategy=self.strategy)


def select_builder(
    with_proofs: bool,
    hasher: Optional[TreeHasher] = None,
    empty_cache: Optional[EmptySubtreeCache] = None,
) -> TreeBuilder:
    """Pick the materializing strategy when proofs are needed, else streaming."""
    if with_proofs:
        return MaterializingBuilder(hasher, empty_cache)
    return StreamingBuilder(hasher, empty_cache)


def builder_for_config(
    config: "RuntimeConfig",
    with_proofs: Optional[bool] = None,
) -> TreeBuilder:
    """
    Create a builder from runtime configuration.

    An explicit `with_proofs` wins over the configured strategy.
    """
    hasher = config.build_hasher()
    if with_proofs is not None:
        strategy = BuilderStrategy.MATERIALIZING if with_proofs else BuilderStrategy.STREAMING
    else:
        strategy = BuilderStrategy.parse(config.tree.strategy)

    digest_name = getattr(hasher.node_digest, "__name__", repr(hasher.node_digest))
    logger.debug(f"Using {strategy.value} builder with {digest_name}")
    if strategy is BuilderStrategy.MATERIALIZING:
        return MaterializingBuilder(hasher)
    return StreamingBuilder(
        hasher, require_trailing_empty=config.tree.require_trailing_empty
    )


__all__ = [
    "BuilderStrategy",
    "BuildResult",
    "TreeBuilder",
    "MaterializingBuilder",
    "StreamingBuilder",
    "select_builder",
    "builder_for_config",
]
