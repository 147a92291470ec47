"""
Module 03 - Merkle Proofs
Inclusion proof generation from a built tree, and proof verification.

This module provides:
- ProofGenerator: walk a built MerkleTree from a leaf index to the root
- compute_root_from_path / verify_merkle_proof / verify_leaf: the
  verification algorithm every consumer of a proof must run
- MerkleProver / MerkleVerifier: class-based convenience wrappers

Verification rule:
    current = leaf node
    for (sibling, side) in path:
        side == LEFT  -> current = combine(sibling, current)
        side == RIGHT -> current = combine(current, sibling)
    accept iff current == root
"""
from __future__ import annotations

import logging
from typing import Optional, Sequence

from hashtree.crypto.hashing import TreeHasher
from hashtree.merkle.merkle_tree import MerkleTree
from hashtree.schemas.errors import (
    ErrorCodes,
    InvalidArgumentException,
    MerkleVerificationException,
)
from hashtree.schemas.proof import InclusionProof, ProofNode, ProofSide


logger = logging.getLogger(__name__)


class ProofGenerator:
    """Derives sibling paths from the levels of a built MerkleTree."""

    @staticmethod
    def generate(tree: MerkleTree, index: int) -> list[ProofNode]:
        """
        Generate the sibling path for the leaf at `index`.

        Args:
            tree: A built tree
            index: 0-based index into the supplied leaf batch

        Returns:
            (sibling hash, side) entries ordered from leaf level to root

        Raises:
            InvalidStateException: If the tree is unbuilt
            InvalidArgumentException: If index is out of range
        """
        tree.require_built()
        if index < 0 or index >= tree.leaf_count:
            raise InvalidArgumentException(
                f"Leaf index {index} out of range for {tree.leaf_count} leaves",
                argument="index",
            )

        path: list[ProofNode] = []
        k = index
        for height in range(tree.tree_height - 1):
            if k % 2 == 1:
                # Right child: sibling is always a real node
                path.append(ProofNode(hash=tree.node(height, k - 1), side=ProofSide.LEFT))
            else:
                sibling = tree.node(height, k + 1)
                if sibling is None:
                    sibling = tree.empty_cache.get(height)
                path.append(ProofNode(hash=sibling, side=ProofSide.RIGHT))
            k //= 2
        return path

    @staticmethod
    def generate_inclusion_proof(tree: MerkleTree, index: int) -> InclusionProof:
        """Generate a self-contained InclusionProof for the leaf at `index`."""
        path = ProofGenerator.generate(tree, index)
        return InclusionProof(
            leaf=tree.node(0, index),
            index=index,
            path=path,
            root=tree.root_hash(),
        )


def compute_root_from_path(
    leaf_node: bytes,
    path: Sequence[ProofNode],
    hasher: Optional[TreeHasher] = None,
) -> bytes:
    """Recombine a leaf node with its sibling path and return the implied root."""
    hasher = hasher or TreeHasher()
    current = leaf_node
    for entry in path:
        if entry.side is ProofSide.LEFT:
            current = hasher.combine(entry.hash, current)
        else:
            current = hasher.combine(current, entry.hash)
    return current


def _sides_match_index(index: int, path: Sequence[ProofNode]) -> bool:
    k = index
    for entry in path:
        expected = ProofSide.LEFT if k % 2 == 1 else ProofSide.RIGHT
        if entry.side is not expected:
            return False
        k //= 2
    return k == 0


def verify_merkle_proof(proof: InclusionProof, hasher: Optional[TreeHasher] = None) -> bool:
    """
    Verify an InclusionProof.

    Besides recomputing the root, checks that every side tag agrees with the
    index, so a proof cannot be replayed for a different position.

    Returns:
        True if the proof is valid, False otherwise
    """
    hasher = hasher or TreeHasher()
    if not hasher.sort_pairs and not _sides_match_index(proof.index, proof.path):
        logger.debug(f"Proof sides do not match leaf index {proof.index}")
        return False
    return compute_root_from_path(proof.leaf, proof.path, hasher) == proof.root


def verify_leaf(
    value: bytes,
    index: int,
    path: Sequence[ProofNode],
    root: bytes,
    hasher: Optional[TreeHasher] = None,
    hash_leaves: bool = False,
) -> bool:
    """
    Verify a raw leaf value against a root.

    Applies the same leaf rule the tree used: b"" maps to the empty-leaf
    hash, other values are taken as-is or hashed when `hash_leaves` is set.
    """
    hasher = hasher or TreeHasher()
    if len(value) == 0:
        leaf_node = hasher.empty_leaf_hash()
    elif hash_leaves:
        leaf_node = hasher.hash_leaf(value)
    else:
        leaf_node = bytes(value)
    proof = InclusionProof(leaf=leaf_node, index=index, path=list(path), root=root)
    return verify_merkle_proof(proof, hasher)


class MerkleProver:
    """
    Convenience class for generating Merkle proofs.

    Example:
        >>> tree = MerkleProver.build([sha256(b"a"), sha256(b"b")], total_size=2)
        >>> proof = MerkleProver.prove(tree, index=1)
        >>> proof.path[0].side
        <ProofSide.LEFT: 'left'>
    """

    @staticmethod
    def build(
        leaves: Sequence[bytes],
        total_size: int,
        hasher: Optional[TreeHasher] = None,
        hash_leaves: bool = False,
    ) -> MerkleTree:
        """Build and return a tree ready for proof queries."""
        tree = MerkleTree(hasher=hasher, hash_leaves=hash_leaves)
        tree.build(leaves, total_size)
        return tree

    @staticmethod
    def prove(tree: MerkleTree, index: int) -> InclusionProof:
        """Generate an InclusionProof for the leaf at `index`."""
        return ProofGenerator.generate_inclusion_proof(tree, index)

    @staticmethod
    def prove_all(tree: MerkleTree) -> list[InclusionProof]:
        """Generate proofs for every supplied leaf, in index order."""
        return [
            ProofGenerator.generate_inclusion_proof(tree, i)
            for i in range(tree.leaf_count)
        ]


class MerkleVerifier:
    """
    Convenience class for verifying Merkle proofs.

    Example:
        >>> MerkleVerifier.verify(proof)
        True
    """

    @staticmethod
    def verify(proof: InclusionProof, hasher: Optional[TreeHasher] = None) -> bool:
        """Return True if the proof is valid."""
        return verify_merkle_proof(proof, hasher)

    @staticmethod
    def verify_leaf_in_root(
        value: bytes,
        index: int,
        path: Sequence[ProofNode],
        root: bytes,
        hasher: Optional[TreeHasher] = None,
        hash_leaves: bool = False,
    ) -> bool:
        """Verify a raw leaf value is included under `root`."""
        return verify_leaf(value, index, path, root, hasher, hash_leaves)

    @staticmethod
    def require_valid(
        proof: InclusionProof,
        expected_root: Optional[bytes] = None,
        hasher: Optional[TreeHasher] = None,
    ) -> None:
        """
        Raise unless the proof verifies (and matches `expected_root`, if given).

        Raises:
            MerkleVerificationException: On any mismatch
        """
        if expected_root is not None and proof.root != expected_root:
            raise MerkleVerificationException(
                "Proof root does not match the expected root",
                leaf_index=proof.index,
                code=ErrorCodes.ROOT_MISMATCH,
            )
        if not verify_merkle_proof(proof, hasher):
            raise MerkleVerificationException(
                f"Inclusion proof for leaf {proof.index} does not verify",
                leaf_index=proof.index,
            )


__all__ = [
    "ProofGenerator",
    "compute_root_from_path",
    "verify_merkle_proof",
    "verify_leaf",
    "MerkleProver",
    "MerkleVerifier",
]
