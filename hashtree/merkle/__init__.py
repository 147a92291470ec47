"""
Module 03 - Merkle Tree and Commitments
Deterministic tree construction over padded leaf batches, empty-subtree
caching and inclusion proofs.

This module provides:
- EmptySubtreeCache: per-height hashes of all-empty subtrees
- MerkleTree: level-materializing tree, built once, then read-only
- ProofGenerator + verification helpers
- RecursiveMerkleRoot: root-only divide-and-conquer variant
- TreeBuilder strategies selected by whether proofs are needed

Canonical Commitment Rules:
1. Capacity is a power of two; b"" marks an empty leaf
2. Empty leaf: leaf_digest(b""); empty subtree: combine(e, e) per height
3. Parent hashing: node_digest(left + right)
4. Padding: an unpaired trailing node pairs with the empty-subtree hash
   of its height

Usage:
    from hashtree.merkle import MerkleTree, ProofGenerator, verify_merkle_proof

    tree = MerkleTree()
    tree.build(leaves, total_size=8)
    root = tree.root_hash()

    proof = ProofGenerator.generate_inclusion_proof(tree, index=2)
    assert verify_merkle_proof(proof)
"""
from .empty_cache import EmptySubtreeCache, resolve_cache

from .merkle_tree import (
    MerkleTree,
    is_power_of_two,
    log2_exact,
    compute_tree_height,
    build_merkle_root,
)

from .merkle_proofs import (
    ProofGenerator,
    compute_root_from_path,
    verify_merkle_proof,
    verify_leaf,
    MerkleProver,
    MerkleVerifier,
)

from .recursive import (
    RecursiveMerkleRoot,
    check_trailing_empty,
    first_empty_index,
)

from .builder import (
    BuilderStrategy,
    BuildResult,
    TreeBuilder,
    MaterializingBuilder,
    StreamingBuilder,
    select_builder,
    builder_for_config,
)


__all__ = [
    # Cache
    "EmptySubtreeCache",
    "resolve_cache",
    # Tree
    "MerkleTree",
    "is_power_of_two",
    "log2_exact",
    "compute_tree_height",
    "build_merkle_root",
    # Proofs
    "ProofGenerator",
    "compute_root_from_path",
    "verify_merkle_proof",
    "verify_leaf",
    "MerkleProver",
    "MerkleVerifier",
    # Recursive variant
    "RecursiveMerkleRoot",
    "check_trailing_empty",
    "first_empty_index",
    # Builders
    "BuilderStrategy",
    "BuildResult",
    "TreeBuilder",
    "MaterializingBuilder",
    "StreamingBuilder",
    "select_builder",
    "builder_for_config",
]
