"""
hashtree - deterministic binary hash trees over padded leaf batches.

Builds a root commitment over an ordered batch of leaves, pads missing
leaves with cached empty-subtree hashes, and derives per-leaf inclusion
proofs.

Usage:
    from hashtree import MerkleTree, ProofGenerator, verify_merkle_proof

    tree = MerkleTree()
    tree.build([a, b, c], total_size=4)
    proof = ProofGenerator.generate_inclusion_proof(tree, 2)
    assert verify_merkle_proof(proof)
"""
from hashtree.crypto.hashing import TreeHasher, get_hash_function, sha256
from hashtree.merkle import (
    EmptySubtreeCache,
    MerkleTree,
    ProofGenerator,
    RecursiveMerkleRoot,
    BuilderStrategy,
    BuildResult,
    TreeBuilder,
    MaterializingBuilder,
    StreamingBuilder,
    select_builder,
    verify_merkle_proof,
    verify_leaf,
)
from hashtree.schemas import (
    ProofSide,
    ProofNode,
    InclusionProof,
    HashTreeException,
    InvalidStateException,
    InvalidArgumentException,
    HashFailureException,
)

__version__ = "0.1.0"

__all__ = [
    "TreeHasher",
    "get_hash_function",
    "sha256",
    "EmptySubtreeCache",
    "MerkleTree",
    "ProofGenerator",
    "RecursiveMerkleRoot",
    "BuilderStrategy",
    "BuildResult",
    "TreeBuilder",
    "MaterializingBuilder",
    "StreamingBuilder",
    "select_builder",
    "verify_merkle_proof",
    "verify_leaf",
    "ProofSide",
    "ProofNode",
    "InclusionProof",
    "HashTreeException",
    "InvalidStateException",
    "InvalidArgumentException",
    "HashFailureException",
]
