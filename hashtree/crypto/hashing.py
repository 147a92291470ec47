"""
Module 02 - Hashing Utilities
Hash capabilities used to build tree commitments.

This module provides:
- SHA-256 hashing for raw bytes
- Resolution of hashlib algorithm names into pure digest functions
- TreeHasher: the leaf-hash / node-combine capability used by every builder

Security/Determinism Notes:
- Digest functions are pure: a fresh hashlib object is created per call,
  so no accumulator state is ever shared between callers
- combine() always feeds the first operand, then the second
- Leaves are hashed directly, with no domain-separation prefix
"""
from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Callable, Optional

from hashtree.schemas.errors import HashFailureException, InvalidArgumentException


HashFunction = Callable[[bytes], bytes]
"""A pure function from a byte string to a fixed-format digest."""

DEFAULT_ALGORITHM = "sha256"


def sha256(data: bytes) -> bytes:
    """
    Compute SHA-256 hash of raw bytes.

    Args:
        data: Raw bytes to hash

    Returns:
        32-byte SHA-256 digest

    Example:
        >>> sha256(b"hello").hex()
        '2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824'
    """
    return hashlib.sha256(data).digest()


def hash_concat(left: bytes, right: bytes) -> bytes:
    """
    Hash the concatenation of two byte sequences.

    This is the default parent rule: parent = sha256(left + right)
    """
    return sha256(left + right)


def get_hash_function(name: str) -> HashFunction:
    """
    Resolve a hashlib algorithm name into a pure digest function.

    Args:
        name: Any name accepted by hashlib.new (e.g. "sha256", "sha3_256", "blake2b")

    Returns:
        Function mapping bytes to the algorithm's digest

    Raises:
        InvalidArgumentException: If the algorithm is unknown or needs a
            digest length (SHAKE variants)
    """
    normalized = name.strip().lower()
    if normalized == "sha256":
        return sha256
    try:
        probe = hashlib.new(normalized)
    except (ValueError, TypeError) as e:
        raise InvalidArgumentException(
            f"Unknown hash algorithm: {name!r}", argument="algorithm"
        ) from e
    if probe.digest_size == 0:
        raise InvalidArgumentException(
            f"Hash algorithm {name!r} has no fixed digest size", argument="algorithm"
        )

    def digest(data: bytes) -> bytes:
        return hashlib.new(normalized, data).digest()

    digest.__name__ = normalized
    return digest


@dataclass(frozen=True)
class TreeHasher:
    """
    Leaf-hash and node-combine capability shared by the tree builders.

    Attributes:
        node_digest: Digest used for internal nodes (combine)
        leaf_digest: Digest used for leaves; defaults to node_digest
        sort_pairs: Order the two operands bytewise before combining.
            Proof sides stop mattering, only membership can be proven.
    """
    node_digest: HashFunction = sha256
    leaf_digest: Optional[HashFunction] = None
    sort_pairs: bool = False

    @classmethod
    def from_names(
        cls,
        node: str = DEFAULT_ALGORITHM,
        leaf: Optional[str] = None,
        sort_pairs: bool = False,
    ) -> "TreeHasher":
        """Build a hasher from hashlib algorithm names."""
        return cls(
            node_digest=get_hash_function(node),
            leaf_digest=get_hash_function(leaf) if leaf else None,
            sort_pairs=sort_pairs,
        )

    def hash_leaf(self, leaf: bytes) -> bytes:
        """Hash a raw leaf with the leaf digest."""
        digest = self.leaf_digest or self.node_digest
        return _call(digest, leaf, "hash_leaf")

    def empty_leaf_hash(self) -> bytes:
        """Hash of the zero-length empty-leaf sentinel."""
        return self.hash_leaf(b"")

    def combine(self, left: bytes, right: bytes) -> bytes:
        """Compute a parent hash: node_digest(left + right)."""
        if self.sort_pairs and right < left:
            left, right = right, left
        return _call(self.node_digest, left + right, "combine")


def _call(digest: HashFunction, data: bytes, operation: str) -> bytes:
    try:
        result = digest(data)
    except HashFailureException:
        raise
    except Exception as e:
        raise HashFailureException(
            f"Hash capability failed during {operation}: {e}",
            operation=operation,
        ) from e
    if not isinstance(result, (bytes, bytearray)) or len(result) == 0:
        raise HashFailureException(
            f"Hash capability returned an invalid digest during {operation}",
            operation=operation,
            details={"result_type": type(result).__name__},
        )
    return bytes(result)


__all__ = [
    "HashFunction",
    "DEFAULT_ALGORITHM",
    "sha256",
    "hash_concat",
    "get_hash_function",
    "TreeHasher",
]
