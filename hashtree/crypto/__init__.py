"""
Hash capabilities for tree construction.
"""
from .hashing import (
    HashFunction,
    DEFAULT_ALGORITHM,
    sha256,
    hash_concat,
    get_hash_function,
    TreeHasher,
)

__all__ = [
    "HashFunction",
    "DEFAULT_ALGORITHM",
    "sha256",
    "hash_concat",
    "get_hash_function",
    "TreeHasher",
]
