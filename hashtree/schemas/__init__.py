"""
Schemas shared across the package: error taxonomy and proof models.
"""
from .errors import (
    ErrorCodes,
    HashTreeError,
    HashTreeException,
    InvalidStateException,
    InvalidArgumentException,
    HashFailureException,
    MerkleVerificationException,
    ConfigurationException,
)
from .proof import ProofSide, ProofNode, InclusionProof

__all__ = [
    # Errors
    "ErrorCodes",
    "HashTreeError",
    "HashTreeException",
    "InvalidStateException",
    "InvalidArgumentException",
    "HashFailureException",
    "MerkleVerificationException",
    "ConfigurationException",
    # Proofs
    "ProofSide",
    "ProofNode",
    "InclusionProof",
]
