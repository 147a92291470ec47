"""
Module 01 - Schemas
File: proof.py

Purpose: Inclusion proof schemas (sibling path entries and full proofs).
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ProofSide(str, Enum):
    """Which side of the parent the sibling hash sits on."""

    LEFT = "left"
    RIGHT = "right"


class ProofNode(BaseModel):
    """One step of an inclusion proof: the sibling hash and its side."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    hash: bytes = Field(..., description="Sibling hash at this level", min_length=1)
    side: ProofSide = Field(..., description="Side of the sibling relative to the proven node")

    @property
    def is_left(self) -> bool:
        return self.side is ProofSide.LEFT


class InclusionProof(BaseModel):
    """
    A Merkle inclusion proof for a single leaf.

    Attributes:
        leaf: The level-0 node being proven (after the leaf rule was applied)
        index: The 0-based index of the leaf in the batch
        path: Sibling entries ordered from the leaf level to the root
        root: The root this proof is against
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    leaf: bytes = Field(..., description="Level-0 node of the proven leaf")
    index: int = Field(..., ge=0, description="0-based leaf index")
    path: list[ProofNode] = Field(default_factory=list, description="Leaf-to-root sibling path")
    root: bytes = Field(..., description="Root hash the proof commits to")

    @property
    def depth(self) -> int:
        """Number of levels traversed (tree height minus one)."""
        return len(self.path)

    @property
    def siblings(self) -> list[bytes]:
        """Sibling hashes only, bottom-up."""
        return [node.hash for node in self.path]
