"""
Test fixtures package for hashtree tests.

- common.py: leaf factories and instrumented digest functions
"""

from .common import (
    make_leaves,
    scenario_leaves,
    CountingDigest,
    FailingDigest,
)

__all__ = [
    "make_leaves",
    "scenario_leaves",
    "CountingDigest",
    "FailingDigest",
]
