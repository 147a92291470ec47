"""
Common test fixtures shared by all test modules.

Provides:
- Deterministic leaf batches
- Digest functions that count calls or fail on demand
"""

from hashtree.crypto.hashing import sha256


def make_leaves(count: int, prefix: str = "leaf") -> list[bytes]:
    """Return `count` distinct 32-byte leaves: sha256(b"leaf0"), ..."""
    return [sha256(f"{prefix}{i}".encode()) for i in range(count)]


def scenario_leaves() -> tuple[bytes, bytes, bytes]:
    """The A, B, C leaves of the three-of-four worked example."""
    return sha256(b"A"), sha256(b"B"), sha256(b"C")


class CountingDigest:
    """SHA-256 that records every input it hashes."""

    __name__ = "counting_sha256"

    def __init__(self) -> None:
        self.calls: list[bytes] = []

    def __call__(self, data: bytes) -> bytes:
        self.calls.append(data)
        return sha256(data)

    @property
    def count(self) -> int:
        return len(self.calls)


class FailingDigest:
    """SHA-256 that raises RuntimeError once `succeed_calls` calls were made."""

    __name__ = "failing_sha256"

    def __init__(self, succeed_calls: int = 0) -> None:
        self.succeed_calls = succeed_calls
        self.calls = 0

    def __call__(self, data: bytes) -> bytes:
        self.calls += 1
        if self.calls > self.succeed_calls:
            raise RuntimeError("digest backend unavailable")
        return sha256(data)
