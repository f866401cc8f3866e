import hashlib

import pytest

from ringsig import GROUPS, generate


class SeededSource:
    """Deterministic byte stream for reproducible tests.  Not secure."""

    def __init__(self, seed: bytes):
        self.seed = seed
        self.counter = 0

    def __call__(self, size: int) -> bytes:
        block = hashlib.shake_256(self.seed + self.counter.to_bytes(8, "big")).digest(size)
        self.counter += 1
        return block


@pytest.fixture(params=sorted(GROUPS))
def group(request):
    return GROUPS[request.param]


@pytest.fixture
def seeded():
    return SeededSource


@pytest.fixture
def make_ring():
    def factory(group, size=3):
        """Return (ring, private_keys) with *size* fresh members of *group*."""
        pairs = [generate(group=group) for _ in range(size)]
        return [public for public, _ in pairs], [private for _, private in pairs]

    return factory
