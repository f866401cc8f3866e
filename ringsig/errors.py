"""Exception types raised by the ring signature package."""

from __future__ import annotations


class RingSignatureError(Exception):
    """Base class for every error raised by :mod:`ringsig`."""


class RandomnessError(RingSignatureError):
    """The randomness source failed to produce the requested bytes."""


class PreconditionError(RingSignatureError, ValueError):
    """A caller supplied argument violates a signing precondition."""


class EncodingError(RingSignatureError, ValueError):
    """A point or scalar representation is not a valid group element."""


__all__ = [
    "EncodingError",
    "PreconditionError",
    "RandomnessError",
    "RingSignatureError",
]
