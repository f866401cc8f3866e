"""Key pair types and key generation."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Tuple, Union

from .crypto_utils import Group, RandomSource, default_random_source, get_group, random_scalar
from .errors import EncodingError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PublicKey:
    """A group element ``x * G`` held in its canonical encoding."""

    group: Group
    data: bytes

    @classmethod
    def from_bytes(cls, data: bytes, group: Union[Group, str, None] = None) -> "PublicKey":
        """Validate *data* as a point of *group* and wrap it."""

        resolved = get_group(group)
        point = resolved.decode_point(data)
        return cls(resolved, resolved.encode_point(point))

    @property
    def point(self):
        return self.group.decode_point(self.data)

    def __bytes__(self) -> bytes:
        return self.data

    def __repr__(self) -> str:
        return f"PublicKey({self.group.name}, {self.data.hex()})"


@dataclass(frozen=True)
class PrivateKey:
    """A secret scalar.  The value is kept out of ``repr``."""

    group: Group
    scalar: int = field(repr=False)

    @classmethod
    def from_bytes(cls, data: bytes, group: Union[Group, str, None] = None) -> "PrivateKey":
        resolved = get_group(group)
        scalar = resolved.decode_scalar(data)
        if scalar == 0:
            raise EncodingError("private key scalar must be non-zero")
        return cls(resolved, scalar)

    def public_key(self) -> PublicKey:
        """Recompute the matching public key."""

        return PublicKey(self.group, self.group.encode_point(self.group.base_mult(self.scalar)))

    def __bytes__(self) -> bytes:
        return self.group.encode_scalar(self.scalar)


def generate_keypair(group: Group, rand: RandomSource) -> Tuple[PublicKey, PrivateKey]:
    """Draw ``x`` in ``[1, n-1]`` from *rand* and return ``(x * G, x)``."""

    if not group.constant_time:
        logger.warning("generating a %s key on arithmetic that is not constant time", group.name)
    private_key = PrivateKey(group, random_scalar(group, rand))
    return private_key.public_key(), private_key


def generate(
    rand: Optional[RandomSource] = None,
    group: Union[Group, str, None] = None,
) -> Tuple[PublicKey, PrivateKey]:
    """Generate a fresh key pair.

    When *rand* is omitted the libsodium system randomness source is used.
    A failing source raises :class:`~ringsig.errors.RandomnessError`; no
    fallback source is ever substituted.  The private key must be stored by
    the caller; the public key can be shared with anyone.
    """

    resolved = get_group(group)
    if rand is None:
        rand = default_random_source()
    public_key, private_key = generate_keypair(resolved, rand)
    logger.debug("generated %s key pair", resolved.name)
    return public_key, private_key


__all__ = ["PrivateKey", "PublicKey", "generate", "generate_keypair"]
