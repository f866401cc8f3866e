"""Implementation of a Schnorr-style ring signature scheme.

Signing, for a ring ``P(0) .. P(R-1)`` with the signer at index ``r``::

    k            random scalar
    e(r+1)     = H(m || k*G)
    for i = r+1, r+2, ... (mod R) while i != r:
        s(i)     random scalar
        e(i+1) = H(m || s(i)*G + e(i)*P(i))
    s(r)       = k - e(r)*x(r)  (mod n)

The signature is ``(ring, e(0), s(0) .. s(R-1))``.  Verification starts from
``ee = e(0)``, applies ``ee = H(m || s(i)*G + ee*P(i))`` for ``i = 0 .. R-1``
and accepts iff the ring closes, that is the final ``ee`` equals ``e(0)``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .crypto_utils import Group, RandomSource, default_random_source, random_scalar
from .errors import EncodingError, PreconditionError
from .keys import PrivateKey, PublicKey

logger = logging.getLogger(__name__)

DOMAIN_TAG = b"ringsig/schnorr-ring/v1:"
MIN_RING_SIZE = 2


@dataclass(frozen=True)
class Signature:
    """A ring signature.  It does not record which member produced it."""

    ring: Tuple[PublicKey, ...]
    e: int
    s: Tuple[int, ...]

    @property
    def group(self) -> Group:
        return self.ring[0].group

    def __len__(self) -> int:
        return len(self.ring)


def _ensure_bytes(message: object) -> bytes:
    if isinstance(message, (bytes, bytearray)):
        return bytes(message)
    raise TypeError("message must be bytes-like")


def challenge(group: Group, message: bytes, point) -> int:
    """Map *message* and the commitment *point* to a scalar modulo the order."""

    return group.hash_to_scalar(
        DOMAIN_TAG,
        group.name.encode("ascii"),
        b"\x00",
        message,
        group.encode_point(point),
    )


def _ring_group(ring: Sequence[PublicKey]) -> Optional[Group]:
    """Return the group shared by every ring member, or ``None``."""

    if not ring or not all(isinstance(member, PublicKey) for member in ring):
        return None
    group = ring[0].group
    if any(member.group is not group for member in ring):
        return None
    return group


def _commitment(group: Group, s_value: int, e_value: int, public_point):
    # C = s*G + e*P
    return group.point_add(
        group.base_mult(s_value),
        group.scalar_mult(e_value, public_point),
    )


def sign_with(
    message: bytes,
    ring: Sequence[PublicKey],
    signer_index: int,
    private_key: PrivateKey,
    rand: RandomSource,
) -> Signature:
    """Produce a ring signature drawing every random scalar from *rand*."""

    message = _ensure_bytes(message)
    ring = tuple(ring)
    ring_size = len(ring)
    if ring_size < MIN_RING_SIZE:
        raise PreconditionError("Ring signatures require at least two members")
    if isinstance(signer_index, bool) or not isinstance(signer_index, int):
        raise PreconditionError("Signer index must be an integer")
    if not 0 <= signer_index < ring_size:
        raise PreconditionError("Signer index is out of bounds for the ring size")
    group = _ring_group(ring)
    if group is None:
        raise PreconditionError("All ring members must be public keys of the same group")
    if private_key.group is not group:
        raise PreconditionError("Private key belongs to a different group than the ring")
    if private_key.public_key() != ring[signer_index]:
        raise PreconditionError("Private key does not match the ring member at the signer index")

    if not group.constant_time:
        logger.warning("signing with a %s key on arithmetic that is not constant time", group.name)

    points = [member.point for member in ring]
    e_values: List[int] = [0] * ring_size
    s_values: List[int] = [0] * ring_size

    nonce = random_scalar(group, rand)
    next_index = (signer_index + 1) % ring_size
    e_values[next_index] = challenge(group, message, group.base_mult(nonce))

    # Simulate the transcript of every other member by fixing the response
    # first and deriving the following challenge from it.
    j = next_index
    while j != signer_index:
        s_values[j] = random_scalar(group, rand)
        candidate = _commitment(group, s_values[j], e_values[j], points[j])
        e_values[(j + 1) % ring_size] = challenge(group, message, candidate)
        j = (j + 1) % ring_size

    # Close the ring: s(r) = k - e(r) * x(r)
    s_values[signer_index] = group.sub_scalars(
        nonce, group.mul_scalars(e_values[signer_index], private_key.scalar)
    )

    logger.debug("signed %d byte message over a ring of %d members", len(message), ring_size)
    return Signature(ring=ring, e=e_values[0], s=tuple(s_values))


def sign(
    message: bytes,
    ring: Sequence[PublicKey],
    signer_index: int,
    private_key: PrivateKey,
    rand: Optional[RandomSource] = None,
) -> Signature:
    """Create a ring signature over *message* on behalf of ``ring[signer_index]``.

    *private_key* must be the key whose public half sits at *signer_index*.
    When *rand* is omitted the libsodium system randomness source is used.

    Raises :class:`~ringsig.errors.PreconditionError` for a ring with fewer
    than two members, an out-of-range index, mixed groups or a mismatching
    private key, and :class:`~ringsig.errors.RandomnessError` when the
    randomness source fails.  Signing again with fresh randomness is safe.
    """

    if rand is None:
        rand = default_random_source()
    return sign_with(message, ring, signer_index, private_key, rand)


def verify(message: bytes, ring: Sequence[PublicKey], signature: Signature) -> bool:
    """Return ``True`` iff *signature* is a valid ring signature over *message*.

    *ring* must list the members in the order used at signing time.  Malformed
    input of any kind yields ``False``; the reason is not reported.
    """

    if not _check_structure(message, ring, signature):
        logger.debug("ring signature rejected")
        return False

    group = signature.group
    message = bytes(message)
    ee = signature.e
    try:
        for member, s_value in zip(signature.ring, signature.s):
            candidate = _commitment(group, s_value, ee, member.point)
            ee = challenge(group, message, candidate)
    except EncodingError:
        logger.debug("ring signature rejected")
        return False

    if ee != signature.e:
        logger.debug("ring signature rejected")
        return False
    return True


def _check_structure(message: object, ring: Sequence[PublicKey], signature: object) -> bool:
    if not isinstance(message, (bytes, bytearray)):
        return False
    if not isinstance(signature, Signature):
        return False
    ring = tuple(ring)
    if len(ring) < MIN_RING_SIZE or ring != tuple(signature.ring):
        return False
    group = _ring_group(ring)
    if group is None:
        return False
    if len(signature.s) != len(ring):
        return False
    if not group.is_valid_scalar(signature.e):
        return False
    return all(group.is_valid_scalar(value) for value in signature.s)


__all__ = [
    "DOMAIN_TAG",
    "MIN_RING_SIZE",
    "Signature",
    "challenge",
    "sign",
    "sign_with",
    "verify",
]
