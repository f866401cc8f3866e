"""Elliptic-curve group primitives used by the ring signature scheme.

All curve work goes through a :class:`Group`, which fixes the curve, its
generator, the order of the generated subgroup and the hash function used to
derive challenges.  Scalars are plain Python integers in ``[0, order)``;
points are whatever the backend uses internally and only leave the adapter
through :meth:`Group.encode_point`.

Two kinds of backend are provided:

* ``ed25519`` (the default) is the prime-order subgroup of edwards25519,
  driven through libsodium.  Point multiplication and the scalar arithmetic
  that touches private keys or nonces run inside libsodium's constant-time
  code.
* ``secp256k1`` and ``p384`` use the pure-Python ``ecdsa`` package.  They are
  provided for interoperability and are not hardened against timing side
  channels.
"""

from __future__ import annotations

import hashlib
from typing import Callable, Dict, Union

import nacl.bindings as sodium
import nacl.utils
from ecdsa import NIST384p, SECP256k1, numbertheory
from ecdsa.curves import Curve
from ecdsa.ellipticcurve import INFINITY, PointJacobi
from nacl.exceptions import CryptoError

from . import config
from .errors import EncodingError, RandomnessError

RandomSource = Callable[[int], bytes]

# Consecutive zero scalars tolerated before the source is declared broken.
MAX_ZERO_DRAWS = 16


def _ensure_bytes(data: object) -> bytes:
    if isinstance(data, (bytes, bytearray, memoryview)):
        return bytes(data)
    raise EncodingError("encoded value must be bytes-like")


class Group:
    """A prime-order elliptic-curve group with a fixed generator."""

    name: str
    order: int
    point_size: int
    scalar_size: int
    wide_scalar_size: int
    hash_name: str
    # Whether secret-dependent arithmetic runs in constant time.
    constant_time = False

    def base_mult(self, scalar: int):
        """Return ``scalar * G``."""

        raise NotImplementedError

    def scalar_mult(self, scalar: int, point):
        """Return ``scalar * point``."""

        raise NotImplementedError

    def point_add(self, p1, p2):
        raise NotImplementedError

    def encode_point(self, point) -> bytes:
        """Return the canonical fixed-length encoding of *point*."""

        raise NotImplementedError

    def decode_point(self, data: bytes):
        """Decode *data*, raising :class:`EncodingError` when invalid."""

        raise NotImplementedError

    def sub_scalars(self, a: int, b: int) -> int:
        return (a - b) % self.order

    def mul_scalars(self, a: int, b: int) -> int:
        return (a * b) % self.order

    def scalar_from_wide_bytes(self, data: bytes) -> int:
        """Reduce ``wide_scalar_size`` uniform bytes to a scalar."""

        return int.from_bytes(data, "big") % self.order

    def encode_scalar(self, scalar: int) -> bytes:
        raise NotImplementedError

    def decode_scalar(self, data: bytes) -> int:
        raise NotImplementedError

    def reduce(self, value: int) -> int:
        return value % self.order

    def is_valid_scalar(self, value: object) -> bool:
        """Return ``True`` if *value* is an integer residue modulo the order."""

        return (
            isinstance(value, int)
            and not isinstance(value, bool)
            and 0 <= value < self.order
        )

    def hash_to_scalar(self, *chunks: bytes) -> int:
        """Hash *chunks*, read the digest big-endian and reduce it."""

        digest = hashlib.new(self.hash_name)
        for chunk in chunks:
            digest.update(bytes(chunk))
        return int.from_bytes(digest.digest(), "big") % self.order

    def __repr__(self) -> str:
        return f"<Group {self.name}>"


class Ed25519Group(Group):
    """Prime-order subgroup of edwards25519 backed by libsodium.

    Points are their 32-byte canonical encodings.  Scalars cross into
    libsodium as 32-byte little-endian strings.
    """

    name = "ed25519"
    order = 2**252 + 27742317777372353535851937790883648493
    point_size = 32
    scalar_size = 32
    wide_scalar_size = 64
    hash_name = "sha512"
    constant_time = True

    def _scalar_bytes(self, scalar: int) -> bytes:
        return (scalar % self.order).to_bytes(self.scalar_size, "little")

    def base_mult(self, scalar: int) -> bytes:
        try:
            return sodium.crypto_scalarmult_ed25519_base_noclamp(self._scalar_bytes(scalar))
        except CryptoError as exc:
            raise EncodingError("scalar multiplication produced the identity element") from exc

    def scalar_mult(self, scalar: int, point: bytes) -> bytes:
        try:
            return sodium.crypto_scalarmult_ed25519_noclamp(self._scalar_bytes(scalar), point)
        except CryptoError as exc:
            raise EncodingError("scalar multiplication produced the identity element") from exc

    def point_add(self, p1: bytes, p2: bytes) -> bytes:
        try:
            return sodium.crypto_core_ed25519_add(p1, p2)
        except CryptoError as exc:
            raise EncodingError("point addition received an invalid point") from exc

    def encode_point(self, point: bytes) -> bytes:
        return bytes(point)

    def decode_point(self, data: bytes) -> bytes:
        data = _ensure_bytes(data)
        if len(data) != self.point_size:
            raise EncodingError("ed25519 points must be 32 bytes long")
        if not sodium.crypto_core_ed25519_is_valid_point(data):
            raise EncodingError("encoding is not a point of the prime-order subgroup")
        return data

    def sub_scalars(self, a: int, b: int) -> int:
        result = sodium.crypto_core_ed25519_scalar_sub(
            self._scalar_bytes(a), self._scalar_bytes(b)
        )
        return int.from_bytes(result, "little")

    def mul_scalars(self, a: int, b: int) -> int:
        result = sodium.crypto_core_ed25519_scalar_mul(
            self._scalar_bytes(a), self._scalar_bytes(b)
        )
        return int.from_bytes(result, "little")

    def scalar_from_wide_bytes(self, data: bytes) -> int:
        return int.from_bytes(sodium.crypto_core_ed25519_scalar_reduce(data), "little")

    def encode_scalar(self, scalar: int) -> bytes:
        if not self.is_valid_scalar(scalar):
            raise EncodingError("scalar is outside the group order")
        return scalar.to_bytes(self.scalar_size, "little")

    def decode_scalar(self, data: bytes) -> int:
        data = _ensure_bytes(data)
        if len(data) != self.scalar_size:
            raise EncodingError("ed25519 scalars must be 32 bytes long")
        value = int.from_bytes(data, "little")
        if value >= self.order:
            raise EncodingError("scalar is not reduced modulo the group order")
        return value


class WeierstrassGroup(Group):
    """Short Weierstrass curve of prime order backed by :mod:`ecdsa`.

    Points use the compressed SEC1 representation; the point at infinity
    encodes as the single byte ``0x00`` and is rejected by
    :meth:`decode_point`.
    """

    def __init__(self, name: str, curve: Curve, hash_name: str) -> None:
        self.name = name
        self.curve = curve
        self.order = int(curve.order)
        self.generator = curve.generator
        self._field = int(curve.curve.p())
        self.field_size = (self._field.bit_length() + 7) // 8
        self.point_size = 1 + self.field_size
        self.scalar_size = (self.order.bit_length() + 7) // 8
        self.wide_scalar_size = 2 * self.scalar_size
        self.hash_name = hash_name

    def base_mult(self, scalar: int) -> PointJacobi:
        return self.generator * (scalar % self.order)

    def scalar_mult(self, scalar: int, point: PointJacobi) -> PointJacobi:
        return point * (scalar % self.order)

    def point_add(self, p1: PointJacobi, p2: PointJacobi) -> PointJacobi:
        return p1 + p2

    def encode_point(self, point: PointJacobi) -> bytes:
        if point == INFINITY:
            return b"\x00"
        prefix = b"\x02" if point.y() % 2 == 0 else b"\x03"
        return prefix + int(point.x()).to_bytes(self.field_size, "big")

    def decode_point(self, data: bytes) -> PointJacobi:
        data = _ensure_bytes(data)
        if len(data) != self.point_size:
            raise EncodingError(f"{self.name} points must be {self.point_size} bytes long")
        prefix = data[0]
        if prefix not in (2, 3):
            raise EncodingError("invalid compressed point prefix")
        x = int.from_bytes(data[1:], "big")
        if x >= self._field:
            raise EncodingError("x coordinate is not a field element")
        curve = self.curve.curve
        rhs = (pow(x, 3, self._field) + curve.a() * x + curve.b()) % self._field
        try:
            y = numbertheory.square_root_mod_prime(rhs, self._field)
        except numbertheory.Error as exc:
            raise EncodingError("encoding does not correspond to a point on the curve") from exc
        if y % 2 != prefix % 2:
            y = (-y) % self._field
        if not curve.contains_point(x, y):
            raise EncodingError("encoding does not correspond to a point on the curve")
        return PointJacobi(curve, x, y, 1, self.order)

    def encode_scalar(self, scalar: int) -> bytes:
        if not self.is_valid_scalar(scalar):
            raise EncodingError("scalar is outside the group order")
        return scalar.to_bytes(self.scalar_size, "big")

    def decode_scalar(self, data: bytes) -> int:
        data = _ensure_bytes(data)
        if len(data) != self.scalar_size:
            raise EncodingError(f"{self.name} scalars must be {self.scalar_size} bytes long")
        value = int.from_bytes(data, "big")
        if value >= self.order:
            raise EncodingError("scalar is not reduced modulo the group order")
        return value


ED25519 = Ed25519Group()
SECP256K1 = WeierstrassGroup("secp256k1", SECP256k1, "sha256")
P384 = WeierstrassGroup("p384", NIST384p, "sha384")

GROUPS: Dict[str, Group] = {group.name: group for group in (ED25519, SECP256K1, P384)}


def get_group(group: Union[Group, str, None] = None) -> Group:
    """Resolve *group* by name, defaulting to ``RINGSIG_GROUP``."""

    if isinstance(group, Group):
        return group
    name = (group or config.DEFAULT_GROUP).lower()
    try:
        return GROUPS[name]
    except KeyError as exc:
        raise ValueError(f"Unknown group: {name}") from exc


def default_random_source() -> RandomSource:
    """Return the process-wide cryptographic randomness source."""

    return nacl.utils.random


def random_bytes(source: RandomSource, size: int) -> bytes:
    """Read exactly *size* bytes from *source*."""

    try:
        data = source(size)
    except Exception as exc:
        raise RandomnessError("randomness source failed to produce output") from exc
    if not isinstance(data, (bytes, bytearray)) or len(data) != size:
        raise RandomnessError(f"randomness source returned a short read (wanted {size} bytes)")
    return bytes(data)


def random_scalar(group: Group, source: RandomSource) -> int:
    """Return a uniformly random scalar in ``[1, order - 1]``."""

    for _ in range(MAX_ZERO_DRAWS):
        scalar = group.scalar_from_wide_bytes(random_bytes(source, group.wide_scalar_size))
        if scalar:
            return scalar
    raise RandomnessError("randomness source keeps producing zero scalars")


__all__ = [
    "ED25519",
    "GROUPS",
    "Group",
    "P384",
    "RandomSource",
    "SECP256K1",
    "default_random_source",
    "get_group",
    "random_bytes",
    "random_scalar",
]
