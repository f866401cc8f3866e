"""Canonical encodings of keys and ring signatures for transport.

Two signature forms are offered: a JSON-friendly mapping of base64 strings
and a compact binary layout::

    varint(len(group)) group varint(R) P(0) .. P(R-1) e s(0) .. s(R-1)

Points and scalars use the fixed-width canonical encodings of their group,
so every key and signature maps to exactly one byte string.
"""

from __future__ import annotations

import base64
import binascii
from typing import Dict, List, Sequence, Union

from .crypto_utils import Group, get_group
from .errors import EncodingError
from .keys import PrivateKey, PublicKey
from .ring_signature import Signature, verify
from .utils.compact import decode_varint, encode_varint, read_exact

SIGNATURE_VERSION = 1


def b64encode(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def b64decode(text: object) -> bytes:
    """Strictly decode base64 *text*, raising :class:`EncodingError`."""

    if not isinstance(text, str):
        raise EncodingError("expected a base64 string")
    try:
        return base64.b64decode(text.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError) as exc:
        raise EncodingError("invalid base64 data") from exc


def _lookup_group(name: object) -> Group:
    if not isinstance(name, str):
        raise EncodingError("group name must be a string")
    try:
        return get_group(name)
    except ValueError as exc:
        raise EncodingError(str(exc)) from exc


def encode_public_key(public_key: PublicKey) -> str:
    return b64encode(bytes(public_key))


def decode_public_key(text: str, group: Union[Group, str, None] = None) -> PublicKey:
    return PublicKey.from_bytes(b64decode(text), group)


def encode_private_key(private_key: PrivateKey) -> str:
    return b64encode(bytes(private_key))


def decode_private_key(text: str, group: Union[Group, str, None] = None) -> PrivateKey:
    return PrivateKey.from_bytes(b64decode(text), group)


def encode_ring(ring: Sequence[PublicKey]) -> Dict[str, object]:
    """Return ``{"group": name, "members": [base64, ...]}`` for *ring*."""

    if not ring:
        raise ValueError("cannot encode an empty ring")
    return {
        "group": ring[0].group.name,
        "members": [encode_public_key(member) for member in ring],
    }


def decode_ring(payload: Dict[str, object]) -> List[PublicKey]:
    """Decode the representation produced by :func:`encode_ring`."""

    if not isinstance(payload, dict):
        raise EncodingError("ring payload must be a mapping")
    try:
        group = _lookup_group(payload["group"])
        members = payload["members"]
    except KeyError as exc:
        raise EncodingError("ring payload missing fields") from exc
    if not isinstance(members, list):
        raise EncodingError("ring members must be a list")
    return [decode_public_key(member, group) for member in members]


def encode_signature(signature: Signature) -> Dict[str, object]:
    """Encode *signature* as base64 strings for transport."""

    group = signature.group
    return {
        "version": SIGNATURE_VERSION,
        "group": group.name,
        "ring": [encode_public_key(member) for member in signature.ring],
        "e": b64encode(group.encode_scalar(signature.e)),
        "s": [b64encode(group.encode_scalar(value)) for value in signature.s],
    }


def decode_signature(payload: Dict[str, object]) -> Signature:
    """Decode the representation produced by :func:`encode_signature`."""

    if not isinstance(payload, dict):
        raise EncodingError("signature payload must be a mapping")

    try:
        version = payload["version"]
        group = _lookup_group(payload["group"])
        ring_encoded = payload["ring"]
        e_encoded = payload["e"]
        s_encoded = payload["s"]
    except KeyError as exc:
        raise EncodingError("signature payload missing fields") from exc

    if type(version) is not int or version != SIGNATURE_VERSION:
        raise EncodingError(f"unsupported signature version: {version!r}")
    if not isinstance(ring_encoded, list) or not isinstance(s_encoded, list):
        raise EncodingError("ring and s must be lists")

    ring = tuple(decode_public_key(member, group) for member in ring_encoded)
    e_value = group.decode_scalar(b64decode(e_encoded))
    s_values = tuple(group.decode_scalar(b64decode(value)) for value in s_encoded)
    return Signature(ring=ring, e=e_value, s=s_values)


def signature_to_bytes(signature: Signature) -> bytes:
    group = signature.group
    name = group.name.encode("ascii")
    out = bytearray()
    out += encode_varint(len(name))
    out += name
    out += encode_varint(len(signature.ring))
    for member in signature.ring:
        out += bytes(member)
    out += group.encode_scalar(signature.e)
    for value in signature.s:
        out += group.encode_scalar(value)
    return bytes(out)


def signature_from_bytes(data: bytes) -> Signature:
    """Parse the binary layout; trailing bytes are rejected."""

    if not isinstance(data, (bytes, bytearray)):
        raise EncodingError("signature must be bytes-like")
    data = bytes(data)

    name_len, offset = decode_varint(data)
    name, offset = read_exact(data, offset, name_len)
    try:
        group = _lookup_group(name.decode("ascii"))
    except UnicodeDecodeError as exc:
        raise EncodingError("group name is not ascii") from exc

    ring_size, offset = decode_varint(data, offset)
    expected = ring_size * (group.point_size + group.scalar_size) + group.scalar_size
    if len(data) - offset != expected:
        raise EncodingError("signature length does not match its ring size")

    ring = []
    for _ in range(ring_size):
        chunk, offset = read_exact(data, offset, group.point_size)
        ring.append(PublicKey.from_bytes(chunk, group))
    chunk, offset = read_exact(data, offset, group.scalar_size)
    e_value = group.decode_scalar(chunk)
    s_values = []
    for _ in range(ring_size):
        chunk, offset = read_exact(data, offset, group.scalar_size)
        s_values.append(group.decode_scalar(chunk))
    return Signature(ring=tuple(ring), e=e_value, s=tuple(s_values))


def verify_encoded(
    message: bytes,
    ring: Sequence[PublicKey],
    payload: Union[bytes, Dict[str, object]],
) -> bool:
    """Decode *payload* (binary or mapping) and verify it.

    A payload that fails to decode is reported as an invalid signature.
    """

    try:
        if isinstance(payload, (bytes, bytearray)):
            signature = signature_from_bytes(payload)
        else:
            signature = decode_signature(payload)
    except EncodingError:
        return False
    return verify(message, ring, signature)


__all__ = [
    "SIGNATURE_VERSION",
    "b64decode",
    "b64encode",
    "decode_private_key",
    "decode_public_key",
    "decode_ring",
    "decode_signature",
    "encode_private_key",
    "encode_public_key",
    "encode_ring",
    "encode_signature",
    "signature_from_bytes",
    "signature_to_bytes",
    "verify_encoded",
]
