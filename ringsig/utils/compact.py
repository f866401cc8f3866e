"""Unsigned LEB128 integers for length prefixes in the binary codec.

Only the minimal encoding of a value is accepted, so each length has exactly
one byte representation.
"""

from typing import Tuple

from ..errors import EncodingError

# Ring sizes and group names never come close to this.
MAX_VARINT_BYTES = 9


def encode_varint(value: int) -> bytes:
    if value < 0:
        raise ValueError("varint of negative value")
    out = bytearray()
    while value > 0x7F:
        out.append((value & 0x7F) | 0x80)
        value >>= 7
    out.append(value)
    return bytes(out)


def decode_varint(data: bytes, offset: int = 0) -> Tuple[int, int]:
    """Return ``(value, offset after the varint)``.

    Truncated, oversized and non-minimal encodings raise
    :class:`~ringsig.errors.EncodingError`.
    """
    value = 0
    for position in range(MAX_VARINT_BYTES):
        index = offset + position
        if index >= len(data):
            raise EncodingError("truncated varint")
        byte = data[index]
        value |= (byte & 0x7F) << (7 * position)
        if byte & 0x80:
            continue
        # A trailing zero group after a continuation byte pads the value.
        if byte == 0 and position > 0:
            raise EncodingError("non-canonical varint")
        return value, index + 1
    raise EncodingError("varint too large")


def read_exact(data: bytes, offset: int, size: int) -> Tuple[bytes, int]:
    """Return ``size`` bytes starting at *offset* and the offset after them."""
    end = offset + size
    if end > len(data):
        raise EncodingError("truncated payload")
    return data[offset:end], end
