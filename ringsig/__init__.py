"""Schnorr-style ring signatures over prime-order elliptic-curve groups."""

from .crypto_utils import ED25519, GROUPS, P384, SECP256K1, Group, get_group
from .errors import EncodingError, PreconditionError, RandomnessError, RingSignatureError
from .keys import PrivateKey, PublicKey, generate
from .ring_signature import Signature, challenge, sign, verify

__version__ = "0.1.0"

__all__ = [
    "ED25519",
    "EncodingError",
    "GROUPS",
    "Group",
    "P384",
    "PreconditionError",
    "PrivateKey",
    "PublicKey",
    "RandomnessError",
    "RingSignatureError",
    "SECP256K1",
    "Signature",
    "challenge",
    "generate",
    "get_group",
    "sign",
    "verify",
]
