"""Command line front-end: generate keys, sign and verify ring signatures."""

import argparse
import json
import logging
import sys
from typing import List, Optional

from . import codec, config
from .crypto_utils import GROUPS
from .errors import EncodingError, RingSignatureError
from .keys import generate
from .ring_signature import sign

logger = logging.getLogger(__name__)


def _load_json(path: str):
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def _emit(payload: dict, out: Optional[str]) -> None:
    text = json.dumps(payload, indent=2, sort_keys=True)
    if out:
        with open(out, "w", encoding="utf-8") as f:
            f.write(text + "\n")
    else:
        print(text)


def cmd_keygen(args: argparse.Namespace) -> int:
    public_key, private_key = generate(group=args.group)
    _emit(
        {
            "group": public_key.group.name,
            "public": codec.encode_public_key(public_key),
            "private": codec.encode_private_key(private_key),
        },
        args.out,
    )
    return 0


def cmd_sign(args: argparse.Namespace) -> int:
    ring = codec.decode_ring(_load_json(args.ring))
    key_blob = _load_json(args.key)
    if not isinstance(key_blob, dict):
        raise EncodingError("key file must contain a JSON object")
    private_key = codec.decode_private_key(key_blob["private"], key_blob["group"])
    signature = sign(args.message.encode("utf-8"), ring, args.index, private_key)
    _emit(codec.encode_signature(signature), args.out)
    return 0


def cmd_verify(args: argparse.Namespace) -> int:
    ring = codec.decode_ring(_load_json(args.ring))
    payload = _load_json(args.signature)
    if codec.verify_encoded(args.message.encode("utf-8"), ring, payload):
        print("valid")
        return 0
    print("invalid")
    return 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ringsig", description="Schnorr ring signatures.")
    parser.add_argument("--log-level", help="Logging level (default: RINGSIG_LOG_LEVEL).")
    subparsers = parser.add_subparsers(dest="command", required=True)

    keygen = subparsers.add_parser("keygen", help="Generate a key pair.")
    keygen.add_argument("--group", choices=sorted(GROUPS), help="Curve group to use.")
    keygen.add_argument("--out", help="Write the key pair to this file instead of stdout.")
    keygen.set_defaults(func=cmd_keygen)

    sign_parser = subparsers.add_parser("sign", help="Sign a message on behalf of a ring.")
    sign_parser.add_argument("--ring", required=True, help="Path to the ring JSON file.")
    sign_parser.add_argument("--index", required=True, type=int, help="Signer position in the ring.")
    sign_parser.add_argument("--key", required=True, help="Path to the signer's key pair file.")
    sign_parser.add_argument("--out", help="Write the signature to this file instead of stdout.")
    sign_parser.add_argument("message", help="Message to sign (UTF-8).")
    sign_parser.set_defaults(func=cmd_sign)

    verify_parser = subparsers.add_parser("verify", help="Verify a ring signature.")
    verify_parser.add_argument("--ring", required=True, help="Path to the ring JSON file.")
    verify_parser.add_argument("--signature", required=True, help="Path to the signature JSON file.")
    verify_parser.add_argument("message", help="Message that was signed (UTF-8).")
    verify_parser.set_defaults(func=cmd_verify)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        config.configure_logging(args.log_level)
        return args.func(args)
    except (RingSignatureError, ValueError, KeyError, TypeError, OSError) as e:
        logger.debug("%s failed", args.command, exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
