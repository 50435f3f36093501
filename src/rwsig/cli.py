"""Command-line interface for Rabin-Williams signatures."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from rwsig.blind import blind_message, blind_sign, unblind_signature
from rwsig.config import get_settings
from rwsig.errors import InvalidSignature, RabinWilliamsError
from rwsig.hashing import HashWrapper, available_hashes
from rwsig.keyfile import (
    bytes_to_int,
    load_private_key,
    load_public_key,
    read_hex,
    save_keypair,
    write_hex,
)
from rwsig.keys import KeyPair
from rwsig.signing import int_to_bytes


logger = logging.getLogger("rwsig.cli")


def read_message(message: Optional[str]) -> bytes:
    if message is not None:
        return message.encode('utf-8')
    return sys.stdin.buffer.read()


def emit_hex(data: bytes, output: Optional[Path], label: str) -> None:
    """write hex to output, or print it when no output is given"""
    if output is None:
        print(data.hex())
        return
    write_hex(output, data)
    print(f"{label} saved to: {output}")


def cmd_generate(args, hash_fn: HashWrapper) -> int:
    bits = args.bits if args.bits is not None else get_settings().key_bits
    print(f"Generating {bits}-bit key pair...")
    keypair = KeyPair.generate(bits, hash_fn)
    save_keypair(keypair, args.public_key, args.private_key)
    print(f"Public key saved to: {args.public_key}")
    print(f"Private key saved to: {args.private_key}")
    print("Key pair generated successfully!")
    return 0


def cmd_sign(args, hash_fn: HashWrapper) -> int:
    private_key = load_private_key(args.private_key, hash_fn)
    signature = private_key.sign(read_message(args.message))
    emit_hex(signature, args.output, "Signature")
    return 0


def cmd_verify(args, hash_fn: HashWrapper) -> int:
    public_key = load_public_key(args.public_key, hash_fn)
    signature = read_hex(args.signature, error=InvalidSignature)
    if public_key.verify(read_message(args.message), signature):
        print("Signature is valid")
        return 0
    print("Signature is invalid")
    return 1


def cmd_blind(args, hash_fn: HashWrapper) -> int:
    public_key = load_public_key(args.public_key, hash_fn)
    blinded_value, r = blind_message(read_message(args.message), public_key)
    write_hex(args.blinded_message, int_to_bytes(blinded_value))
    write_hex(args.blinding_factor, int_to_bytes(r))
    print(f"Blinded message saved to: {args.blinded_message}")
    print(f"Blinding factor saved to: {args.blinding_factor}")
    return 0


def cmd_blind_sign(args, hash_fn: HashWrapper) -> int:
    private_key = load_private_key(args.private_key, hash_fn)
    blinded_value = bytes_to_int(read_hex(args.blinded_message))
    emit_hex(blind_sign(blinded_value, private_key), args.output, "Blinded signature")
    return 0


def cmd_unblind(args, hash_fn: HashWrapper) -> int:
    public_key = load_public_key(args.public_key, hash_fn)
    blinded_signature = read_hex(args.blinded_signature)
    r = bytes_to_int(read_hex(args.blinding_factor))
    emit_hex(unblind_signature(blinded_signature, r, public_key), args.output, "Unblinded signature")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rabin-williams",
        description="Rabin-Williams digital signature CLI",
    )
    parser.add_argument(
        "--hash",
        choices=available_hashes(),
        default=None,
        help="Hash function for signing and verification (default: sha256 or RW_HASH)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    gen = sub.add_parser("generate", help="Generate a new key pair")
    gen.add_argument("-b", "--bits", type=int, default=None, help="Modulus size (minimum 1024)")
    gen.add_argument("--public-key", type=Path, default=Path("public_key.hex"),
                     help="Output file for the public key (hex-encoded modulus n)")
    gen.add_argument("--private-key", type=Path, default=Path("private_key.hex"),
                     help="Output file for the private key (hex p and q, one per line)")
    gen.set_defaults(func=cmd_generate)

    sign = sub.add_parser("sign", help="Sign a message")
    sign.add_argument("-k", "--private-key", type=Path, required=True)
    sign.add_argument("-m", "--message", help="Message to sign (reads stdin if omitted)")
    sign.add_argument("-o", "--output", type=Path, help="Signature file (stdout if omitted)")
    sign.set_defaults(func=cmd_sign)

    verify = sub.add_parser("verify", help="Verify a signature")
    verify.add_argument("-k", "--public-key", type=Path, required=True)
    verify.add_argument("-s", "--signature", type=Path, required=True)
    verify.add_argument("-m", "--message", help="Message to verify (reads stdin if omitted)")
    verify.set_defaults(func=cmd_verify)

    blind = sub.add_parser("blind", help="Blind a message for blind signing")
    blind.add_argument("-k", "--public-key", type=Path, required=True)
    blind.add_argument("-m", "--message", help="Message to blind (reads stdin if omitted)")
    blind.add_argument("-b", "--blinded-message", type=Path, default=Path("blinded_message.hex"))
    blind.add_argument("-r", "--blinding-factor", type=Path, default=Path("blinding_factor.hex"))
    blind.set_defaults(func=cmd_blind)

    blind_sign_parser = sub.add_parser("blind-sign", help="Sign a blinded message")
    blind_sign_parser.add_argument("-k", "--private-key", type=Path, required=True)
    blind_sign_parser.add_argument("-m", "--blinded-message", type=Path, required=True)
    blind_sign_parser.add_argument("-o", "--output", type=Path)
    blind_sign_parser.set_defaults(func=cmd_blind_sign)

    unblind = sub.add_parser("unblind", help="Unblind a blind signature")
    unblind.add_argument("-k", "--public-key", type=Path, required=True)
    unblind.add_argument("-s", "--blinded-signature", type=Path, required=True)
    unblind.add_argument("-r", "--blinding-factor", type=Path, required=True)
    unblind.add_argument("-o", "--output", type=Path)
    unblind.set_defaults(func=cmd_unblind)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = get_settings()
        logging.basicConfig(
            level=logging.DEBUG if args.verbose else settings.log_level,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
        hash_fn = HashWrapper(args.hash) if args.hash else settings.hash_fn()
        return args.func(args, hash_fn)
    except RabinWilliamsError as e:
        logger.debug("command %s failed", args.command, exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
