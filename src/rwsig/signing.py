"""
Rabin-Williams signing and verification.

A signature is a triple (e, f, x) with e in {1, -1}, f in {1, 2} and
e * f * x^2 == H(m) (mod n). It is serialized as one flag byte followed by the
big-endian magnitude of x:

    bit 0 of the flag byte: e == -1
    bit 1 of the flag byte: f == 2
    bits 2-7: reserved, must be zero

WARNING: sign_textbook/verify_textbook implement unhashed Rabin signatures on
raw residues. They exist for testing the general square root and must not be
used to sign untrusted data.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from math import gcd
from typing import TYPE_CHECKING, Tuple

from rwsig.errors import InvalidMessage, InvalidSignature, MessageTooLarge
from rwsig.numtheory import chinese_remainder_theorem, make_quadratic_residue, mod_sqrt

if TYPE_CHECKING:
    from rwsig.keys import PrivateKey, PublicKey


logger = logging.getLogger(__name__)

_E_FLAG = 0x01
_F_FLAG = 0x02
_RESERVED_MASK = 0xFC


def int_to_bytes(value: int) -> bytes:
    """Minimal big-endian encoding; zero encodes as a single zero byte."""
    return value.to_bytes(max(1, (value.bit_length() + 7) // 8), 'big')


@dataclass(frozen=True)
class Signature:
    """Decoded Rabin-Williams signature (e, f, x)."""
    e: int  # +1 or -1
    f: int  # 1 or 2
    x: int  # square root

    def __post_init__(self):
        if self.e not in (1, -1):
            raise InvalidSignature(f"e must be 1 or -1, got {self.e}")
        if self.f not in (1, 2):
            raise InvalidSignature(f"f must be 1 or 2, got {self.f}")
        if self.x < 0:
            raise InvalidSignature("signature magnitude must be non-negative")

    def to_bytes(self) -> bytes:
        flags = (_E_FLAG if self.e == -1 else 0) | (_F_FLAG if self.f == 2 else 0)
        return bytes([flags]) + int_to_bytes(self.x)

    @classmethod
    def from_bytes(cls, data: bytes) -> "Signature":
        if not data:
            raise InvalidSignature("empty signature")
        flags = data[0]
        if flags & _RESERVED_MASK:
            raise InvalidSignature("reserved flag bits are set")
        if len(data) < 2:
            raise InvalidSignature("signature is missing its magnitude")
        e = -1 if flags & _E_FLAG else 1
        f = 2 if flags & _F_FLAG else 1
        return cls(e=e, f=f, x=int.from_bytes(data[1:], 'big'))


def pack_signature(e: int, f: int, x: int) -> bytes:
    """Serialize (e, f, x) to the wire format."""
    return Signature(e, f, x).to_bytes()


def extract_signature(data: bytes) -> Tuple[int, int, int]:
    """Parse the wire format back into (e, f, x)."""
    sig = Signature.from_bytes(data)
    return sig.e, sig.f, sig.x


def raw_sign(value: int, private_key: PrivateKey) -> bytes:
    """
    Sign an integer directly, without hashing.

    Used for hashed messages and for blinded values; the signer cannot tell
    the two apart.

    Args:
        value: integer in (0, n) coprime to n
        private_key: signer's private key

    Returns:
        Packed signature bytes

    Raises:
        MessageTooLarge: value is negative or not smaller than n
        InvalidMessage: value is zero or shares a factor with n
    """
    p, q = private_key.p, private_key.q
    n = p * q
    if value < 0 or value >= n:
        raise MessageTooLarge(f"value must lie in (0, n) for a {n.bit_length()}-bit modulus")
    if value == 0 or gcd(value, n) != 1:
        raise InvalidMessage("value must be nonzero and coprime to n")

    residue, (e, f) = make_quadratic_residue(value, p, q)

    # p, q == 3 (mod 4) so the square roots are closed-form
    sp = pow(residue % p, (p + 1) // 4, p)
    sq = pow(residue % q, (q + 1) // 4, q)
    logger.debug("computed square roots modulo p and q")

    x = chinese_remainder_theorem([sp, sq], [p, q])

    logger.info("generated Rabin-Williams signature with e=%d, f=%d", e, f)
    return pack_signature(e, f, x)


def sign(message: bytes, private_key: PrivateKey) -> bytes:
    """Hash message with the key's hash function and sign the result."""
    return raw_sign(private_key.hash_fn.hash(message), private_key)


def recover(sig: Signature, n: int) -> int:
    """Undo the (e, f) transform: returns e * f^-1 * x^2 mod n."""
    x_squared = sig.x * sig.x % n
    # n is odd, so (n + 1) / 2 is the inverse of 2
    two_inv = (n + 1) // 2

    if (sig.e, sig.f) == (1, 1):
        return x_squared
    if (sig.e, sig.f) == (1, 2):
        return x_squared * two_inv % n
    if (sig.e, sig.f) == (-1, 1):
        return (n - x_squared) % n
    if (sig.e, sig.f) == (-1, 2):
        return (n - x_squared) * two_inv % n
    raise InvalidSignature(f"unreachable signature flags e={sig.e}, f={sig.f}")


def verify(message: bytes, signature: bytes, public_key: PublicKey) -> bool:
    """
    Verify a Rabin-Williams signature.

    Returns:
        True if signature is valid, False otherwise

    Raises:
        InvalidSignature: signature bytes are structurally malformed
    """
    sig = Signature.from_bytes(signature)
    expected = public_key.hash_fn.hash(message)
    return recover(sig, public_key.n) == expected


def sign_textbook(message: bytes, private_key: PrivateKey) -> bytes:
    """
    Plain Rabin signature: the square root of the message integer itself.

    Only messages that are quadratic residues modulo both primes can be
    signed; anything else raises SquareRootModPrimeFailed.
    """
    p, q = private_key.p, private_key.q
    m = int.from_bytes(message, 'big')
    if m >= p * q:
        raise MessageTooLarge()

    sp = mod_sqrt(m % p, p)
    sq = mod_sqrt(m % q, q)
    s = chinese_remainder_theorem([sp, sq], [p, q])
    return int_to_bytes(s)


def verify_textbook(message: bytes, signature: bytes, public_key: PublicKey) -> bool:
    s = int.from_bytes(signature, 'big')
    m = int.from_bytes(message, 'big')
    return s * s % public_key.n == m
