"""
blind signatures on top of rabin-williams

the user masks the message hash as m' = r^2 * m mod n, the signer signs m'
like any other value, and the user divides the resulting square root by r.
since (x'/r)^2 = x'^2 / r^2 the unblinded signature verifies against the
original message, while the signer never sees m or r.

r is a single-use secret: every request draws a fresh factor and a
BlindingState forgets its factor once it has been used.
"""

import logging
import secrets
from dataclasses import dataclass
from math import gcd
from typing import Optional, Tuple

from rwsig.errors import InvalidSignature
from rwsig.keys import PrivateKey, PublicKey
from rwsig.numtheory import mod_inverse
from rwsig.signing import Signature, raw_sign


logger = logging.getLogger(__name__)


def coprime(n: int) -> int:
    """uniform random r in [1, n) with gcd(r, n) == 1"""
    while True:
        r = 1 + secrets.randbelow(n - 1)
        if gcd(r, n) == 1:
            return r


def blinding(public_key: PublicKey) -> Tuple[int, int]:
    """draw a blinding pair (r, r^2 mod n)"""
    r = coprime(public_key.n)
    return r, r * r % public_key.n


def blind_message(message: bytes, public_key: PublicKey) -> Tuple[int, int]:
    """
    blind the message hash before sending it to the signer

    returns:
        (blinded_value, r) where blinded_value = r^2 * H(message) mod n
    """
    m = public_key.hash_fn.hash(message)
    r, r_squared = blinding(public_key)
    return r_squared * m % public_key.n, r


def blind_sign(blinded_value: int, private_key: PrivateKey) -> bytes:
    """signer-side: sign a blinded value exactly like a message hash"""
    return raw_sign(blinded_value, private_key)


def unblind_signature(signature: bytes, r: int, public_key: PublicKey) -> bytes:
    """
    remove the blinding factor from a blind signature

    x = x' * r^-1 mod n, keeping the (e, f) flags of the blind signature.
    """
    sig = Signature.from_bytes(signature)
    r_inv = mod_inverse(r, public_key.n)
    if r_inv is None:
        raise InvalidSignature("blinding factor is not invertible modulo n")
    return Signature(sig.e, sig.f, sig.x * r_inv % public_key.n).to_bytes()


@dataclass
class BlindingState:
    """User-side state for one blind signature request."""
    message: bytes
    blinded_value: int
    r: Optional[int]  # cleared after unblinding

    @property
    def consumed(self) -> bool:
        return self.r is None


class BlindSignatureIssuer:
    """signer-side blind signature operations"""

    def __init__(self, private_key: PrivateKey):
        self.private_key = private_key
        self.public_key = private_key.public_key()

    def sign_blinded_message(self, blinded_value: int) -> bytes:
        """
        sign a blinded value (issuer operation)

        the issuer learns nothing about the message behind blinded_value.
        """
        return blind_sign(blinded_value, self.private_key)


class BlindSignatureUser:
    """requester-side blind signature operations"""

    def __init__(self, public_key: PublicKey):
        self.public_key = public_key

    def prepare(self, message: bytes) -> BlindingState:
        """blind message with a fresh factor; send state.blinded_value to the issuer"""
        blinded_value, r = blind_message(message, self.public_key)
        return BlindingState(message=message, blinded_value=blinded_value, r=r)

    def unblind(self, state: BlindingState, blinded_signature: bytes) -> bytes:
        """
        unblind the issuer's signature and discard the blinding factor

        raises InvalidSignature if the state was already used.
        """
        if state.consumed:
            raise InvalidSignature("blinding factor already used")
        signature = unblind_signature(blinded_signature, state.r, self.public_key)
        state.r = None
        return signature

    def verify_signature(self, message: bytes, signature: bytes) -> bool:
        return self.public_key.verify(message, signature)
