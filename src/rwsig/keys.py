"""
Rabin-Williams key types and key generation.

The private key holds primes p == 3 (mod 8) and q == 7 (mod 8); the public key
holds n = p * q. Both halves carry the hash function used for signing, so a
signature made with one half is checked with the same digest by the other.
When no hash is given, every constructor takes the one named by RW_HASH.
Congruences are checked whenever a key is constructed, including keys loaded
from storage.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from rwsig import signing
from rwsig.config import MIN_KEY_BITS, get_settings
from rwsig.errors import InvalidKey, InvalidKeySize, InvalidPrime
from rwsig.hashing import HashWrapper
from rwsig.primes import generate_prime_congruent, is_probably_prime


logger = logging.getLogger(__name__)

P_RESIDUE = 3
Q_RESIDUE = 7
CONGRUENCE_MODULUS = 8
# p * q mod 8 for the residues above
N_RESIDUE = (P_RESIDUE * Q_RESIDUE) % CONGRUENCE_MODULUS


def _settings_hash() -> HashWrapper:
    return get_settings().hash_fn()


def _default_hash(hash_fn: Optional[HashWrapper]) -> HashWrapper:
    return hash_fn if hash_fn is not None else _settings_hash()


@dataclass(frozen=True)
class PublicKey:
    """Rabin-Williams public key: the modulus n."""
    n: int
    hash_fn: HashWrapper = field(default_factory=_settings_hash)

    def __post_init__(self):
        if self.n <= 1 or self.n % CONGRUENCE_MODULUS != N_RESIDUE:
            raise InvalidKey(
                f"modulus is not a product of primes congruent to "
                f"{P_RESIDUE} and {Q_RESIDUE} mod {CONGRUENCE_MODULUS}"
            )

    @classmethod
    def from_n(cls, n: int, hash_fn: Optional[HashWrapper] = None) -> "PublicKey":
        return cls(n=n, hash_fn=_default_hash(hash_fn))

    @property
    def bits(self) -> int:
        return self.n.bit_length()

    def verify(self, message: bytes, signature: bytes) -> bool:
        """Verify signature over message; False on mismatch."""
        return signing.verify(message, signature, self)


@dataclass(frozen=True)
class PrivateKey:
    """Rabin-Williams private key: primes p == 3 (mod 8), q == 7 (mod 8)."""
    p: int
    q: int
    hash_fn: HashWrapper = field(default_factory=_settings_hash)

    def __post_init__(self):
        if self.p % CONGRUENCE_MODULUS != P_RESIDUE:
            raise InvalidPrime(f"p must be {P_RESIDUE} mod {CONGRUENCE_MODULUS}")
        if self.q % CONGRUENCE_MODULUS != Q_RESIDUE:
            raise InvalidPrime(f"q must be {Q_RESIDUE} mod {CONGRUENCE_MODULUS}")
        if self.p == self.q:
            raise InvalidPrime("p and q must be distinct")

    def __repr__(self):
        return f"PrivateKey(bits={self.bits}, hash_fn={self.hash_fn!r})"

    @classmethod
    def from_primes(cls, p: int, q: int, hash_fn: Optional[HashWrapper] = None) -> "PrivateKey":
        """
        Rebuild a private key from externally supplied primes.

        Unlike the plain constructor this also runs the primality test, since
        the primes did not come from our own generator.
        """
        key = cls(p=p, q=q, hash_fn=_default_hash(hash_fn))
        if not is_probably_prime(p):
            raise InvalidPrime("p is not prime")
        if not is_probably_prime(q):
            raise InvalidPrime("q is not prime")
        return key

    @property
    def n(self) -> int:
        return self.p * self.q

    @property
    def bits(self) -> int:
        return self.n.bit_length()

    def public_key(self) -> PublicKey:
        return PublicKey(n=self.n, hash_fn=self.hash_fn)

    def sign(self, message: bytes) -> bytes:
        """
        Sign message deterministically.

        The signature x satisfies e*f*x^2 == H(m) (mod n) and is found in a
        single attempt thanks to the special form of p and q.
        """
        return signing.sign(message, self)

    def raw_sign(self, value: int) -> bytes:
        """Sign an integer in (0, n) coprime to n without hashing it first."""
        return signing.raw_sign(value, self)


@dataclass(frozen=True)
class KeyPair:
    """Matching private and public key."""
    private: PrivateKey
    public: PublicKey

    def __post_init__(self):
        if self.public.n != self.private.n:
            raise InvalidKey("public modulus does not match p * q")

    @classmethod
    def from_private(cls, private: PrivateKey) -> "KeyPair":
        return cls(private=private, public=private.public_key())

    @classmethod
    def generate(cls, bits: Optional[int] = None,
                 hash_fn: Optional[HashWrapper] = None) -> "KeyPair":
        """
        Generate a new key pair.

        Args:
            bits: modulus size, at least 1024 (defaults to settings)
            hash_fn: hash used for signing and verification (defaults to settings)

        Raises:
            InvalidKeySize: bits below 1024
            InvalidPrime: prime search exhausted its rounds
        """
        settings = get_settings()
        if bits is None:
            bits = settings.key_bits
        if bits < MIN_KEY_BITS:
            raise InvalidKeySize(f"key size must be at least {MIN_KEY_BITS} bits, got {bits}")
        hash_fn = _default_hash(hash_fn)

        half_bits = bits // 2
        logger.info("generating %d-bit Rabin-Williams key pair", bits)
        p = generate_prime_congruent(half_bits, P_RESIDUE, CONGRUENCE_MODULUS)
        q = generate_prime_congruent(half_bits, Q_RESIDUE, CONGRUENCE_MODULUS)

        return cls.from_private(PrivateKey(p=p, q=q, hash_fn=hash_fn))
