"""
prime search for rabin-williams keys.

primes are drawn with the `secrets` CSPRNG and tested with pycryptodome's
probabilistic primality test, whose witnesses also come from a CSPRNG.
"""

import logging
import secrets
from typing import Optional

from Crypto.Util.number import isPrime

from rwsig.config import get_settings
from rwsig.errors import InvalidKeySize, InvalidPrime


logger = logging.getLogger(__name__)


def is_probably_prime(n: int, false_positive_prob: Optional[float] = None) -> bool:
    """primality oracle with negligible false-positive rate"""
    if n < 2:
        return False
    if false_positive_prob is None:
        false_positive_prob = get_settings().primality_false_positive_prob
    return isPrime(n, false_positive_prob=false_positive_prob)


def random_with_bits(bits: int) -> int:
    """uniform random integer with exactly `bits` significant bits"""
    return secrets.randbits(bits) | (1 << (bits - 1))


def generate_prime_congruent(bits: int, remainder: int, modulus: int,
                             rounds: Optional[int] = None) -> int:
    """
    find a probable prime with `bits` bits and prime % modulus == remainder

    each round starts at a fresh random candidate and scans forward one
    integer at a time for at most `bits` steps without leaving the bit range.

    raises:
        InvalidKeySize: bits < 2
        InvalidPrime: no prime found within `rounds` rounds
    """
    if bits < 2:
        raise InvalidKeySize(f"cannot search for a {bits}-bit prime")
    if rounds is None:
        rounds = get_settings().prime_search_rounds

    upper = (1 << bits) - 1
    for attempt in range(1, rounds + 1):
        start = random_with_bits(bits)
        stop = min(start + bits, upper + 1)
        for candidate in range(start, stop):
            if candidate % modulus != remainder:
                continue
            if is_probably_prime(candidate):
                logger.debug(
                    "found %d-bit prime = %d mod %d after %d round(s)",
                    bits, remainder, modulus, attempt,
                )
                return candidate

    logger.error("prime search for %d bits exhausted %d rounds", bits, rounds)
    raise InvalidPrime(
        f"no {bits}-bit prime congruent to {remainder} mod {modulus} "
        f"found in {rounds} rounds"
    )
