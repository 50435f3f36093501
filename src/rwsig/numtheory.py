"""
Modular arithmetic used by the Rabin-Williams scheme.

Contains Euler's criterion, modular inverses, the Chinese Remainder Theorem,
a general Tonelli-Shanks square root and the four-way quadratic-residue
normalizer that makes deterministic signing possible.
"""

import logging
from math import gcd
from typing import List, Optional, Sequence, Tuple

from rwsig.errors import ComputationError, InvalidPrime, SquareRootModPrimeFailed


logger = logging.getLogger(__name__)


def is_quadratic_residue(a: int, p: int) -> bool:
    """Euler's criterion: a^((p-1)/2) == 1 (mod p). p is assumed prime."""
    if p in (0, 1):
        return False
    return pow(a, (p - 1) // 2, p) == 1


def mod_inverse(a: int, m: int) -> Optional[int]:
    """
    Inverse of a modulo m in [0, m), via the builtin three-argument pow.

    None when gcd(a, m) != 1 or m is not a positive modulus.
    """
    if m <= 0:
        return None
    try:
        return pow(a, -1, m)
    except ValueError:
        # not coprime
        return None


def chinese_remainder_theorem(remainders: Sequence[int], moduli: Sequence[int]) -> int:
    """
    Find x mod prod(moduli) with x == remainders[i] (mod moduli[i]).

    Args:
        remainders: residues r_1..r_k
        moduli: pairwise coprime moduli m_1..m_k

    Returns:
        The unique solution in [0, prod(moduli))

    Raises:
        ComputationError: empty or mismatched inputs, or moduli that are not
            positive and pairwise coprime
    """
    if len(remainders) != len(moduli) or not remainders:
        raise ComputationError("CRT needs equally many remainders and moduli")
    if any(m <= 0 for m in moduli):
        raise ComputationError("CRT moduli must be positive")

    prod = 1
    for m in moduli:
        prod *= m

    total = 0
    for r, m in zip(remainders, moduli):
        partial = prod // m
        inv = mod_inverse(partial, m)
        if inv is None:
            raise ComputationError("CRT moduli are not pairwise coprime")
        total = (total + r * partial % prod * inv) % prod
    return total


def mod_sqrt(a: int, p: int) -> int:
    """
    Square root of a modulo prime p (Tonelli-Shanks).

    The signing path never calls this; primes of the form 3 mod 4 use the
    closed form a^((p+1)/4) directly.

    Raises:
        InvalidPrime: p <= 1
        SquareRootModPrimeFailed: a is not a quadratic residue mod p
    """
    if p <= 1:
        raise InvalidPrime(f"modulus must be greater than 1, got {p}")
    if not is_quadratic_residue(a, p):
        raise SquareRootModPrimeFailed(f"{a} is not a quadratic residue mod {p}")
    if p == 2:
        return a % 2
    if p % 4 == 3:
        return pow(a, (p + 1) // 4, p)

    # p - 1 = q * 2^s with q odd
    q, s = p - 1, 0
    while q % 2 == 0:
        q //= 2
        s += 1

    z = 2
    while is_quadratic_residue(z, p):
        z += 1
        if z >= p:
            raise SquareRootModPrimeFailed(f"no quadratic non-residue mod {p}")

    c = pow(z, q, p)
    r = pow(a, (q + 1) // 2, p)
    t = pow(a, q, p)
    m = s

    while t != 1:
        # least i with t^(2^i) == 1
        i, temp = 0, t
        while temp != 1 and i < m:
            temp = temp * temp % p
            i += 1
        if i == m:
            raise SquareRootModPrimeFailed(f"square root of {a} mod {p} did not converge")

        b = pow(c, 1 << (m - i - 1), p)
        r = r * b % p
        c = b * b % p
        t = t * c % p
        m = i

    return r


def make_quadratic_residue(a: int, p: int, q: int) -> Tuple[int, Tuple[int, int]]:
    """
    Transform a into a quadratic residue modulo both p and q.

    Tries a, n - a, 2a and 2(n - a) (mod n) in that order and returns the
    first joint residue together with its (e, f) tag. For p, q == 3 (mod 4)
    exactly one candidate qualifies whenever gcd(a, n) == 1.

    Returns:
        (value, (e, f)) with e in {1, -1} and f in {1, 2}

    Raises:
        ComputationError: a is outside (0, n), shares a factor with n, or the
            primes break the 3 mod 4 invariant
    """
    n = p * q
    if not 0 < a < n:
        raise ComputationError("value to normalize must lie in (0, n)")
    if gcd(a, n) != 1:
        raise ComputationError("value to normalize shares a factor with the modulus")

    candidates: List[Tuple[int, int, int]] = [
        (a, 1, 1),
        (n - a, -1, 1),
        (2 * a % n, 1, 2),
        (2 * (n - a) % n, -1, 2),
    ]
    for value, e, f in candidates:
        if is_quadratic_residue(value, p) and is_quadratic_residue(value, q):
            return value, (e, f)

    logger.critical("no quadratic residue candidate found; key primes are not 3 mod 4")
    raise ComputationError("no quadratic residue found for the given primes")
