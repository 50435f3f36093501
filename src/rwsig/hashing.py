"""
hash adapter used by signing and verification.

wraps a `cryptography` digest and reinterprets the digest bytes as a
big-endian integer. keys carry a HashWrapper so the signer and the verifier
of a key pair always hash the same way.
"""

from dataclasses import dataclass

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.backends import default_backend


_ALGORITHMS = {
    "sha256": hashes.SHA256,
    "sha384": hashes.SHA384,
    "sha512": hashes.SHA512,
    "sha3-256": hashes.SHA3_256,
    "sha3-512": hashes.SHA3_512,
    "blake2b": lambda: hashes.BLAKE2b(64),
    "blake2s": lambda: hashes.BLAKE2s(32),
}

DEFAULT_HASH = "sha256"


def available_hashes():
    """names accepted by HashWrapper"""
    return sorted(_ALGORITHMS)


@dataclass(frozen=True)
class HashWrapper:
    """Named digest that maps a byte string to a non-negative integer."""
    name: str = DEFAULT_HASH

    def __post_init__(self):
        if self.name not in _ALGORITHMS:
            raise ValueError(
                f"unknown hash algorithm: {self.name} "
                f"(expected one of {', '.join(available_hashes())})"
            )

    def algorithm(self) -> hashes.HashAlgorithm:
        return _ALGORITHMS[self.name]()

    @property
    def digest_size(self) -> int:
        return self.algorithm().digest_size

    @property
    def bits(self) -> int:
        return self.digest_size * 8

    def digest(self, message: bytes) -> bytes:
        hasher = hashes.Hash(self.algorithm(), backend=default_backend())
        hasher.update(message)
        return hasher.finalize()

    def hash(self, message: bytes) -> int:
        """hash message and convert the digest to an integer"""
        return int.from_bytes(self.digest(message), 'big')
