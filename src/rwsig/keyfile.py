"""
hex file persistence for keys, signatures and blinding values.

public key file:  hex(n)
private key file: hex(p) and hex(q), one per line
"""

from pathlib import Path
from typing import Optional, Type, Union

from rwsig.errors import InvalidKey, InvalidSignature, RabinWilliamsError
from rwsig.hashing import HashWrapper
from rwsig.keys import KeyPair, PrivateKey, PublicKey
from rwsig.signing import int_to_bytes


PathLike = Union[str, Path]


def bytes_to_int(data: bytes) -> int:
    return int.from_bytes(data, 'big')


def write_hex(path: PathLike, data: bytes) -> None:
    """write bytes to path as a single hex line"""
    Path(path).write_text(data.hex())


def read_hex(path: PathLike, error: Type[RabinWilliamsError] = InvalidSignature) -> bytes:
    """read a hex file; unreadable files and bad hex raise `error`"""
    try:
        text = Path(path).read_text()
    except OSError as e:
        raise error(f"cannot read {path}: {e}") from e
    try:
        return bytes.fromhex(text.strip())
    except ValueError as e:
        raise error(f"{path} does not contain valid hex") from e


def save_keypair(keypair: KeyPair, public_path: PathLike, private_path: PathLike) -> None:
    """save keypair to files"""
    write_hex(public_path, int_to_bytes(keypair.public.n))

    p_hex = int_to_bytes(keypair.private.p).hex()
    q_hex = int_to_bytes(keypair.private.q).hex()
    Path(private_path).write_text(f"{p_hex}\n{q_hex}")


def load_public_key(path: PathLike, hash_fn: Optional[HashWrapper] = None) -> PublicKey:
    """load a public key and validate the modulus"""
    n = bytes_to_int(read_hex(path, error=InvalidKey))
    return PublicKey.from_n(n, hash_fn)


def load_private_key(path: PathLike, hash_fn: Optional[HashWrapper] = None) -> PrivateKey:
    """load a private key; primes are re-validated, not trusted"""
    try:
        lines = Path(path).read_text().split()
    except OSError as e:
        raise InvalidKey(f"cannot read {path}: {e}") from e
    if len(lines) < 2:
        raise InvalidKey(f"{path} must contain p and q on separate lines")

    try:
        p = bytes_to_int(bytes.fromhex(lines[0]))
        q = bytes_to_int(bytes.fromhex(lines[1]))
    except ValueError as e:
        raise InvalidKey(f"{path} does not contain valid hex") from e

    return PrivateKey.from_primes(p, q, hash_fn)
