"""Benchmark harness for key generation, signing and blind signing.

Generates fresh key pairs for each requested modulus size, times every phase
of the plain and blind signature flows, and appends the rows to
artifacts/metrics/signing.csv.
"""

from __future__ import annotations

import argparse
import csv
import secrets
import sys
import time
from pathlib import Path
from typing import Dict, Iterable, List

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from rwsig.blind import BlindSignatureIssuer, BlindSignatureUser
from rwsig.hashing import HashWrapper, available_hashes
from rwsig.keys import KeyPair


METRICS_DIR = Path("artifacts/metrics")
SIGNING_CSV = METRICS_DIR / "signing.csv"

SIGNING_HEADER = ["operation", "bits", "iteration", "duration_ms", "notes"]


def append_rows(path: Path, header: List[str], rows: Iterable[Dict[str, object]]) -> None:
    """Append rows to a CSV file, creating it with headers when missing."""

    path.parent.mkdir(parents=True, exist_ok=True)
    file_exists = path.exists()

    with path.open("a", newline="") as handle:
        writer = csv.DictWriter(handle, fieldnames=header)
        if not file_exists:
            writer.writeheader()
        for row in rows:
            writer.writerow(row)


def timed(fn, *args):
    start = time.perf_counter()
    result = fn(*args)
    return result, (time.perf_counter() - start) * 1000


def run_iteration(bits: int, iteration: int, hash_fn: HashWrapper,
                  message_size: int) -> List[Dict[str, object]]:
    """Time one key generation plus one plain and one blind signature."""

    rows: List[Dict[str, object]] = []

    def record(operation: str, duration_ms: float, notes: str = "") -> None:
        rows.append(
            {
                "operation": operation,
                "bits": bits,
                "iteration": iteration,
                "duration_ms": round(duration_ms, 3),
                "notes": notes,
            }
        )

    keypair, keygen_ms = timed(KeyPair.generate, bits, hash_fn)
    record("keygen", keygen_ms, f"hash={hash_fn.name}")

    message = secrets.token_bytes(message_size)
    signature, sign_ms = timed(keypair.private.sign, message)
    record("sign", sign_ms, f"flags={signature[0]}")

    valid, verify_ms = timed(keypair.public.verify, message, signature)
    record("verify", verify_ms, f"valid={valid}")

    issuer = BlindSignatureIssuer(keypair.private)
    user = BlindSignatureUser(keypair.public)

    state, blind_ms = timed(user.prepare, message)
    record("blind", blind_ms)

    blinded_signature, blind_sign_ms = timed(issuer.sign_blinded_message, state.blinded_value)
    record("blind_sign", blind_sign_ms)

    unblinded, unblind_ms = timed(user.unblind, state, blinded_signature)
    record("unblind", unblind_ms)

    blind_valid = keypair.public.verify(message, unblinded)
    record("blind_verify", 0.0, f"valid={blind_valid}")

    return rows


def collect_rows(bit_sizes: Iterable[int], iterations: int, hash_fn: HashWrapper,
                 message_size: int = 64) -> List[Dict[str, object]]:
    rows: List[Dict[str, object]] = []
    for bits in bit_sizes:
        for iteration in range(iterations):
            rows.extend(run_iteration(bits, iteration, hash_fn, message_size))
    return rows


def main() -> None:
    parser = argparse.ArgumentParser(description="Rabin-Williams signing benchmarks")
    parser.add_argument(
        "--bits",
        type=int,
        nargs="*",
        default=[1024, 2048],
        help="Modulus sizes to benchmark",
    )
    parser.add_argument("--iterations", type=int, default=5, help="Repetitions per key size")
    parser.add_argument("--hash", choices=available_hashes(), default="sha256")
    parser.add_argument("--message-size", type=int, default=64, help="Random message length in bytes")
    parser.add_argument("--output", type=Path, default=SIGNING_CSV, help="CSV file to append to")
    parser.add_argument("--clean", action="store_true", help="Remove the CSV before running")

    args = parser.parse_args()

    if args.clean and args.output.exists():
        args.output.unlink()

    rows = collect_rows(args.bits, args.iterations, HashWrapper(args.hash), args.message_size)
    append_rows(args.output, SIGNING_HEADER, rows)

    print(f"wrote {len(rows)} rows to {args.output}")


if __name__ == "__main__":
    main()
