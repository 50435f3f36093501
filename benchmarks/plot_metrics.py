"""Plotting helpers for signing benchmark CSV outputs."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import List, Optional

import pandas as pd
import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt


METRICS_DIR = Path("artifacts/metrics")

SIGN_PHASES = ["sign", "verify", "blind", "blind_sign", "unblind"]


def load_csv(path: Path) -> Optional[pd.DataFrame]:
    if not path.exists():
        print(f"skipping {path} (missing)")
        return None
    return pd.read_csv(path)


def plot_keygen(signing: pd.DataFrame, output_dir: Path) -> Optional[Path]:
    keygen = signing[signing["operation"] == "keygen"]
    if keygen.empty:
        return None
    summary = keygen.groupby("bits")["duration_ms"].mean().sort_index()
    fig, ax = plt.subplots(figsize=(8, 4))
    summary.plot(kind="bar", ax=ax, color="#4072a5")
    ax.set_title("Key Generation Timing")
    ax.set_ylabel("milliseconds")
    ax.set_xlabel("modulus bits")
    plt.tight_layout()
    output_path = output_dir / "keygen.png"
    fig.savefig(output_path)
    plt.close(fig)
    print(f"wrote {output_path}")
    return output_path


def plot_phases(signing: pd.DataFrame, output_dir: Path) -> Optional[Path]:
    phases = signing[signing["operation"].isin(SIGN_PHASES)]
    if phases.empty:
        return None
    pivot = phases.pivot_table(
        index="operation",
        columns="bits",
        values="duration_ms",
        aggfunc="mean",
    ).reindex([p for p in SIGN_PHASES if p in set(phases["operation"])])
    fig, ax = plt.subplots(figsize=(8, 4))
    pivot.plot(kind="bar", ax=ax)
    ax.set_title("Signing Phase Timing")
    ax.set_ylabel("milliseconds")
    ax.set_xlabel("phase")
    ax.tick_params(axis="x", rotation=25)
    ax.grid(True, axis="y", linestyle=":", linewidth=0.8)
    plt.tight_layout()
    output_path = output_dir / "signing_phases.png"
    fig.savefig(output_path)
    plt.close(fig)
    print(f"wrote {output_path}")
    return output_path


def plot_all(metrics_dir: Path, output_dir: Path) -> List[Path]:
    output_dir.mkdir(parents=True, exist_ok=True)
    signing = load_csv(metrics_dir / "signing.csv")
    if signing is None:
        return []
    written = [plot_keygen(signing, output_dir), plot_phases(signing, output_dir)]
    return [path for path in written if path is not None]


def main() -> None:
    parser = argparse.ArgumentParser(description="Plot signing benchmark metrics")
    parser.add_argument(
        "--metrics-dir",
        type=Path,
        default=METRICS_DIR,
        help="Directory containing CSV files",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=METRICS_DIR,
        help="Directory for generated plots",
    )
    args = parser.parse_args()

    plot_all(args.metrics_dir, args.output_dir)


if __name__ == "__main__":
    main()
