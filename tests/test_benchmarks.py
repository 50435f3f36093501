import pytest

pytest.importorskip("pandas")
pytest.importorskip("matplotlib")

import plot_metrics
import signing_metrics
from rwsig.hashing import HashWrapper


@pytest.fixture(scope="module")
def rows():
    return signing_metrics.collect_rows([1024], 1, HashWrapper())


def test_collect_rows(rows):
    operations = [row["operation"] for row in rows]
    assert operations == [
        "keygen", "sign", "verify", "blind", "blind_sign", "unblind", "blind_verify",
    ]
    assert all(row["bits"] == 1024 for row in rows)
    notes = {row["operation"]: row["notes"] for row in rows}
    assert notes["verify"] == "valid=True"
    assert notes["blind_verify"] == "valid=True"


def test_append_rows_writes_header_once(tmp_path, rows):
    path = tmp_path / "metrics" / "signing.csv"
    signing_metrics.append_rows(path, signing_metrics.SIGNING_HEADER, rows)
    signing_metrics.append_rows(path, signing_metrics.SIGNING_HEADER, rows)
    lines = path.read_text().splitlines()
    assert lines[0] == ",".join(signing_metrics.SIGNING_HEADER)
    assert len(lines) == 1 + 2 * len(rows)


def test_plot_all(tmp_path, rows):
    signing_metrics.append_rows(tmp_path / "signing.csv", signing_metrics.SIGNING_HEADER, rows)
    written = plot_metrics.plot_all(tmp_path, tmp_path / "plots")
    assert [path.name for path in written] == ["keygen.png", "signing_phases.png"]
    assert all(path.exists() for path in written)


def test_plot_all_without_csv(tmp_path):
    assert plot_metrics.plot_all(tmp_path, tmp_path / "plots") == []
