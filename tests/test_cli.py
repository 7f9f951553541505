import csv
import json

import pytest

from proofcalc import calibration as CAL
from proofcalc import cli
from proofcalc.io import load_log


@pytest.fixture
def log_file(tmp_path):
    return str(tmp_path / "log.json")


def _run(capsys, *argv):
    code = cli.main(list(argv))
    out, err = capsys.readouterr()
    return code, out, err


def test_top_prints_json_and_logs(capsys, table_csv, log_file):
    code, out, _ = _run(capsys, "--table", table_csv, "--log-file", log_file, "--operator", "JD",
                        "top", "--weight", "100", "--proof", "80.620")
    assert code == 0
    data = json.loads(out)
    assert data["display"]["conversion_factor"] == "0.62345"
    (entry,) = load_log(log_file)
    assert entry.operator_id == "JD"
    assert entry.outputs == data["outputs"]


def test_no_log_flag(capsys, table_csv, log_file):
    code, _, _ = _run(capsys, "--table", table_csv, "--log-file", log_file,
                      "bottom", "--dist-weight", "500", "--dist-proof", "90.5", "--no-log")
    assert code == 0
    assert load_log(log_file) == []


def test_csv_output(capsys, table_csv, log_file, tmp_path):
    dest = str(tmp_path / "out.csv")
    code, _, _ = _run(capsys, "--table", table_csv, "--log-file", log_file,
                      "variable", "--weight", "100", "--current-proof", "177.726",
                      "--target-proof", "90.0", "--output", dest)
    assert code == 0
    with open(dest, newline="", encoding="utf-8") as f:
        rows = list(csv.DictReader(f))
    assert rows[0]["mode"] == "variable"
    assert rows[0]["display.target_conversion_factor"] == "0.11480"


def test_errors_exit_2_with_kind(capsys, table_csv, log_file):
    code, _, err = _run(capsys, "--table", table_csv, "--log-file", log_file,
                        "top", "--weight", "100", "--proof", "80.62")
    assert code == 2
    assert "InvalidFormat" in err
    assert load_log(log_file) == []


def test_missing_table(capsys, monkeypatch, log_file):
    monkeypatch.setattr(CAL, "TABLE_PATH", None)
    code, _, err = _run(capsys, "--log-file", log_file, "top", "--weight", "1", "--proof", "80.620")
    assert code == 2
    assert "LoadError" in err


def test_log_list_and_clear(capsys, table_csv, log_file):
    for op, proof in (("A", "80.620"), ("B", "80.100"), ("A", "80.000")):
        _run(capsys, "--table", table_csv, "--log-file", log_file, "--operator", op,
             "top", "--weight", "100", "--proof", proof)
    code, out, _ = _run(capsys, "--log-file", log_file, "--operator", "A", "log", "list", "--newest-first")
    assert code == 0
    assert out.index("80.000") < out.index("80.620")
    assert "80.100" not in out

    code, out, _ = _run(capsys, "--log-file", log_file, "log", "list", "--json")
    assert [r["inputs"]["proof"] for r in json.loads(out)] == ["80.620", "80.100", "80.000"]

    code, out, _ = _run(capsys, "--log-file", log_file, "--operator", "A", "log", "clear")
    assert out.strip() == "removed 2 entries"
    assert [e.operator_id for e in load_log(log_file)] == ["B"]


def test_log_retention(capsys, table_csv, log_file, monkeypatch):
    monkeypatch.setattr(CAL, "LOG_MAX_ENTRIES", 2)
    for proof in ("80.620", "80.100", "80.000"):
        _run(capsys, "--table", table_csv, "--log-file", log_file, "top", "--weight", "100", "--proof", proof)
    assert [e.inputs["proof"] for e in load_log(log_file)] == ["80.100", "80.000"]


def test_fail_on_drift(capsys, table_csv, log_file, monkeypatch):
    monkeypatch.setattr(CAL, "LB_PER_GAL_WATER", 8.34)
    with pytest.raises(SystemExit, match="drift"):
        cli.main(["--table", table_csv, "--log-file", log_file,
                  "bottom", "--dist-weight", "1", "--dist-proof", "90.5", "--fail-on-drift"])


def test_corrupt_log_can_be_cleared_and_reused(capsys, table_csv, log_file):
    with open(log_file, "w", encoding="utf-8") as f:
        f.write("{not json")
    code, out, _ = _run(capsys, "--log-file", log_file, "log", "clear")
    assert code == 0
    assert out.strip() == "removed 0 entries"
    assert load_log(log_file) == []
    with open(log_file, encoding="utf-8") as f:
        assert json.load(f) == []

    code, _, _ = _run(capsys, "--table", table_csv, "--log-file", log_file,
                      "top", "--weight", "100", "--proof", "80.620")
    assert code == 0
    assert [e.inputs["proof"] for e in load_log(log_file)] == ["80.620"]
