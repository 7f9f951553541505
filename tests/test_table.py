import pytest

from proofcalc.errors import LoadError, ProofNotFound
from proofcalc.proof import ProofKey
from proofcalc.table import ProofTable, build_table, load_proof_table


def test_lookup_by_key_or_string(table):
    assert table.lookup(ProofKey(806)) == 0.62345
    assert table.lookup("80.6") == 0.62345
    assert table.lookup("90.0") == table.lookup("90") == 0.1148


def test_miss_raises_proof_not_found_never_default(table):
    with pytest.raises(ProofNotFound) as exc:
        table.lookup("999.9")
    assert exc.value.key == "999.9"


def test_no_interpolation_between_keys(table):
    # 80.3 sits between 80.1 and 80.6 but has no row
    with pytest.raises(ProofNotFound):
        table.lookup("80.3")


def test_duplicate_keys_after_normalization_fail():
    with pytest.raises(LoadError, match="duplicate"):
        build_table([("80", 0.1), ("80.0", 0.2)])


@pytest.mark.parametrize("pairs", [
    [("80.15", 0.1)],
    [("abc", 0.1)],
    [("80", "x")],
    [("80", float("nan"))],
    [("80",)],
    [],
])
def test_malformed_sources_fail_with_load_error(pairs):
    with pytest.raises(LoadError):
        build_table(pairs)


def test_table_is_read_only(table):
    with pytest.raises(TypeError):
        table["81"] = 1.0  # type: ignore[index]
    assert len(table) == 6
    assert "80.6" in table
    assert "81.0" not in table
    assert "junk" not in table


def test_load_from_csv_path(table_csv):
    t = load_proof_table(table_csv)
    assert isinstance(t, ProofTable)
    assert t.lookup("177.7") == 0.21732
    assert t.as_dict()["80"] == 0.10093


def test_load_missing_file():
    with pytest.raises(LoadError):
        load_proof_table("/nonexistent/table.csv")


def test_load_none():
    with pytest.raises(LoadError):
        load_proof_table(None)
