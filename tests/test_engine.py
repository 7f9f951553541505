import pytest

from proofcalc.engine import ConversionEngine, compute_bottom, compute_top, compute_variable
from proofcalc.errors import InvalidFormat, LoadError, NotANumber, ProofNotFound, TableNotReady
from proofcalc.schemas import BottomRequest, TopRequest, VariableRequest


def test_top_matches_sheet_formula_chain(engine):
    res = engine.compute_top(TopRequest(weight=100, proof="80.620"))
    intermediate = ((100 * 0.62345) / 0.10093) - 100
    water = (intermediate / 8.33) + (20 * 0.01 * 16.0)
    assert res.mode == "top"
    assert res.proof_key == "80.6"
    assert res.conversion_factor == 0.62345
    assert res.water_to_add == water
    assert res.new_weight == 100 + (water * 8.34)


def test_top_truncates_proof(engine):
    res = engine.compute_top(TopRequest(weight=250.5, proof="80.197"))
    assert res.proof_key == "80.1"
    intermediate = ((250.5 * 0.10106) / 0.10093) - 250.5
    assert res.water_to_add == (intermediate / 8.33) + (97 * 0.01 * 16.0)


def test_top_at_target_proof_only_adds_hundredths_water(engine):
    res = engine.compute_top(TopRequest(weight=100, proof="80.000"))
    assert res.water_to_add == pytest.approx(0.0, abs=1e-9)
    assert res.new_weight == pytest.approx(100.0)


def test_bottom_matches_sheet_and_has_no_new_weight(engine):
    res = engine.compute_bottom(BottomRequest(dist_weight=500, dist_proof="90.5"))
    assert res.conversion_factor == 0.11546
    assert res.water_to_add == (((500 * 0.11546) / 0.10093) - 500) / 8.33
    assert res.new_weight is None
    assert "new_weight" not in res.outputs()


def test_variable_uses_independent_lookups(engine):
    res = engine.compute_variable(
        VariableRequest(weight=100, current_proof="177.726", target_proof="90.0")
    )
    assert res.proof_key == "177.7"
    assert res.target_proof_key == "90"
    assert res.conversion_factor == 0.21732
    assert res.target_conversion_factor == 0.1148
    assert res.conversion_factor != res.target_conversion_factor
    intermediate = ((100 * 0.21732) / 0.10093) - 100
    water = (intermediate / 8.33) + (26 * 0.01 * 16.0)
    assert res.water_to_add == water
    assert res.new_weight == 100 + (water * 8.34)


def test_variable_target_miss(engine):
    with pytest.raises(ProofNotFound) as exc:
        engine.compute_variable(VariableRequest(weight=100, current_proof="177.726", target_proof="999.9"))
    assert exc.value.key == "999.9"


def test_variable_target_must_be_numeric(engine):
    with pytest.raises(NotANumber):
        engine.compute_variable(VariableRequest(weight=100, current_proof="177.726", target_proof="ninety"))


def test_proof_miss_is_an_error(engine):
    with pytest.raises(ProofNotFound):
        engine.compute_top(TopRequest(weight=100, proof="999.900"))


@pytest.mark.parametrize("call", [
    lambda e: e.compute_top(TopRequest(weight=100, proof="80.62")),
    lambda e: e.compute_bottom(BottomRequest(dist_weight=100, dist_proof="90.50")),
    lambda e: e.compute_variable(VariableRequest(weight=100, current_proof="177.7", target_proof="90")),
])
def test_decimal_place_mismatch(engine, call):
    with pytest.raises(InvalidFormat):
        call(engine)


def test_not_ready_before_load(table):
    engine = ConversionEngine()
    assert not engine.ready
    with pytest.raises(TableNotReady):
        engine.compute_top(TopRequest(weight=100, proof="80.620"))
    with pytest.raises(TableNotReady):
        compute_bottom(BottomRequest(dist_weight=100, dist_proof="90.5"), None)
    engine.load(table)
    assert engine.ready
    assert engine.compute_top(TopRequest(weight=100, proof="80.620")).conversion_factor == 0.62345


def test_table_is_loaded_once(engine, table):
    with pytest.raises(LoadError, match="already loaded"):
        engine.load(table)
    assert engine.table is table


def test_not_ready_wins_over_bad_input():
    with pytest.raises(TableNotReady):
        ConversionEngine().compute_top(TopRequest(weight=100, proof="bad"))


def test_module_functions_match_engine(engine, table):
    req = VariableRequest(weight=42.0, current_proof="80.620", target_proof="80")
    assert compute_variable(req, table) == engine.compute_variable(req)
    assert compute_top(TopRequest(weight=1, proof="80.100"), table).proof_key == "80.1"


def test_requests_reject_non_positive_weight():
    from pydantic import ValidationError

    with pytest.raises(ValidationError):
        TopRequest(weight=0, proof="80.620")
    with pytest.raises(ValidationError):
        BottomRequest(dist_weight=float("inf"), dist_proof="90.5")
