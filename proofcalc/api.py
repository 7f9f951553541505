"""
Thin, stable API for UI and worker callers.

Contracts (do not change signatures during UI work):
  - compute(engine, mode, inputs, operator_id=None, log=None) -> dict
  - handle_calc(engine, path, payload, operator_id=None, log=None) -> dict

``mode`` is one of "top", "bottom", "variable". Inputs are the raw entries as
typed (proofs must stay text so their decimal places can be checked).
Validation is performed via Pydantic schemas and the proof validator; every
failure surfaces as a specific ``ProofCalcError`` subclass.
"""
from __future__ import annotations

from typing import Any, Callable, Dict, Mapping, Optional, Tuple, Type
import logging

from pydantic import BaseModel, ValidationError

from .audit import AuditLog
from .engine import ConversionEngine
from .errors import InvalidFormat, InvalidWeight, ProofCalcError
from .formatting import format_result
from .schemas import (
    BottomRequest, TopRequest, VariableRequest,
    DilutionResult, LogEntry, Mode, WEIGHT_FIELDS,
)

logger = logging.getLogger(__name__)

# mode -> (request model, input field names)
_MODES: Dict[str, Tuple[Type[BaseModel], Tuple[str, ...]]] = {
    "top": (TopRequest, ("weight", "proof")),
    "bottom": (BottomRequest, ("dist_weight", "dist_proof")),
    "variable": (VariableRequest, ("weight", "current_proof", "target_proof")),
}


def _raw_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, float):
        return repr(value)
    return str(value)


def build_request(mode: Mode, inputs: Mapping[str, Any]) -> BaseModel:
    """Validate raw inputs into the request model for ``mode``."""
    if mode not in _MODES:
        raise ValueError("mode must be 'top', 'bottom' or 'variable'")
    model, fields = _MODES[mode]
    data: Dict[str, Any] = {}
    for name in fields:
        value = inputs.get(name)
        if name in WEIGHT_FIELDS:
            data[name] = value.strip() if isinstance(value, str) else value
        else:
            data[name] = _raw_text(value)
    try:
        return model.model_validate(data)
    except ValidationError as e:
        field = str(e.errors()[0]["loc"][0])
        if field in WEIGHT_FIELDS:
            raise InvalidWeight(inputs.get(field), field=field) from e
        raise InvalidFormat(_raw_text(inputs.get(field)), field=field) from e


def run(engine: ConversionEngine, request: BaseModel) -> DilutionResult:
    if isinstance(request, TopRequest):
        return engine.compute_top(request)
    if isinstance(request, BottomRequest):
        return engine.compute_bottom(request)
    if isinstance(request, VariableRequest):
        return engine.compute_variable(request)
    raise TypeError(f"unsupported request type: {type(request).__name__}")


def compute(
    engine: ConversionEngine,
    mode: Mode,
    inputs: Mapping[str, Any],
    operator_id: Optional[str] = None,
    log: Optional[AuditLog] = None,
) -> Dict[str, Any]:
    """Validate, compute, format, and (optionally) record one calculation.

    Returns ``{"mode", "inputs", "outputs", "display"}`` where ``outputs`` are
    the unrounded floats and ``display`` the formatted strings.
    """
    try:
        request = build_request(mode, inputs)
        result = run(engine, request)
    except ProofCalcError:
        raise
    except Exception:
        logger.exception("compute(%s) failed", mode)
        raise
    raw_inputs = {name: _raw_text(inputs.get(name)) for name in _MODES[mode][1]}
    if log is not None:
        log.append(LogEntry.record(result, raw_inputs, operator_id=operator_id))
    return {
        "mode": mode,
        "inputs": raw_inputs,
        "outputs": result.outputs(),
        "display": format_result(result),
    }


# =============================
# Worker routes (payload shapes the browser front end consumes)
# =============================

def _top_payload(p: Mapping[str, Any]) -> Dict[str, Any]:
    return {"weight": p.get("weight"), "proof": p.get("proofText", p.get("proof"))}


def _bottom_payload(p: Mapping[str, Any]) -> Dict[str, Any]:
    dist_pf = p.get("distPF")
    # the front end posts Dist PF as a JSON number; 90 arrives for "90.0"
    if isinstance(dist_pf, (int, float)) and not isinstance(dist_pf, bool):
        dist_pf = repr(float(dist_pf))
    return {"dist_weight": p.get("distWeight"), "dist_proof": dist_pf}


def _variable_payload(p: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "weight": p.get("weight"),
        "current_proof": p.get("currentProofText", p.get("currentProof")),
        "target_proof": p.get("targetProof"),
    }


def _top_response(display: Dict[str, str]) -> Dict[str, Any]:
    return {
        "ok": True,
        "pgConv": display["conversion_factor"],
        "secondH2O": display["water_to_add"],
        "newWeight": display["new_weight"],
    }


def _bottom_response(display: Dict[str, str]) -> Dict[str, Any]:
    return {"ok": True, "pgConv": display["conversion_factor"], "firstH2O": display["water_to_add"]}


def _variable_response(display: Dict[str, str]) -> Dict[str, Any]:
    return {
        "ok": True,
        "pgConv": display["conversion_factor"],
        "targetPgConv": display["target_conversion_factor"],
        "h2o": display["water_to_add"],
        "newWeight": display["new_weight"],
    }


ROUTES: Dict[str, Tuple[Mode, Callable[[Mapping[str, Any]], Dict[str, Any]], Callable[[Dict[str, str]], Dict[str, Any]]]] = {
    "/calc/top": ("top", _top_payload, _top_response),
    "/calc/bottom": ("bottom", _bottom_payload, _bottom_response),
    "/calc/variable": ("variable", _variable_payload, _variable_response),
}


def handle_calc(
    engine: ConversionEngine,
    path: str,
    payload: Mapping[str, Any],
    operator_id: Optional[str] = None,
    log: Optional[AuditLog] = None,
) -> Dict[str, Any]:
    """Answer a worker route with ``{"ok": True, ...}`` or ``{"ok": False, "error", "kind"}``."""
    route = ROUTES.get(path)
    if route is None:
        return {"ok": False, "error": f"unknown route: {path}", "kind": "UnknownRoute"}
    mode, to_inputs, to_response = route
    try:
        out = compute(engine, mode, to_inputs(payload), operator_id=operator_id, log=log)
    except ProofCalcError as e:
        logger.info("%s rejected: %s: %s", path, e.kind, e)
        return {"ok": False, "error": str(e), "kind": e.kind}
    return to_response(out["display"])
