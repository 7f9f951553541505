"""
Conversion engine: the three Sheet2 dilution calculators.

Each calculation is a pure function of a validated request and an injected,
already-loaded ``ProofTable``. An engine without a table rejects every call
with ``TableNotReady`` so that "not loaded yet" is never confused with a
table miss.
"""
from __future__ import annotations

import logging
from typing import Any, Optional

from . import calibration as CAL
from . import formulas as F
from .errors import LoadError, TableNotReady
from .proof import parse_proof, validate_proof
from .schemas import BottomRequest, DilutionResult, TopRequest, VariableRequest
from .table import ProofTable, load_proof_table

logger = logging.getLogger(__name__)


class ConversionEngine:
    def __init__(self, table: Optional[ProofTable] = None):
        self._table = table

    @classmethod
    def from_source(cls, source: Any) -> "ConversionEngine":
        return cls(load_proof_table(source))

    @property
    def ready(self) -> bool:
        return self._table is not None

    @property
    def table(self) -> ProofTable:
        if self._table is None:
            raise TableNotReady()
        return self._table

    def load(self, source: Any) -> ProofTable:
        """Load the proof table once. Raises ``LoadError``, also on a second load."""
        if self._table is not None:
            raise LoadError("proof table is already loaded")
        self._table = load_proof_table(source)
        return self._table

    def compute_top(self, request: TopRequest) -> DilutionResult:
        table = self.table
        proof = validate_proof(request.proof, CAL.TOP_PROOF_PLACES, field="proof")
        cf = table.lookup(proof.key)
        intermediate = F.raw_water_factor(request.weight, cf)
        water = F.water_to_add_top(intermediate, proof.trailing_hundredths())
        result = DilutionResult(
            mode="top",
            proof_key=str(proof.key),
            conversion_factor=cf,
            water_to_add=water,
            new_weight=F.new_weight(request.weight, water),
        )
        logger.debug("top %s -> %s", request, result)
        return result

    def compute_bottom(self, request: BottomRequest) -> DilutionResult:
        table = self.table
        proof = validate_proof(request.dist_proof, CAL.BOTTOM_PROOF_PLACES, field="dist_proof")
        cf = table.lookup(proof.key)
        intermediate = F.raw_water_factor(request.dist_weight, cf)
        result = DilutionResult(
            mode="bottom",
            proof_key=str(proof.key),
            conversion_factor=cf,
            water_to_add=F.water_to_add_bottom(intermediate),
        )
        logger.debug("bottom %s -> %s", request, result)
        return result

    def compute_variable(self, request: VariableRequest) -> DilutionResult:
        table = self.table
        current = validate_proof(request.current_proof, CAL.TOP_PROOF_PLACES, field="current_proof")
        target = parse_proof(request.target_proof, field="target_proof")
        current_cf = table.lookup(current.key)
        target_cf = table.lookup(target.key)
        intermediate = F.raw_water_factor(request.weight, current_cf)
        water = F.water_to_add_top(intermediate, current.trailing_hundredths())
        result = DilutionResult(
            mode="variable",
            proof_key=str(current.key),
            conversion_factor=current_cf,
            water_to_add=water,
            new_weight=F.new_weight(request.weight, water),
            target_proof_key=str(target.key),
            target_conversion_factor=target_cf,
        )
        logger.debug("variable %s -> %s", request, result)
        return result


def compute_top(request: TopRequest, table: Optional[ProofTable]) -> DilutionResult:
    return ConversionEngine(table).compute_top(request)


def compute_bottom(request: BottomRequest, table: Optional[ProofTable]) -> DilutionResult:
    return ConversionEngine(table).compute_bottom(request)


def compute_variable(request: VariableRequest, table: Optional[ProofTable]) -> DilutionResult:
    return ConversionEngine(table).compute_variable(request)
