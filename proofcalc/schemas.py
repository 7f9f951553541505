from __future__ import annotations
from datetime import datetime, timezone
from typing import Dict, Literal, Optional, Annotated
from pydantic import BaseModel, Field, ConfigDict

# Common helpers
Positive = Annotated[float, Field(gt=0, allow_inf_nan=False)]
Mode = Literal["top", "bottom", "variable"]


# Requests: proofs stay text; the engine validates their decimal places
class TopRequest(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)
    weight: Positive
    proof: str


class BottomRequest(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)
    dist_weight: Positive
    dist_proof: str


class VariableRequest(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)
    weight: Positive
    current_proof: str
    target_proof: str


# Field names that carry a weight, per request model
WEIGHT_FIELDS = frozenset({"weight", "dist_weight"})


class DilutionResult(BaseModel):
    model_config = ConfigDict(frozen=True)
    mode: Mode
    proof_key: str
    conversion_factor: float
    water_to_add: float
    # top/variable only
    new_weight: Optional[float] = None
    # variable only
    target_proof_key: Optional[str] = None
    target_conversion_factor: Optional[float] = None

    def outputs(self) -> Dict[str, float]:
        """Raw numeric outputs, without the fields the mode does not produce."""
        out = {
            "conversion_factor": self.conversion_factor,
            "water_to_add": self.water_to_add,
        }
        if self.new_weight is not None:
            out["new_weight"] = self.new_weight
        if self.target_conversion_factor is not None:
            out["target_conversion_factor"] = self.target_conversion_factor
        return out


class LogEntry(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")
    timestamp: datetime
    mode: Mode
    inputs: Dict[str, str]
    outputs: Dict[str, float]
    operator_id: Optional[str] = None

    @classmethod
    def record(
        cls,
        result: DilutionResult,
        inputs: Dict[str, str],
        operator_id: Optional[str] = None,
        timestamp: Optional[datetime] = None,
    ) -> "LogEntry":
        return cls(
            timestamp=timestamp or datetime.now(timezone.utc),
            mode=result.mode,
            inputs=dict(inputs),
            outputs=result.outputs(),
            operator_id=operator_id,
        )
