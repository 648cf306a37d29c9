from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ValidationError

from src.integrations.contracts.interfaces import CostBreakdown


class IntegrationResponseError(ValueError):
    def __init__(self, message: str, *, payload: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.payload = payload or {}


class CostBreakdownModel(BaseModel):
    salary: float
    employer_tax: float
    benefits_cost: float
    fixed_fees: float
    termination_amortization: float
    tce: float


# response block -> {canonical field: provider field}
_SHAPES: Dict[str, Dict[str, str]] = {
    "costs": {
        "salary": "salary",
        "employer_tax": "employer_tax",
        "benefits_cost": "benefits_cost",
        "fixed_fees": "fixed_fees",
        "termination_amortization": "termination_amortization",
        "tce": "tce",
    },
    "breakdown": {
        "salary": "salary",
        "employer_tax": "employer_tax",
        "benefits_cost": "benefits_cost",
        "fixed_fees": "fixed_fees",
        "termination_amortization": "termination_amortization",
        "tce": "totalEmploymentCost",
    },
    "data": {
        "salary": "salary",
        "employer_tax": "employer_tax",
        "benefits_cost": "benefits",
        "fixed_fees": "fees_fixed",
        "termination_amortization": "termination",
        "tce": "total_cost_employment",
    },
}


def normalize_provider_quote(raw: Dict[str, Any]) -> CostBreakdown:
    """Map any supported provider quote response onto one CostBreakdown."""
    if not isinstance(raw, dict):
        raise IntegrationResponseError(f"Provider response must be an object; got {type(raw).__name__}.")

    for block_key, fields in _SHAPES.items():
        block = raw.get(block_key)
        if not isinstance(block, dict):
            continue
        if fields["tce"] not in block:
            continue
        payload = {canonical: _coerce_amount(block.get(source), source, raw) for canonical, source in fields.items()}
        model = _build_model(CostBreakdownModel, payload, raw)
        return CostBreakdown(**model.model_dump())

    raise IntegrationResponseError(
        f"Unrecognised provider quote shape. Checked blocks: {', '.join(_SHAPES)}",
        payload=raw,
    )


def _coerce_amount(value: Any, label: str, raw: Dict[str, Any]) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise IntegrationResponseError(f"Invalid {label}: {value!r}", payload=raw) from exc


def _build_model(model_type, payload: Dict[str, Any], raw: Dict[str, Any]):
    try:
        return model_type(**payload)
    except ValidationError as exc:
        raise IntegrationResponseError(f"Response validation failed: {exc}", payload=raw) from exc
