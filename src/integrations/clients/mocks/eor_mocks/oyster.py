"""Oyster-style quote response: ``data`` block with shortened field names."""

from __future__ import annotations

from typing import Any, Dict

from src.integrations.contracts.interfaces import CostBreakdown


def build_oyster_response(costs: CostBreakdown) -> Dict[str, Any]:
    return {
        "data": {
            "salary": costs.salary,
            "employer_tax": costs.employer_tax,
            "benefits": costs.benefits_cost,
            "fees_fixed": costs.fixed_fees,
            "termination": costs.termination_amortization,
            "total_cost_employment": costs.tce,
        },
    }
