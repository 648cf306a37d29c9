"""Remote-style quote response: ``breakdown`` block with a camel-cased total."""

from __future__ import annotations

from typing import Any, Dict

from src.integrations.contracts.interfaces import CostBreakdown


def build_remote_response(costs: CostBreakdown) -> Dict[str, Any]:
    return {
        "breakdown": {
            "salary": costs.salary,
            "employer_tax": costs.employer_tax,
            "benefits_cost": costs.benefits_cost,
            "fixed_fees": costs.fixed_fees,
            "termination_amortization": costs.termination_amortization,
            "totalEmploymentCost": costs.tce,
        },
    }
