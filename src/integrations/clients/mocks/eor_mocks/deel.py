"""Deel-style quote response: the canonical breakdown under ``costs``."""

from __future__ import annotations

from typing import Any, Dict

from src.integrations.contracts.interfaces import CostBreakdown


def build_deel_response(costs: CostBreakdown) -> Dict[str, Any]:
    return {"costs": costs.to_dict()}
