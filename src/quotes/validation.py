"""Margin, risk and viability checks for a chosen provider quote.

Every threshold comes from ``EORConfig``; nothing here holds state, so the
same inputs always give the same ``ValidationResult``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from src.integrations.contracts.interfaces import CostBreakdown, ServiceType, ValidationResult
from src.quotes.calc import round2, round_whole
from src.utils.config_loader import EORConfig, ServiceTypeConfig

logger = logging.getLogger(__name__)

BASE_RISK_SCORE = 50

_EXECUTIVE_KEYWORDS = ("executive", "ceo", "cto", "vp")
_CONTRACTOR_KEYWORDS = ("contractor", "freelance", "consultant")


@dataclass(frozen=True)
class QuoteValidationInput:
    tce: float
    salary: float
    country: str
    service_type: ServiceType
    provider_costs: Optional[CostBreakdown] = None


@dataclass(frozen=True)
class MarginCheck:
    minimum_margin: float
    meets_minimum: bool
    meets_target: bool
    is_risky: bool


def get_service_type_from_role(role: str) -> ServiceType:
    """Classify a role title by keyword; executive keywords are checked first."""
    role_str = (role or "").lower()
    if any(keyword in role_str for keyword in _EXECUTIVE_KEYWORDS):
        return ServiceType.EXECUTIVE
    if any(keyword in role_str for keyword in _CONTRACTOR_KEYWORDS):
        return ServiceType.CONTRACTOR
    return ServiceType.FULL_TIME_EMPLOYEE


def _service_config(service_type: ServiceType, config: EORConfig) -> Optional[ServiceTypeConfig]:
    return config.service_types.get(ServiceType(service_type))


def minimum_margin_for(service_type: ServiceType, config: EORConfig) -> float:
    service_cfg = _service_config(service_type, config)
    if service_cfg is not None and service_cfg.minimum_margin is not None:
        return service_cfg.minimum_margin
    return config.margin_thresholds.minimum_margin_percent


def calculate_margin_percent(tce: float, internal_costs: float) -> float:
    if tce <= 0:
        return 0.0
    return round2((tce - internal_costs) / tce * 100)


def calculate_risk_score(inp: QuoteValidationInput, config: EORConfig) -> int:
    max_tce = config.acid_test.max_tce_threshold
    risk_score = float(BASE_RISK_SCORE)

    if inp.tce > max_tce:
        risk_score += 20
    elif inp.tce > max_tce * 0.7:
        risk_score += 10

    if inp.tce > 0:
        salary_ratio = inp.salary / inp.tce
        if salary_ratio < 0.6:
            risk_score += 15  # high overhead
        elif salary_ratio > 0.9:
            risk_score -= 10

    country = inp.country.strip().upper()
    if country in {c.upper() for c in config.risk.high_risk_countries}:
        risk_score += 10
    elif country in {c.upper() for c in config.risk.low_risk_countries}:
        risk_score -= 5

    service_cfg = _service_config(inp.service_type, config)
    if service_cfg is not None:
        risk_score *= service_cfg.risk_multiplier

    return min(100, max(0, round_whole(risk_score)))


def perform_acid_test(inp: QuoteValidationInput, config: EORConfig) -> bool:
    service_cfg = _service_config(inp.service_type, config)
    if service_cfg is None or not service_cfg.acid_test_required:
        return True

    if inp.tce > config.acid_test.max_tce_threshold:
        return False

    estimated_monthly_costs = inp.tce / 12
    if estimated_monthly_costs <= 0:
        return False
    cash_flow_buffer = inp.salary * 0.2
    cash_flow_ratio = (inp.salary + cash_flow_buffer) / estimated_monthly_costs
    return cash_flow_ratio >= config.acid_test.cash_flow_ratio


def validate_margin_thresholds(margin_percent: float, service_type: ServiceType, config: EORConfig) -> MarginCheck:
    minimum = minimum_margin_for(service_type, config)
    thresholds = config.margin_thresholds
    return MarginCheck(
        minimum_margin=minimum,
        meets_minimum=margin_percent >= minimum,
        meets_target=margin_percent >= thresholds.target_margin_percent,
        is_risky=margin_percent <= thresholds.risk_threshold_percent,
    )


def validate_quote(inp: QuoteValidationInput, config: EORConfig) -> ValidationResult:
    """Run margin, risk and acid-test checks and decide on manual review."""
    warnings: List[str] = []
    errors: List[str] = []

    internal_costs = inp.tce * config.reconciliation.internal_cost_ratio
    margin_percent = calculate_margin_percent(inp.tce, internal_costs)
    risk_score = calculate_risk_score(inp, config)
    acid_test_passed = perform_acid_test(inp, config)
    margin = validate_margin_thresholds(margin_percent, inp.service_type, config)
    thresholds = config.margin_thresholds
    max_tce = config.acid_test.max_tce_threshold
    risk_score_threshold = config.acid_test.risk_score_threshold

    if not margin.meets_minimum:
        errors.append(f"Margin {margin_percent:.2f}% below minimum threshold of {margin.minimum_margin:g}%")
    if not margin.meets_target:
        warnings.append(f"Margin {margin_percent:.2f}% below target of {thresholds.target_margin_percent:g}%")
    if margin.is_risky:
        warnings.append(f"Margin {margin_percent:.2f}% in risk zone (<={thresholds.risk_threshold_percent:g}%)")

    if not acid_test_passed:
        errors.append("Failed acid test - financial viability concerns")

    if risk_score > risk_score_threshold:
        warnings.append(f"High risk score: {risk_score}/100")

    if inp.tce > max_tce:
        warnings.append(f"TCE {inp.tce} exceeds threshold of {max_tce:g}")

    requires_manual_review = (
        bool(errors)
        or risk_score > risk_score_threshold
        or not margin.meets_minimum
        or inp.tce > max_tce
    )

    logger.debug(
        "Validated quote: service_type=%s tce=%s margin=%.2f risk=%d manual_review=%s",
        ServiceType(inp.service_type).value,
        inp.tce,
        margin_percent,
        risk_score,
        requires_manual_review,
    )

    return ValidationResult(
        is_valid=not errors,
        warnings=warnings,
        errors=errors,
        risk_score=risk_score,
        margin_percent=margin_percent,
        acid_test_passed=acid_test_passed,
        requires_manual_review=requires_manual_review,
    )
