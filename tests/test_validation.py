import pytest

from src.integrations.contracts.interfaces import ServiceType
from src.quotes.validation import (
    QuoteValidationInput,
    calculate_margin_percent,
    calculate_risk_score,
    get_service_type_from_role,
    perform_acid_test,
    validate_quote,
)


@pytest.mark.parametrize(
    "role,expected",
    [
        ("Senior Software Engineer", ServiceType.FULL_TIME_EMPLOYEE),
        ("VP of Engineering", ServiceType.EXECUTIVE),
        ("VP of Sales", ServiceType.EXECUTIVE),
        ("Chief Executive Officer", ServiceType.EXECUTIVE),
        ("CTO", ServiceType.EXECUTIVE),
        ("Freelance Designer", ServiceType.CONTRACTOR),
        ("Senior Consultant", ServiceType.CONTRACTOR),
        ("Contractor CTO", ServiceType.EXECUTIVE),
        ("", ServiceType.FULL_TIME_EMPLOYEE),
    ],
)
def test_service_type_from_role(role, expected):
    assert get_service_type_from_role(role) == expected


def test_margin_percent():
    assert calculate_margin_percent(100000, 80000) == 20.0
    assert calculate_margin_percent(128000, 128000 * 0.8) == 20.0
    assert calculate_margin_percent(0, 100) == 0.0


def test_risk_score_adjustments(config):
    fte_us = QuoteValidationInput(tce=128000, salary=100000, country="US", service_type=ServiceType.FULL_TIME_EMPLOYEE)
    # 50 - 5 (low risk country)
    assert calculate_risk_score(fte_us, config) == 45

    contractor = QuoteValidationInput(tce=100000, salary=95000, country="US", service_type=ServiceType.CONTRACTOR)
    # (50 - 10 - 5) * 0.8
    assert calculate_risk_score(contractor, config) == 28

    mid_band = QuoteValidationInput(tce=150000, salary=100000, country="FR", service_type=ServiceType.FULL_TIME_EMPLOYEE)
    # 50 + 10 (over 70% of max TCE)
    assert calculate_risk_score(mid_band, config) == 60


def test_risk_score_is_clamped(config):
    executive = QuoteValidationInput(tce=250000, salary=100000, country="BR", service_type=ServiceType.EXECUTIVE)
    # (50 + 20 + 15 + 10) * 1.2 = 114
    assert calculate_risk_score(executive, config) == 100

    low = QuoteValidationInput(tce=100000, salary=95000, country="us", service_type=ServiceType.CONTRACTOR)
    config.risk.low_risk_countries = ["US"]
    assert 0 <= calculate_risk_score(low, config) <= 100


def test_acid_test(config):
    fte = QuoteValidationInput(tce=128000, salary=100000, country="US", service_type=ServiceType.FULL_TIME_EMPLOYEE)
    assert perform_acid_test(fte, config) is True

    over_max = QuoteValidationInput(tce=250000, salary=200000, country="US", service_type=ServiceType.FULL_TIME_EMPLOYEE)
    assert perform_acid_test(over_max, config) is False

    # (10000 * 1.2) / (150000 / 12) = 0.96
    thin_cash_flow = QuoteValidationInput(tce=150000, salary=10000, country="US", service_type=ServiceType.FULL_TIME_EMPLOYEE)
    assert perform_acid_test(thin_cash_flow, config) is False

    contractor = QuoteValidationInput(tce=300000, salary=10000, country="US", service_type=ServiceType.CONTRACTOR)
    assert perform_acid_test(contractor, config) is True


def test_healthy_quote_needs_no_review(config):
    result = validate_quote(
        QuoteValidationInput(tce=128000, salary=100000, country="US", service_type=ServiceType.FULL_TIME_EMPLOYEE),
        config,
    )

    assert result.is_valid is True
    assert result.errors == []
    assert result.warnings == ["Margin 20.00% below target of 25%"]
    assert result.margin_percent == 20.0
    assert result.risk_score == 45
    assert result.acid_test_passed is True
    assert result.requires_manual_review is False


def test_executive_margin_at_minimum_is_accepted(config):
    result = validate_quote(
        QuoteValidationInput(tce=133333.33, salary=110000, country="GB", service_type=ServiceType.EXECUTIVE),
        config,
    )
    assert result.margin_percent == 20.0
    assert not any("below minimum" in e for e in result.errors)


def test_margin_below_minimum_requires_review(config):
    config.reconciliation.internal_cost_ratio = 0.9

    result = validate_quote(
        QuoteValidationInput(tce=128000, salary=100000, country="US", service_type=ServiceType.FULL_TIME_EMPLOYEE),
        config,
    )

    assert result.margin_percent == 10.0
    assert result.is_valid is False
    assert result.requires_manual_review is True
    assert result.errors == ["Margin 10.00% below minimum threshold of 15%"]
    assert "Margin 10.00% in risk zone (<=10%)" in result.warnings


def test_tce_over_threshold_fails_acid_test(config):
    result = validate_quote(
        QuoteValidationInput(tce=250000, salary=200000, country="US", service_type=ServiceType.FULL_TIME_EMPLOYEE),
        config,
    )

    assert result.acid_test_passed is False
    assert "Failed acid test - financial viability concerns" in result.errors
    assert "TCE 250000 exceeds threshold of 200000" in result.warnings
    assert result.requires_manual_review is True


def test_high_risk_score_warns_and_requires_review(config):
    result = validate_quote(
        QuoteValidationInput(tce=180000, salary=100000, country="BR", service_type=ServiceType.CONTRACTOR),
        config,
    )

    # (50 + 10 + 15 + 10) * 0.8 = 68 -> below the threshold of 70
    assert result.risk_score == 68
    assert result.requires_manual_review is False

    config.acid_test.risk_score_threshold = 60
    flagged = validate_quote(
        QuoteValidationInput(tce=180000, salary=100000, country="BR", service_type=ServiceType.CONTRACTOR),
        config,
    )
    assert "High risk score: 68/100" in flagged.warnings
    assert flagged.requires_manual_review is True
