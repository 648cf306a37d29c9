"""Total cost of employment calculator."""

from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP

from src.integrations.contracts.interfaces import CostBreakdown
from src.integrations.contracts.rate_tables import CountryRateEntry

DEFAULT_TERMINATION_MULTIPLIER = 0.5

_MONEY_STEP = Decimal("0.01")
_WHOLE_STEP = Decimal("1")


def round2(amount: float) -> float:
    """Round half-up to cents."""
    return float(Decimal(str(amount)).quantize(_MONEY_STEP, rounding=ROUND_HALF_UP))


def round_whole(amount: float) -> int:
    return int(Decimal(str(amount)).quantize(_WHOLE_STEP, rounding=ROUND_HALF_UP))


def compute_costs(
    salary: float,
    entry: CountryRateEntry,
    termination_multiplier: float = DEFAULT_TERMINATION_MULTIPLIER,
) -> CostBreakdown:
    """Map a salary and a country rate entry to an annual cost breakdown.

    Each output field is rounded to cents on its own; the TCE is summed from
    the unrounded components.
    """
    employer_tax = salary * entry.employer_tax_rate
    benefits_cost = salary * entry.benefits_percent
    termination_amortization = salary * termination_multiplier * (entry.probation_months / 12)
    tce = salary + employer_tax + benefits_cost + entry.fixed_fees + termination_amortization

    return CostBreakdown(
        salary=round2(salary),
        employer_tax=round2(employer_tax),
        benefits_cost=round2(benefits_cost),
        fixed_fees=round2(entry.fixed_fees),
        termination_amortization=round2(termination_amortization),
        tce=round2(tce),
    )
