"""
Rate table contracts.

Defines the structure of the per-country employer cost data every provider is
quoted from, e.g.:
- employer tax rate, benefits percent and fixed fees for a country
- probation period and local currency
- role salary bands used for salary randomization and form hints

Also defines the adjustment spec a secondary provider ships instead of a full
table: global deltas/multipliers plus optional per-country overrides, applied
on top of the primary provider's table.
"""

from __future__ import annotations

from typing import Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

Seniority = Literal["junior", "mid", "senior", "lead"]


class RoleBand(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    min_salary: float = Field(ge=0)
    max_salary: float = Field(ge=0)
    seniority_levels: Tuple[Seniority, ...] = ()
    description: str = ""

    @model_validator(mode="after")
    def _check_range(self) -> "RoleBand":
        if self.min_salary > self.max_salary:
            raise ValueError(f"min_salary {self.min_salary} exceeds max_salary {self.max_salary} for '{self.title}'")
        return self

    @property
    def midpoint(self) -> float:
        return (self.min_salary + self.max_salary) / 2


class CountryRateEntry(BaseModel):
    """Employer cost parameters for one provider in one country."""

    model_config = ConfigDict(frozen=True)

    country: str = Field(min_length=2, max_length=2)     # ISO 3166 alpha-2
    employer_tax_rate: float = Field(ge=0)              # 0.12 means 12%
    benefits_percent: float = Field(ge=0)               # 0.08 means 8%
    fixed_fees: float = Field(ge=0)
    probation_months: int = Field(ge=0)
    currency_code: str = Field(min_length=3, max_length=3)
    currency_symbol: str = ""
    cost_notes: str = ""
    roles: Tuple[RoleBand, ...] = ()

    def find_role(self, title: str) -> Optional[RoleBand]:
        wanted = title.strip().lower()
        for band in self.roles:
            if band.title.lower() == wanted:
                return band
        return None


class CountryAdjustment(BaseModel):
    employer_tax_rate_delta: float = 0.0
    benefits_percent_delta: float = 0.0
    fixed_fees_delta: float = 0.0
    salary_multiplier: float = 1.0


class ProviderAdjustments(CountryAdjustment):
    model_config = ConfigDict(populate_by_name=True)

    per_country: Dict[str, CountryAdjustment] = Field(default_factory=dict, alias="perCountry")


class DerivationSpec(BaseModel):
    """Secondary provider spec derived from the primary provider's table."""

    model_config = ConfigDict(populate_by_name=True)

    inherit_from: Optional[str] = Field(default=None, alias="inheritFrom")
    adjustments: ProviderAdjustments = Field(default_factory=ProviderAdjustments)


# Either a full replacement table or a derivation spec.
ProviderAdjustmentSpec = Union[List[CountryRateEntry], DerivationSpec]

RateTable = Dict[str, CountryRateEntry]
