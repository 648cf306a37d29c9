"""Pytest fixtures for rate table, simulator and comparison tests."""

import random

import pytest

from src.integrations.contracts.interfaces import ProviderName
from src.integrations.contracts.rate_tables import CountryRateEntry, DerivationSpec, RoleBand
from src.quotes.engine import EORQuoteEngine
from src.quotes.rate_tables import RateTableStore
from src.utils.config_loader import EORConfig
from src.utils.scheduler import ManualScheduler


def make_entry(country="US", tax=0.1, benefits=0.05, fees=500.0, probation=3, currency="USD", roles=None):
    if roles is None:
        roles = (
            RoleBand(title="Software Engineer", min_salary=80000, max_salary=160000, seniority_levels=("mid", "senior")),
            RoleBand(title="Product Manager", min_salary=90000, max_salary=170000),
        )
    return CountryRateEntry(
        country=country,
        employer_tax_rate=tax,
        benefits_percent=benefits,
        fixed_fees=fees,
        probation_months=probation,
        currency_code=currency,
        roles=roles,
    )


@pytest.fixture
def entry_factory():
    return make_entry


@pytest.fixture
def config():
    """Default configuration, independent of the YAML file and environment."""
    return EORConfig()


@pytest.fixture
def primary_entries():
    return [
        make_entry("US"),
        make_entry("GB", tax=0.138, benefits=0.05, fees=499, probation=6, currency="GBP"),
        make_entry("BR", tax=0.358, benefits=0.1, fees=499, probation=3, currency="BRL"),
    ]


@pytest.fixture
def rate_tables(primary_entries):
    """Store seeded from an in-test table; secondary providers inherit it unchanged."""
    store = RateTableStore(primary=ProviderName.DEEL, providers=list(ProviderName))
    assert store.load(
        primary_entries,
        {ProviderName.REMOTE: DerivationSpec(), ProviderName.OYSTER: DerivationSpec()},
    )
    return store


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def engine(config, rate_tables, scheduler, rng):
    return EORQuoteEngine(config, rate_tables=rate_tables, scheduler=scheduler, rng=rng)
