import pytest

from src.database.quote_store import QuoteRecordStore
from src.integrations.contracts.interfaces import CostBreakdown, ProviderName, ProviderQuote, QuoteStatus
from src.quotes.comparison import ComparisonEngine, build_comparison_response, calculate_spread_percent, select_provider
from src.quotes.errors import CountryNotFound, ProviderUnavailable


def _costs(tce, salary=100000):
    return CostBreakdown(
        salary=salary,
        employer_tax=10000,
        benefits_cost=5000,
        fixed_fees=500,
        termination_amortization=tce - salary - 15500,
        tce=tce,
    )


def _quotes(*tces):
    return [ProviderQuote(provider=p, costs=_costs(t)) for p, t in zip(ProviderName, tces)]


class FakeQuoteClient:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.payloads = []

    async def create_quote(self, payload):
        self.payloads.append(payload)
        if self.error is not None:
            raise self.error
        return self.response


def _clients(*tces):
    return {p: FakeQuoteClient(response={"costs": _costs(t).to_dict()}) for p, t in zip(ProviderName, tces)}


def test_spread_percent():
    assert calculate_spread_percent([100000, 102000, 101000]) == pytest.approx(2.0)
    assert calculate_spread_percent([100, 100]) == 0.0


def test_tight_spread_picks_highest_tce():
    selection = select_provider(_quotes(100000, 102000, 101000))
    assert selection.chosen.provider == ProviderName.REMOTE
    assert selection.rule == "highest"


def test_wide_spread_picks_lowest_tce():
    selection = select_provider(_quotes(100000, 150000, 120000))
    assert selection.chosen.provider == ProviderName.DEEL
    assert selection.rule == "lowest"
    assert selection.spread_percent == pytest.approx(50.0)


def test_ties_go_to_first_provider():
    assert select_provider(_quotes(100000, 100000, 100000)).chosen.provider == ProviderName.DEEL
    assert select_provider(_quotes(90000, 120000, 90000)).chosen.provider == ProviderName.DEEL
    assert select_provider(_quotes(100000, 103000, 103000)).chosen.provider == ProviderName.REMOTE


def test_select_provider_requires_quotes():
    with pytest.raises(ValueError):
        select_provider([])


@pytest.mark.asyncio
async def test_compare_stores_and_returns_record(config):
    store = QuoteRecordStore()
    clients = _clients(128000, 130000, 129000)
    engine = ComparisonEngine(clients, store, config)

    record = await engine.compare_providers("us", 100000, "USD", "Software Engineer")

    assert record.chosen_provider == ProviderName.REMOTE
    assert record.query.country == "US"
    assert record.status == QuoteStatus.APPROVED
    assert record.requires_manual_review is False
    assert store.get(record.id) is record
    assert clients[ProviderName.DEEL].payloads == [
        {
            "country": "US",
            "salary": 100000,
            "currency": "USD",
            "role": "Software Engineer",
            "benefits": [],
            "start_date": "2025-01-01",
        }
    ]


@pytest.mark.asyncio
async def test_manual_review_leaves_quote_pending(config):
    engine = ComparisonEngine(_clients(250000, 260000, 255000), QuoteRecordStore(), config)

    record = await engine.compare_providers("US", 200000, "USD", "Software Engineer")

    assert record.requires_manual_review is True
    assert record.status == QuoteStatus.PENDING


@pytest.mark.asyncio
async def test_legacy_max_tce_forces_manual_review(config):
    config.reconciliation.legacy_max_tce = 129000
    engine = ComparisonEngine(_clients(128000, 130000, 129000), QuoteRecordStore(), config)

    record = await engine.compare_providers("US", 100000, "USD", "Software Engineer")

    assert record.validation.requires_manual_review is False
    assert record.requires_manual_review is True
    assert record.status == QuoteStatus.PENDING


@pytest.mark.asyncio
async def test_country_not_found_wins_over_other_failures(config):
    store = QuoteRecordStore()
    clients = _clients(100000, 100000, 100000)
    clients[ProviderName.REMOTE] = FakeQuoteClient(error=ProviderUnavailable("down"))
    clients[ProviderName.OYSTER] = FakeQuoteClient(error=CountryNotFound("no ZZ"))
    engine = ComparisonEngine(clients, store, config)

    with pytest.raises(CountryNotFound):
        await engine.compare_providers("ZZ", 100000, "USD", "Engineer")
    assert len(store) == 0


@pytest.mark.asyncio
async def test_single_provider_failure_fails_comparison(config):
    store = QuoteRecordStore()
    clients = _clients(100000, 100000, 100000)
    clients[ProviderName.OYSTER] = FakeQuoteClient(error=ProviderUnavailable("timeout"))
    engine = ComparisonEngine(clients, store, config)

    with pytest.raises(ProviderUnavailable):
        await engine.compare_providers("US", 100000, "USD", "Engineer")
    assert store.history() == []


@pytest.mark.asyncio
async def test_unusable_provider_response_is_provider_unavailable(config):
    clients = _clients(100000, 100000, 100000)
    clients[ProviderName.REMOTE] = FakeQuoteClient(response={"unexpected": True})
    engine = ComparisonEngine(clients, QuoteRecordStore(), config)

    with pytest.raises(ProviderUnavailable) as exc_info:
        await engine.compare_providers("US", 100000, "USD", "Engineer")
    assert exc_info.value.payload["provider"] == "remote"


@pytest.mark.asyncio
async def test_compare_with_mock_providers(engine):
    record = await engine.compare_providers("GB", 65000, "GBP", "Software Engineer")

    assert [q.provider for q in record.providers] == list(ProviderName)
    assert record.chosen_costs.tce in {q.costs.tce for q in record.providers}

    body = build_comparison_response(record, engine.comparison.rules())
    assert body["id"] == record.id
    assert body["query"]["service_type"] == "full-time-employee"
    assert body["rules"]["reconciliation_rule_percent"] == 4.0
    assert body["rules"]["termination_multiplier"] == 0.5
    assert body["rules"]["margin_thresholds"]["minimum_margin_percent"] == 15.0


@pytest.mark.asyncio
async def test_compare_unknown_country_with_mock_providers(engine):
    with pytest.raises(CountryNotFound):
        await engine.compare_providers("ZZ", 65000, "GBP", "Software Engineer")
