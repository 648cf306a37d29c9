"""
Composition root for the quote engine.

Owns the stores and wires the simulator, provider clients and comparison
engine together. The API layer and scripts hold one ``EORQuoteEngine`` and
call only the methods below.
"""

from __future__ import annotations

import logging
import random
from typing import Any, Dict, Mapping, Optional, Union

from src.database.contract_store import ContractStore
from src.database.quote_store import QuoteRecordStore
from src.integrations.clients.mocks.eor_mocks.simulator import MockEORClient, ProviderQuoteSimulator
from src.integrations.clients.real_http.eor_quotes import HttpEORQuoteClient
from src.integrations.contracts.interfaces import (
    ContractHandle,
    ContractInput,
    CostBreakdown,
    ProviderName,
    QuoteRecord,
)
from src.quotes.comparison import ComparisonEngine, QuoteClient
from src.quotes.rate_tables import RateTableStore
from src.utils.config_loader import EORConfig
from src.utils.scheduler import Scheduler

logger = logging.getLogger(__name__)


def select_quote_clients(config: EORConfig, simulator: ProviderQuoteSimulator) -> Dict[ProviderName, QuoteClient]:
    """Real HTTP clients where configured and enabled, mock clients otherwise."""
    clients: Dict[ProviderName, QuoteClient] = {}
    integrations = config.integrations
    for provider in config.providers.names:
        base_url = integrations.base_urls.get(provider)
        if integrations.use_real() and base_url:
            clients[provider] = HttpEORQuoteClient(
                provider=provider,
                base_url=base_url,
                timeout_seconds=integrations.timeout_seconds,
                api_key=integrations.api_keys.get(provider),
            )
        else:
            clients[provider] = MockEORClient(simulator, provider)
    return clients


class EORQuoteEngine:
    def __init__(
        self,
        config: EORConfig,
        rate_tables: Optional[RateTableStore] = None,
        scheduler: Optional[Scheduler] = None,
        rng: Optional[random.Random] = None,
        clients: Optional[Mapping[ProviderName, QuoteClient]] = None,
    ) -> None:
        self.config = config
        providers = config.providers.names
        self.rate_tables = rate_tables or RateTableStore(primary=config.providers.primary, providers=providers)
        self.contracts = ContractStore(providers)
        self.quotes = QuoteRecordStore()
        self.simulator = ProviderQuoteSimulator(
            self.rate_tables,
            self.contracts,
            config,
            scheduler=scheduler,
            rng=rng,
        )
        self.comparison = ComparisonEngine(
            clients or select_quote_clients(config, self.simulator),
            self.quotes,
            config,
        )

    # -- Lifecycle --

    def start(self) -> None:
        """Start delivering deferred contract transitions."""
        self.simulator.scheduler.start()

    def shutdown(self) -> None:
        self.simulator.scheduler.shutdown()

    # -- Rate tables --

    def reload_rate_tables(self) -> bool:
        """Re-derive every provider table from the configured data directory."""
        data_dir = self.config.providers.data_path()
        loaded = self.rate_tables.load_from_disk(data_dir)
        logger.info("Rate tables reloaded from %s (fallback=%s)", data_dir, not loaded)
        return loaded

    # -- Single provider quotes --

    def compute_quote(
        self,
        provider: ProviderName,
        contract_input: ContractInput,
        async_mode: bool = False,
    ) -> Union[CostBreakdown, ContractHandle]:
        return self.simulator.compute_quote(provider, contract_input, async_mode=async_mode)

    def get_contract_status(self, provider: ProviderName, contract_id: str) -> Dict[str, Any]:
        return self.simulator.get_contract_status(provider, contract_id)

    # -- Comparisons and review --

    async def compare_providers(self, country: str, salary: float, currency: str, role: str) -> QuoteRecord:
        return await self.comparison.compare_providers(country, salary, currency, role)

    def review_quote(self, quote_id: str, action: Any) -> Dict[str, str]:
        record = self.quotes.review(quote_id, action)
        return {"id": record.id, "status": record.status.value}

    def get_quote(self, quote_id: str) -> QuoteRecord:
        return self.quotes.require(quote_id)
