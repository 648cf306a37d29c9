"""Mock EOR provider quote simulator.

Produces provider-flavoured quotes from the shared rate tables: non-primary
providers re-draw the salary inside the role's band, every provider jitters
its rates a little, and each provider projects the same breakdown into its own
response shape. Async mode hands back a pending contract that becomes ready
once the configured provider latency has elapsed.
"""

from __future__ import annotations

import logging
import random
from typing import Any, Dict, Optional, Union

from src.database.contract_store import ContractStore
from src.integrations.contracts.interfaces import (
    ContractHandle,
    ContractInput,
    CostBreakdown,
    ProviderName,
)
from src.integrations.contracts.rate_tables import CountryRateEntry
from src.quotes.calc import compute_costs, round_whole
from src.quotes.errors import InvalidInput, RecordNotFound
from src.quotes.rate_tables import RateTableStore
from src.utils.config_loader import EORConfig
from src.utils.scheduler import JobScheduler, Scheduler

from . import get_provider_response_builder

logger = logging.getLogger(__name__)


class ProviderQuoteSimulator:
    """Quote generation shared by every mock provider."""

    def __init__(
        self,
        rate_tables: RateTableStore,
        contracts: ContractStore,
        config: EORConfig,
        scheduler: Optional[Scheduler] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.rate_tables = rate_tables
        self.contracts = contracts
        self.config = config
        self.scheduler = scheduler or JobScheduler()
        self.rng = rng or random.Random()

    @property
    def primary(self) -> ProviderName:
        return self.rate_tables.primary

    # ------------------------------------------------------------------
    # Provider variance
    # ------------------------------------------------------------------

    def randomized_salary(self, provider: ProviderName, entry: CountryRateEntry, salary: float, role: str) -> float:
        if ProviderName(provider) == self.primary:
            return salary
        band = entry.find_role(role)
        if band is None:
            return salary
        spread = self.config.simulation.salary_band_spread
        offset = (self.rng.random() - 0.5) * (band.max_salary - band.min_salary) * spread
        return round_whole(band.midpoint + offset)

    def jittered_entry(self, entry: CountryRateEntry) -> CountryRateEntry:
        pct = self.config.simulation.jitter_percent

        def jitter(value: float) -> float:
            return max(0.0, value * (1 + (self.rng.random() - 0.5) * 2 * pct))

        return entry.model_copy(
            update={
                "employer_tax_rate": jitter(entry.employer_tax_rate),
                "benefits_percent": jitter(entry.benefits_percent),
                "fixed_fees": jitter(entry.fixed_fees),
            }
        )

    # ------------------------------------------------------------------
    # Quotes and contracts
    # ------------------------------------------------------------------

    def compute_quote(
        self,
        provider: ProviderName,
        contract_input: ContractInput,
        async_mode: bool = False,
    ) -> Union[CostBreakdown, ContractHandle]:
        """Quote one provider. Raises CountryNotFound if the provider has no entry."""
        provider = ProviderName(provider)
        entry = self.rate_tables.require(provider, contract_input.country)

        if async_mode:
            return self._create_contract(provider, contract_input, entry)

        salary = self.randomized_salary(provider, entry, contract_input.salary, contract_input.role)
        return compute_costs(salary, self.jittered_entry(entry), self.config.costs.termination_multiplier)

    def get_contract_status(self, provider: ProviderName, contract_id: str) -> Dict[str, Any]:
        contract = self.contracts.get(provider, contract_id)
        if contract is None:
            raise RecordNotFound(
                "Contract not found",
                payload={"contract_id": contract_id, "provider": ProviderName(provider).value},
            )
        return {
            "contract_id": contract.id,
            "status": contract.status.value,
            "costs": contract.costs.to_dict() if contract.costs else None,
        }

    def shape(self, provider: ProviderName, costs: CostBreakdown) -> Dict[str, Any]:
        return get_provider_response_builder(provider)(costs)

    def _create_contract(
        self,
        provider: ProviderName,
        contract_input: ContractInput,
        entry: CountryRateEntry,
    ) -> ContractHandle:
        contract = self.contracts.create(provider, contract_input)
        delay_seconds = self.config.simulation.mock_delay_ms / 1000.0
        self.scheduler.call_later(
            delay_seconds,
            lambda: self._complete_contract(provider, contract.id, contract_input.salary, entry),
        )
        logger.info(
            "[%s MOCK] Contract %s pending, ready in %.0fms",
            provider.value.upper(),
            contract.id,
            self.config.simulation.mock_delay_ms,
        )
        return ContractHandle(contract_id=contract.id, provider=provider)

    def _complete_contract(
        self,
        provider: ProviderName,
        contract_id: str,
        salary: float,
        entry: CountryRateEntry,
    ) -> None:
        costs = compute_costs(salary, entry, self.config.costs.termination_multiplier)
        try:
            fired = self.contracts.mark_ready(provider, contract_id, costs)
        except RecordNotFound:
            logger.critical("Scheduled contract %s vanished before it became ready", contract_id)
            raise
        if not fired:
            logger.warning("Contract %s was already ready; ignoring duplicate transition", contract_id)


class MockEORClient:
    """Provider client returning provider-shaped responses without any network call."""

    def __init__(self, simulator: ProviderQuoteSimulator, provider: ProviderName) -> None:
        self.simulator = simulator
        self.provider = ProviderName(provider)

    async def create_quote(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Create a synchronous quote and return it in this provider's response shape."""
        try:
            contract_input = ContractInput(
                country=str(payload["country"]),
                salary=float(payload["salary"]),
                currency=str(payload.get("currency", "USD")),
                role=str(payload.get("role", "")),
                start_date=str(payload.get("start_date", "")),
                benefits=list(payload.get("benefits") or []),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise InvalidInput(
                f"Malformed quote request for {self.provider.value}: {exc}",
                payload={"provider": self.provider.value},
            ) from exc
        costs = self.simulator.compute_quote(self.provider, contract_input)
        return self.simulator.shape(self.provider, costs)
