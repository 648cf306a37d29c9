"""
Provider comparison and reconciliation.

Quotes every configured provider for one request, picks a winner under the
spread-tolerance rule, validates the winner and stores the outcome:

- spread <= threshold: near-equal quotes, take the highest TCE (margin)
- spread > threshold: take the lowest TCE (price competitiveness)
- ties go to the first provider in iteration order
"""

from __future__ import annotations

import asyncio
import logging
import math
import uuid
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence

from src.database.quote_store import QuoteRecordStore
from src.integrations.contracts.interfaces import (
    ProviderName,
    ProviderQuote,
    QuoteQuery,
    QuoteRecord,
    QuoteStatus,
)
from src.integrations.policy.response_wrappers import IntegrationResponseError, normalize_provider_quote
from src.quotes.errors import CountryNotFound, EORError, ProviderUnavailable
from src.quotes.validation import QuoteValidationInput, get_service_type_from_role, validate_quote
from src.utils.config_loader import EORConfig

logger = logging.getLogger(__name__)

DEFAULT_START_DATE = "2025-01-01"


class QuoteClient(Protocol):
    async def create_quote(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        ...


@dataclass(frozen=True)
class Selection:
    chosen: ProviderQuote
    spread_percent: float
    rule: str                            # "highest" or "lowest"
    min_tce: float
    max_tce: float


def calculate_spread_percent(tces: Sequence[float]) -> float:
    lowest, highest = min(tces), max(tces)
    if lowest <= 0:
        return 0.0 if highest == lowest else math.inf
    return (highest - lowest) / lowest * 100


def select_provider(quotes: Sequence[ProviderQuote], spread_threshold_percent: float = 4.0) -> Selection:
    """Apply the spread-tolerance rule to a complete set of provider quotes."""
    if not quotes:
        raise ValueError("Cannot select a provider from an empty quote list")

    tces = [q.costs.tce for q in quotes]
    spread = calculate_spread_percent(tces)
    prefer_highest = spread <= spread_threshold_percent

    chosen = quotes[0]
    for candidate in quotes[1:]:
        if prefer_highest and candidate.costs.tce > chosen.costs.tce:
            chosen = candidate
        elif not prefer_highest and candidate.costs.tce < chosen.costs.tce:
            chosen = candidate

    return Selection(
        chosen=chosen,
        spread_percent=spread,
        rule="highest" if prefer_highest else "lowest",
        min_tce=min(tces),
        max_tce=max(tces),
    )


class ComparisonEngine:
    def __init__(
        self,
        clients: Mapping[ProviderName, QuoteClient],
        quotes: QuoteRecordStore,
        config: EORConfig,
    ) -> None:
        if not clients:
            raise ValueError("ComparisonEngine needs at least one provider client")
        self.clients = dict(clients)
        self.quotes = quotes
        self.config = config

    def rules(self) -> Dict[str, Any]:
        return {
            "reconciliation_rule_percent": self.config.reconciliation.spread_threshold_percent,
            "termination_multiplier": self.config.costs.termination_multiplier,
            "internal_cost_ratio": self.config.reconciliation.internal_cost_ratio,
            "margin_thresholds": self.config.margin_thresholds.model_dump(),
        }

    async def collect_quotes(self, payload: Dict[str, Any]) -> List[ProviderQuote]:
        """Quote every provider concurrently; any failure fails the whole set."""
        providers = list(self.clients)
        results = await asyncio.gather(
            *(self._quote_provider(provider, payload) for provider in providers),
            return_exceptions=True,
        )

        failures = [r for r in results if isinstance(r, BaseException)]
        if failures:
            for failure in failures:
                if isinstance(failure, CountryNotFound):
                    raise failure
            for failure in failures:
                if isinstance(failure, EORError):
                    raise failure
            raise failures[0]

        return list(results)

    async def compare_providers(self, country: str, salary: float, currency: str, role: str) -> QuoteRecord:
        country = country.strip().upper()
        payload = {
            "country": country,
            "salary": salary,
            "currency": currency,
            "role": role,
            "benefits": [],
            "start_date": DEFAULT_START_DATE,
        }

        quotes = await self.collect_quotes(payload)
        selection = select_provider(quotes, self.config.reconciliation.spread_threshold_percent)
        chosen = selection.chosen

        service_type = get_service_type_from_role(role)
        validation = validate_quote(
            QuoteValidationInput(
                tce=chosen.costs.tce,
                salary=salary,
                country=country,
                service_type=service_type,
                provider_costs=chosen.costs,
            ),
            self.config,
        )

        legacy_max_tce = self.config.reconciliation.legacy_max_tce
        legacy_manual_review = bool(legacy_max_tce and legacy_max_tce > 0 and selection.max_tce > legacy_max_tce)
        requires_manual_review = legacy_manual_review or validation.requires_manual_review

        record = QuoteRecord(
            id=str(uuid.uuid4()),
            query=QuoteQuery(country=country, salary=salary, currency=currency, role=role, service_type=service_type),
            providers=quotes,
            chosen_provider=chosen.provider,
            requires_manual_review=requires_manual_review,
            status=QuoteStatus.PENDING if requires_manual_review else QuoteStatus.APPROVED,
            validation=validation,
        )
        self.quotes.add(record)

        logger.info(
            "Quote %s: %s chosen (%s TCE, spread %.2f%%), manual_review=%s",
            record.id,
            chosen.provider.value,
            selection.rule,
            selection.spread_percent,
            requires_manual_review,
        )
        return record

    async def _quote_provider(self, provider: ProviderName, payload: Dict[str, Any]) -> ProviderQuote:
        client = self.clients[provider]
        raw = await client.create_quote(payload)
        try:
            costs = normalize_provider_quote(raw)
        except IntegrationResponseError as e:
            logger.error("Unusable quote response from %s: %s", provider.value, e)
            raise ProviderUnavailable(
                f"Provider '{provider.value}' returned an unusable quote",
                payload={"provider": provider.value, "reason": str(e)},
            ) from e
        return ProviderQuote(provider=provider, costs=costs)


def build_comparison_response(record: QuoteRecord, rules: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    body = record.to_dict()
    body["rules"] = rules or {}
    return body
