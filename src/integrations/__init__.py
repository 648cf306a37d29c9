"""
Integrations layer.
This package contains all code used to talk to EOR providers:
- mock provider clients that simulate quote APIs in-process
- real HTTP clients for provider quote endpoints
- response normalization from each provider's shape to one cost breakdown

Key rule:
- The quote engine MUST NOT call provider APIs directly.
- It calls integration clients (under src/integrations/clients).
- Mock clients are used by default; real HTTP clients when configured.

Switching implementations:
- The selection of mock vs real clients happens in ONE place
  (select_quote_clients in src/quotes/engine.py).
"""

from .contracts.interfaces import (
    ContractHandle,
    ContractInput,
    ContractStatus,
    CostBreakdown,
    ProviderName,
    ProviderQuote,
    QuoteQuery,
    QuoteRecord,
    QuoteStatus,
    ReviewAction,
    ServiceType,
    StoredContract,
    ValidationResult,
)
from .contracts.rate_tables import (
    CountryAdjustment,
    CountryRateEntry,
    DerivationSpec,
    ProviderAdjustments,
    RoleBand,
)

__all__ = [
    # interfaces
    "ContractHandle", "ContractInput", "ContractStatus", "CostBreakdown",
    "ProviderName", "ProviderQuote", "QuoteQuery", "QuoteRecord", "QuoteStatus",
    "ReviewAction", "ServiceType", "StoredContract", "ValidationResult",
    # rate tables
    "CountryAdjustment", "CountryRateEntry", "DerivationSpec",
    "ProviderAdjustments", "RoleBand",
]
