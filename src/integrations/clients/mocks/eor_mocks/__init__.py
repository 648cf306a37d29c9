"""Registry of provider-specific quote response shapes."""

from __future__ import annotations

from typing import Any, Callable, Dict

from src.integrations.contracts.interfaces import CostBreakdown, ProviderName

from .deel import build_deel_response
from .oyster import build_oyster_response
from .remote import build_remote_response

ResponseBuilder = Callable[[CostBreakdown], Dict[str, Any]]

_REGISTRY: Dict[ProviderName, ResponseBuilder] = {
    ProviderName.DEEL: build_deel_response,
    ProviderName.REMOTE: build_remote_response,
    ProviderName.OYSTER: build_oyster_response,
}


def get_provider_response_builder(provider: ProviderName) -> ResponseBuilder:
    """Return the response projection for a provider; unknown providers get the primary shape."""
    return _REGISTRY.get(ProviderName(provider), build_deel_response)
