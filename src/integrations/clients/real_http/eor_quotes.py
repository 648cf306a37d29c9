"""
Real EOR provider quote HTTP client.

Used when provider base URLs are configured and integrations run in real mode.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from src.integrations.contracts.interfaces import ProviderName
from src.quotes.errors import CountryNotFound, ProviderUnavailable

logger = logging.getLogger(__name__)


class HttpEORQuoteClient:
    def __init__(
        self,
        provider: ProviderName,
        base_url: str,
        api_key: Optional[str] = None,
        quote_path: str = "/eor",
        timeout_seconds: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.provider = ProviderName(provider)
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.quote_path = quote_path
        self.timeout_seconds = timeout_seconds
        self._transport = transport

    async def create_quote(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Post a quote request and return the provider's raw JSON response."""
        if not self.base_url:
            raise ProviderUnavailable(
                f"No base URL configured for provider '{self.provider.value}'",
                payload={"provider": self.provider.value},
            )

        headers: Dict[str, str] = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        url = f"{self.base_url}{self.quote_path}"
        try:
            logger.info("Requesting %s quote from %s", self.provider.value, url)
            async with httpx.AsyncClient(timeout=self.timeout_seconds, transport=self._transport) as client:
                response = await client.post(url, json=payload, headers=headers)
                response.raise_for_status()
                return response.json() if response.content else {}
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            logger.error("HTTP error from %s quote API: %s %s", self.provider.value, status_code, e.response.text)
            if status_code == 404:
                raise CountryNotFound(
                    f"Country {payload.get('country')} not found for provider {self.provider.value}",
                    payload={"requested_country": payload.get("country"), "provider": self.provider.value},
                ) from e
            raise ProviderUnavailable(
                f"HTTP {status_code} from provider '{self.provider.value}'",
                payload={"provider": self.provider.value, "status_code": status_code},
            ) from e
        except httpx.RequestError as e:
            logger.error("Request error connecting to %s quote API: %s", self.provider.value, e)
            raise ProviderUnavailable(
                f"Could not reach provider '{self.provider.value}'",
                payload={"provider": self.provider.value, "reason": str(e)},
            ) from e
