"""
Simulated provider quote endpoints.

One router per provider; the same routes are mounted under each provider's
prefix and answer in that provider's response shape.
"""

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from src.api.dependencies import get_engine
from src.integrations.contracts.interfaces import ContractHandle, ContractInput, ProviderName
from src.quotes.engine import EORQuoteEngine

FORM_CURRENCIES = ["USD", "GBP", "INR", "BRL", "EUR"]
FORM_BENEFITS = ["healthcare", "dental", "vision", "meal_vouchers", "internet"]


class ContractRequest(BaseModel):
    country: str = Field(..., min_length=2)
    salary: float = Field(..., gt=0)
    currency: str = Field(..., min_length=3, max_length=3)
    role: str = Field(..., min_length=2)
    start_date: str = Field(..., min_length=4, description="ISO date")
    benefits: List[str] = Field(default_factory=list)


def create_provider_router(provider: ProviderName) -> APIRouter:
    provider = ProviderName(provider)
    router = APIRouter(tags=[f"Provider: {provider.value}"])

    @router.get("/eor/additional-costs/{country}")
    async def additional_costs(country: str, engine: EORQuoteEngine = Depends(get_engine)) -> Dict[str, Any]:
        entry = engine.rate_tables.require(provider, country)
        return entry.model_dump(exclude={"roles"})

    @router.get("/forms/eor/create-contract/{country}")
    async def contract_form(country: str, engine: EORQuoteEngine = Depends(get_engine)) -> Dict[str, Any]:
        entry = engine.rate_tables.require(provider, country)
        return {
            "country": entry.country,
            "fields": {
                "salary": {"type": "number", "note": "Use role bands for guidance"},
                "currency": {"type": "enum", "values": FORM_CURRENCIES},
                "role": {"type": "enum", "values": [band.title for band in entry.roles]},
                "start_date": {"type": "date"},
                "benefits": {"type": "array", "values": FORM_BENEFITS},
            },
            "role_bands": [band.model_dump() for band in entry.roles],
        }

    @router.post("/eor")
    async def create_contract(
        body: ContractRequest,
        delay: bool = Query(default=False, description="Generate the quote asynchronously"),
        engine: EORQuoteEngine = Depends(get_engine),
    ):
        contract_input = ContractInput(**body.model_dump())
        result = engine.compute_quote(provider, contract_input, async_mode=delay)
        if isinstance(result, ContractHandle):
            return JSONResponse(status_code=202, content={"contract_id": result.contract_id})
        return engine.simulator.shape(provider, result)

    @router.get("/eor/contracts/{contract_id}/details")
    async def contract_details(contract_id: str, engine: EORQuoteEngine = Depends(get_engine)) -> Dict[str, Any]:
        return engine.get_contract_status(provider, contract_id)

    return router
