from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from src.api.dependencies import get_engine
from src.quotes.comparison import build_comparison_response
from src.quotes.engine import EORQuoteEngine

router = APIRouter(tags=["Quotes"])


class ReviewRequest(BaseModel):
    action: Optional[str] = None


@router.get("/compare")
async def compare_quotes(
    country: str = Query(..., min_length=2),
    salary: float = Query(..., gt=0),
    currency: str = Query(..., min_length=3, max_length=3),
    role: str = Query(..., min_length=2),
    engine: EORQuoteEngine = Depends(get_engine),
) -> Dict[str, Any]:
    """
    Quote every provider, pick one under the reconciliation rule and validate it.

    The stored record id is returned alongside the full comparison.
    """
    record = await engine.compare_providers(country, salary, currency, role)
    return build_comparison_response(record, engine.comparison.rules())


@router.get("/history")
async def quote_history(engine: EORQuoteEngine = Depends(get_engine)) -> Dict[str, Any]:
    return {"items": engine.quotes.history()}


@router.get("/{quote_id}")
async def get_quote(quote_id: str, engine: EORQuoteEngine = Depends(get_engine)) -> Dict[str, Any]:
    return engine.get_quote(quote_id).to_dict()


@router.post("/{quote_id}/review")
async def review_quote(
    quote_id: str,
    body: Optional[ReviewRequest] = None,
    engine: EORQuoteEngine = Depends(get_engine),
) -> Dict[str, Any]:
    return engine.review_quote(quote_id, body.action if body else None)
