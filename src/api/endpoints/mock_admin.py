"""
Mock admin endpoints: rate table reload plus quote review aliases.
Remove or disable in production.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends

from src.api.dependencies import get_engine
from src.api.quotes_router import get_quote, quote_history, review_quote
from src.quotes.engine import EORQuoteEngine

router = APIRouter(tags=["Mock Admin"])


@router.post("/seed")
async def reload_seed(engine: EORQuoteEngine = Depends(get_engine)) -> Dict[str, Any]:
    loaded = engine.reload_rate_tables()
    return {"status": "ok", "reloaded": True, "fallback": not loaded}


router.add_api_route("/quotes/history", quote_history, methods=["GET"])
router.add_api_route("/quotes/{quote_id}", get_quote, methods=["GET"])
router.add_api_route("/quotes/{quote_id}/review", review_quote, methods=["POST"])
