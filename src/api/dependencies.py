from fastapi import Request

from src.quotes.engine import EORQuoteEngine


def get_engine(request: Request) -> EORQuoteEngine:
    """The engine instance owned by the running app."""
    return request.app.state.engine
