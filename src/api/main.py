"""
FastAPI application - Main entry point
"""

from dotenv import load_dotenv

load_dotenv()

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.api.dependencies import get_engine
from src.api.endpoints.mock_admin import router as mock_admin_router
from src.api.endpoints.providers import create_provider_router
from src.api.quotes_router import router as quotes_router
from src.error_handler import ErrorHandler
from src.integrations.contracts.interfaces import ProviderName
from src.quotes.engine import EORQuoteEngine
from src.quotes.errors import EORError, InvalidInput
from src.utils.config_loader import EORConfig, load_eor_config

# Setup logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Provider routers are mounted under the prefix each provider's public API uses
PROVIDER_PREFIXES: Dict[ProviderName, str] = {
    ProviderName.DEEL: "/rest/v2",
    ProviderName.REMOTE: "/remote",
    ProviderName.OYSTER: "/oyster",
}

error_handler = ErrorHandler()


def create_app(engine: Optional[EORQuoteEngine] = None, config: Optional[EORConfig] = None) -> FastAPI:
    """Build the app around ``engine``; a new engine is loaded from disk when none is given."""
    if engine is None:
        config = config or load_eor_config()
        engine = EORQuoteEngine(config)
        engine.reload_rate_tables()
    config = engine.config

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        engine.start()
        yield
        engine.shutdown()

    app = FastAPI(
        title="Mock EOR Server",
        description="Simulated EOR providers with quote comparison, validation and review",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.engine = engine

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.server.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(EORError)
    async def eor_error_handler(request: Request, exc: EORError) -> JSONResponse:
        status_code, body = error_handler.handle_exception(exc, context={"path": request.url.path})
        return JSONResponse(status_code=status_code, content=body)

    @app.exception_handler(RequestValidationError)
    async def invalid_payload_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        invalid = InvalidInput("Invalid payload", payload={"details": jsonable_encoder(exc.errors())})
        status_code, body = error_handler.handle_exception(invalid, context={"path": request.url.path})
        return JSONResponse(status_code=status_code, content=body)

    @app.get("/health")
    async def health_check(engine: EORQuoteEngine = Depends(get_engine)) -> Dict[str, Any]:
        return {
            "status": "ok",
            "seed_data_loaded": engine.rate_tables.is_loaded(),
            "seed_data_status": engine.rate_tables.status(),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    @app.get("/debug/seed-data")
    async def seed_data_status(engine: EORQuoteEngine = Depends(get_engine)) -> Dict[str, Any]:
        return engine.rate_tables.status()

    for provider in config.providers.names:
        prefix = PROVIDER_PREFIXES.get(provider, f"/{provider.value}")
        app.include_router(create_provider_router(provider), prefix=prefix)

    app.include_router(quotes_router, prefix="/quotes")
    app.include_router(mock_admin_router, prefix="/mock")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=app.state.engine.config.server.port)
