"""Error handling helpers for the quote API."""
from typing import Any, Dict, Optional, Tuple
import logging

from src.quotes.errors import (
    CountryNotFound,
    DataLoadFailure,
    EORError,
    InvalidAction,
    InvalidInput,
    ProviderUnavailable,
    RecordNotFound,
)

logger = logging.getLogger(__name__)

_STATUS_CODES = {
    CountryNotFound: 404,
    RecordNotFound: 404,
    ProviderUnavailable: 502,
    InvalidAction: 400,
    InvalidInput: 400,
    DataLoadFailure: 503,
}

_ERROR_LABELS = {
    CountryNotFound: "Country not found",
    RecordNotFound: "Not found",
    ProviderUnavailable: "Provider unavailable",
    InvalidAction: "Invalid action",
    InvalidInput: "Invalid input",
    DataLoadFailure: "Service temporarily unavailable",
}


class ErrorHandler:
    def status_code(self, exc: Exception) -> int:
        for error_type in type(exc).__mro__:
            if error_type in _STATUS_CODES:
                return _STATUS_CODES[error_type]
        return 500

    def handle_exception(self, exc: Exception, context: Optional[Dict[str, Any]] = None) -> Tuple[int, Dict[str, Any]]:
        status = self.status_code(exc)
        if isinstance(exc, EORError):
            label = next((_ERROR_LABELS[t] for t in type(exc).__mro__ if t in _ERROR_LABELS), "Request failed")
            logger.warning("%s: %s", type(exc).__name__, exc)
            return status, {"error": label, "message": exc.message, **exc.payload}

        logger.error("Unhandled exception in quote API: %s", exc, exc_info=True)
        return status, {
            "error": "Internal server error",
            "message": "An internal error occurred while processing your request. Please try again later.",
            "metadata": {"error": str(exc), "context": context or {}},
        }
