"""Typed failures raised by the quote engine.

Every error carries a human-readable message plus a ``payload`` dict with the
details the API layer echoes back (requested country, provider, ids, ...).
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class EORError(Exception):
    def __init__(self, message: str, *, payload: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.payload = payload or {}


class CountryNotFound(EORError):
    """No rate entry exists for the requested country/provider pair."""


class ProviderUnavailable(EORError):
    """A provider's quote could not be produced during a comparison."""


class InvalidInput(EORError):
    pass


class RecordNotFound(EORError):
    """Unknown quote or contract id."""


class InvalidAction(EORError):
    """Review action outside approve/reject."""


class DataLoadFailure(EORError):
    """Rate table source missing or corrupt."""
