"""
In-memory quote record store.

Holds every comparison result for the lifetime of the process together with
its manual-review state. It is NOT intended for production use.
"""

from __future__ import annotations

import itertools
import logging
import threading
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from src.integrations.contracts.interfaces import QuoteRecord, QuoteStatus, ReviewAction
from src.quotes.errors import InvalidAction, RecordNotFound

logger = logging.getLogger(__name__)

_ACTION_TO_STATUS = {
    ReviewAction.APPROVE: QuoteStatus.APPROVED,
    ReviewAction.REJECT: QuoteStatus.REJECTED,
}


def parse_review_action(action: Any) -> ReviewAction:
    value = str(action or "").strip().lower()
    try:
        return ReviewAction(value)
    except ValueError:
        raise InvalidAction("action must be approve|reject", payload={"action": value}) from None


class QuoteRecordStore:
    def __init__(self) -> None:
        self._quotes: Dict[str, QuoteRecord] = {}
        # insertion sequence breaks created_at ties
        self._order: Dict[str, int] = {}
        self._seq = itertools.count()
        self._lock = threading.Lock()

    def add(self, record: QuoteRecord) -> QuoteRecord:
        with self._lock:
            if record.id in self._quotes:
                raise ValueError(f"Quote {record.id} already stored")
            self._quotes[record.id] = record
            self._order[record.id] = next(self._seq)
        return record

    def get(self, quote_id: str) -> Optional[QuoteRecord]:
        with self._lock:
            return self._quotes.get(quote_id)

    def require(self, quote_id: str) -> QuoteRecord:
        record = self.get(quote_id)
        if record is None:
            raise RecordNotFound(f"Quote {quote_id} not found", payload={"id": quote_id})
        return record

    def review(self, quote_id: str, action: Any) -> QuoteRecord:
        """Apply approve/reject. Terminal states are overwritten (last write wins)."""
        with self._lock:
            current = self._quotes.get(quote_id)
            if current is None:
                raise RecordNotFound(f"Quote {quote_id} not found", payload={"id": quote_id})
            review_action = parse_review_action(action)
            status = _ACTION_TO_STATUS[review_action]
            entry = {
                "action": review_action.value,
                "status": status.value,
                "previous_status": current.status.value,
                "reviewed_at": datetime.now(timezone.utc).isoformat(),
            }
            updated = replace(current, status=status, review_history=[*current.review_history, entry])
            self._quotes[quote_id] = updated

        logger.info("Quote %s reviewed: %s -> %s", quote_id, entry["previous_status"], status.value)
        return updated

    def history(self) -> List[Dict[str, Any]]:
        """Summaries of every stored quote, newest first."""
        with self._lock:
            records = sorted(
                self._quotes.values(),
                key=lambda q: (q.created_at, self._order[q.id]),
                reverse=True,
            )
        items = []
        for q in records:
            chosen = q.chosen_costs
            items.append(
                {
                    "id": q.id,
                    "created_at": q.created_at.isoformat(),
                    "country": q.query.country,
                    "provider": q.chosen_provider.value,
                    "tce": chosen.tce if chosen else None,
                    "status": q.status.value,
                    "requires_manual_review": q.requires_manual_review,
                }
            )
        return items

    def __len__(self) -> int:
        with self._lock:
            return len(self._quotes)
