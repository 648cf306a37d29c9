"""
Deferred callback scheduling.

``JobScheduler`` runs callbacks as one-off APScheduler jobs on a bounded
worker pool; the app starts it on startup and shuts it down on exit.
``ManualScheduler`` keeps its own clock and only fires callbacks when
``advance`` moves the clock past their due time, so tests never sleep.
"""

from __future__ import annotations

import heapq
import itertools
import logging
import threading
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional, Protocol, Tuple

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.schedulers.base import BaseScheduler
from apscheduler.triggers.date import DateTrigger

logger = logging.getLogger(__name__)

Callback = Callable[[], None]


class Scheduler(Protocol):
    def call_later(self, delay_seconds: float, callback: Callback) -> None:
        ...

    def start(self) -> None:
        ...

    def shutdown(self) -> None:
        ...


class JobScheduler:
    """Fire each callback once, ``delay_seconds`` from now."""

    def __init__(self, scheduler: Optional[BaseScheduler] = None) -> None:
        self._scheduler = scheduler or BackgroundScheduler(timezone=timezone.utc)

    @property
    def running(self) -> bool:
        return self._scheduler.running

    def start(self) -> None:
        if not self._scheduler.running:
            self._scheduler.start()
            logger.info("Contract scheduler started")

    def shutdown(self) -> None:
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
            logger.info("Contract scheduler stopped")

    def call_later(self, delay_seconds: float, callback: Callback) -> None:
        run_date = datetime.now(timezone.utc) + timedelta(seconds=max(0.0, delay_seconds))
        # jobs added before start() are held until the scheduler runs; never drop a late one
        self._scheduler.add_job(callback, DateTrigger(run_date=run_date), misfire_grace_time=None)


class ManualScheduler:
    """Scheduler driven by an explicit clock."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start
        self._seq = itertools.count()
        self._queue: List[Tuple[float, int, Callback]] = []
        self._lock = threading.Lock()

    def start(self) -> None:
        pass

    def shutdown(self) -> None:
        pass

    def call_later(self, delay_seconds: float, callback: Callback) -> None:
        with self._lock:
            due = self.now + max(0.0, delay_seconds)
            heapq.heappush(self._queue, (due, next(self._seq), callback))

    def advance(self, seconds: float) -> int:
        """Move the clock forward and run every callback now due. Returns how many ran."""
        with self._lock:
            self.now += seconds
            due: List[Callback] = []
            while self._queue and self._queue[0][0] <= self.now:
                due.append(heapq.heappop(self._queue)[2])

        for callback in due:
            callback()
        if due:
            logger.debug("Ran %d scheduled callbacks at t=%.3f", len(due), self.now)
        return len(due)

    @property
    def pending(self) -> int:
        with self._lock:
            return len(self._queue)
