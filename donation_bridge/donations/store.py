"""Donation store: bounded, time-decaying, in-memory.

Security contract:
- At most max_size donations; overflow drops the single oldest (FIFO),
  whether or not it has been retrieved
- Donations older than ttl_seconds are swept on every admit and take
- take_unprocessed() reads and flips processed under one lock, so a
  donation is handed to a poller at most once
- Volatile by design: nothing survives a restart
"""

from __future__ import annotations

import logging
import threading
import time
from collections import deque
from typing import Any, Callable

from donation_bridge.models import Donation, create_donation

logger = logging.getLogger(__name__)

_MAX_DONATIONS = 100
_DONATION_TTL_SECONDS = 300.0  # 5 minutes


class DonationStore:
    """Ordered in-memory collection of admitted donations."""

    def __init__(
        self,
        max_size: int = _MAX_DONATIONS,
        ttl_seconds: float = _DONATION_TTL_SECONDS,
        clock: Callable[[], float] | None = None,
    ):
        self._max_size = max_size
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._donations: deque[Donation] = deque()
        self._lock = threading.Lock()

    def _now(self) -> float:
        return self._clock() if self._clock else time.time()

    def _sweep_expired(self, now: float) -> int:
        # Insertion order is accepted_at order, so expired entries sit at the front
        removed = 0
        while self._donations and now - self._donations[0].accepted_at >= self._ttl_seconds:
            self._donations.popleft()
            removed += 1
        return removed

    def admit(self, data: dict[str, Any]) -> Donation:
        """Append a validated payload as a new donation."""
        with self._lock:
            now = self._now()
            if self._donations and now < self._donations[-1].accepted_at:
                # Wall clock stepped backwards; keep accepted_at non-decreasing
                now = self._donations[-1].accepted_at
            donation = create_donation(data, accepted_at=now)
            self._donations.append(donation)

            if len(self._donations) > self._max_size:
                evicted = self._donations.popleft()
                logger.warning(
                    "Donation store full, evicted %s (processed=%s)",
                    evicted.id,
                    evicted.processed,
                )

            expired = self._sweep_expired(now)
            if expired:
                logger.info("Swept %d expired donations", expired)
            return donation

    def take_unprocessed(self) -> list[Donation]:
        """Return unprocessed donations oldest-first and mark them processed."""
        with self._lock:
            self._sweep_expired(self._now())
            pending = [d for d in self._donations if not d.processed]
            for donation in pending:
                donation.mark_processed()
            return pending

    def sweep_expired(self) -> int:
        """Remove expired donations. Returns count removed."""
        with self._lock:
            return self._sweep_expired(self._now())

    def snapshot(self) -> list[Donation]:
        """Copy of the live donations, oldest first (for inspection)."""
        with self._lock:
            return list(self._donations)

    def clear(self) -> None:
        with self._lock:
            self._donations.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._donations)
