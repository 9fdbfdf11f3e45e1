"""In-memory sliding window rate limiter.

Used twice with different identities and limits:
- webhook submissions, keyed by client origin (10 / 60s)
- donation polling, keyed by a hash of the API key (60 / 60s)

Windows are pruned lazily on access, so an identity that goes quiet keeps
at most `limit` timestamps until it is queried again.
"""

from __future__ import annotations

import hashlib
import math
import threading
import time
from typing import Callable

Clock = Callable[[], float]


def credential_identity(credential: str) -> str:
    """Stable limiter key for a credential (never store the raw secret)."""
    return hashlib.sha256(credential.encode("utf-8")).hexdigest()[:16]


class SlidingWindowLimiter:
    """Per-identity sliding window throttle."""

    def __init__(self, limit: int, window_seconds: float = 60.0, clock: Clock | None = None):
        self._limit = limit
        self._window_seconds = window_seconds
        self._clock = clock
        self._windows: dict[str, list[float]] = {}
        self._lock = threading.Lock()

    def _now(self) -> float:
        return self._clock() if self._clock else time.time()

    def _retained(self, identity: str, now: float) -> list[float]:
        return [t for t in self._windows.get(identity, []) if now - t < self._window_seconds]

    def allow(self, identity: str) -> bool:
        """Record an attempt for identity. Returns False if over the limit."""
        with self._lock:
            now = self._now()
            timestamps = self._retained(identity, now)
            if len(timestamps) >= self._limit:
                return False
            timestamps.append(now)
            self._windows[identity] = timestamps
            return True

    def count(self, identity: str) -> int:
        """Attempts currently inside the window for identity (no mutation)."""
        with self._lock:
            return len(self._retained(identity, self._now()))

    def retry_after(self, identity: str) -> int:
        """Whole seconds until the oldest attempt leaves the window."""
        with self._lock:
            now = self._now()
            timestamps = self._retained(identity, now)
            if not timestamps:
                return 0
            return max(1, math.ceil(self._window_seconds - (now - timestamps[0])))

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()

    def __len__(self) -> int:
        """Number of identities with a stored window."""
        with self._lock:
            return len(self._windows)
