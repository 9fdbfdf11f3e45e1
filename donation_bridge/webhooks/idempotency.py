"""Webhook idempotency: in-memory duplicate suppression.

Security contract:
- Keys expire D_dup (10 min) after first sight, independent of store TTL
- Duplicates are acknowledged with 200 (providers retry on errors)
- Expiry is an explicit sweep on every access, no timers
- Key = SHA256(donor_name, amount, provider time value); the storage id is
  generated only after this check so it cannot be part of the key
"""

from __future__ import annotations

import hashlib
import json
import logging
import threading
import time
from typing import Any, Callable

logger = logging.getLogger(__name__)

_DEDUP_WINDOW_SECONDS = 600.0


def make_donation_key(donor_name: str, amount: Any, created_at: Any = None) -> str:
    """Deterministic dedup key for a submission.

    created_at is the provider-supplied time value when the payload has one.
    Without it the key covers (donor_name, amount) and the suppressor's own
    window is the time horizon.
    """
    parts = [donor_name.strip(), repr(float(amount))]
    if created_at not in (None, ""):
        parts.append(str(created_at)[:64])
    canonical = json.dumps(parts, separators=(",", ":"))
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


class DuplicateSuppressor:
    """Short-horizon set of recently admitted submission keys."""

    def __init__(
        self,
        window_seconds: float = _DEDUP_WINDOW_SECONDS,
        clock: Callable[[], float] | None = None,
    ):
        self._window_seconds = window_seconds
        self._clock = clock
        self._expiry: dict[str, float] = {}  # key -> expires_at
        self._lock = threading.Lock()

    def _now(self) -> float:
        return self._clock() if self._clock else time.time()

    def _sweep(self, now: float) -> int:
        expired = [k for k, exp in self._expiry.items() if exp <= now]
        for k in expired:
            del self._expiry[k]
        return len(expired)

    def sweep(self) -> int:
        """Drop expired keys. Returns the number removed."""
        with self._lock:
            return self._sweep(self._now())

    def seen_and_record(self, key: str) -> bool:
        """Return True if key was already recorded; record it either way.

        A repeat sighting does not extend the first expiry.
        """
        with self._lock:
            now = self._now()
            self._sweep(now)
            if key in self._expiry:
                logger.info("Duplicate submission suppressed: %s", key[:12])
                return True
            self._expiry[key] = now + self._window_seconds
            return False

    def discard(self, key: str) -> None:
        """Forget key, e.g. when the submission it guarded was not admitted."""
        with self._lock:
            self._expiry.pop(key, None)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            self._sweep(self._now())
            return key in self._expiry

    def __len__(self) -> int:
        with self._lock:
            self._sweep(self._now())
            return len(self._expiry)
