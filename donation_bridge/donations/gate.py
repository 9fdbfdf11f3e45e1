"""Retrieval gate: API-key check, poll throttle, then take-and-mark.

Order matters: the credential is checked before the limiter, so a wrong
key never lands in (or drains) the bucket of a legitimate poller.
"""

from __future__ import annotations

import logging
from typing import Any

from donation_bridge.donations.store import DonationStore
from donation_bridge.errors import AuthenticationFailure, RateLimited
from donation_bridge.security.rate_limit import SlidingWindowLimiter, credential_identity
from donation_bridge.webhooks.verification import constant_time_equals

logger = logging.getLogger(__name__)


class RetrievalGate:
    """Gates polling access to the donation store."""

    def __init__(self, api_key: str, limiter: SlidingWindowLimiter, store: DonationStore):
        self._api_key = api_key
        self._limiter = limiter
        self._store = store

    def authenticate(self, credential: str | None) -> bool:
        """Constant-time check of a presented credential."""
        if not self._api_key or not credential:
            return False
        return constant_time_equals(credential, self._api_key)

    def retrieve(self, credential: str | None) -> list[dict[str, Any]]:
        """Return unprocessed donations in public shape, marking them processed.

        Raises:
            AuthenticationFailure: missing or wrong credential
            RateLimited: the credential's poll quota is spent
        """
        if not self.authenticate(credential):
            logger.warning("Invalid API key attempt")
            raise AuthenticationFailure("Unauthorized")

        identity = credential_identity(credential)
        if not self._limiter.allow(identity):
            logger.warning("Poll rate limit exceeded for identity %s", identity)
            raise RateLimited(retry_after=self._limiter.retry_after(identity))

        donations = self._store.take_unprocessed()
        if donations:
            logger.info("Sent %d donations to poller %s", len(donations), identity)
        return [d.to_public() for d in donations]
