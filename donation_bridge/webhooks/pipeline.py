"""Admission pipeline for inbound donation webhooks.

Stages, first failure wins and nothing is admitted:
1. Signature (skipped when no secret is configured)
2. Per-origin rate limit
3. Payload validation
4. Duplicate suppression
5. Store admit (append, FIFO evict, TTL sweep)

Validation runs before duplicate suppression because the dedup key is
built from validated fields; an invalid payload never occupies a key.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from donation_bridge.config import Settings
from donation_bridge.donations.store import DonationStore
from donation_bridge.errors import (
    AuthenticationFailure,
    DuplicateSuppressed,
    RateLimited,
    ValidationFailure,
)
from donation_bridge.models import Donation
from donation_bridge.security.rate_limit import SlidingWindowLimiter
from donation_bridge.webhooks.idempotency import DuplicateSuppressor, make_donation_key
from donation_bridge.webhooks.validation import validate_donation
from donation_bridge.webhooks.verification import verify_signature

logger = logging.getLogger(__name__)


@dataclass
class AdmissionResult:
    """A donation that made it through every stage."""

    donation: Donation


class AdmissionPipeline:
    """Runs a submission through every admission check."""

    def __init__(
        self,
        settings: Settings,
        limiter: SlidingWindowLimiter,
        suppressor: DuplicateSuppressor,
        store: DonationStore,
    ):
        self._settings = settings
        self._limiter = limiter
        self._suppressor = suppressor
        self._store = store

    def submit(self, payload: Any, signature: str | None, origin: str) -> AdmissionResult:
        """Admit a submission or raise the first failing check's error.

        Raises:
            AuthenticationFailure: secret configured and signature bad/missing
            RateLimited: origin over its submission quota
            ValidationFailure: payload rejected by validate_donation
            DuplicateSuppressed: same submission admitted within the window
        """
        secret = self._settings.webhook_secret
        if secret and not verify_signature(payload, signature, secret):
            logger.warning("Invalid webhook signature from %s", origin)
            raise AuthenticationFailure("Invalid signature")

        if not self._limiter.allow(origin):
            logger.warning("Rate limit exceeded for origin: %s", origin)
            raise RateLimited(retry_after=self._limiter.retry_after(origin))

        if not validate_donation(payload, max_amount=self._settings.max_amount):
            logger.warning("Invalid donation data from %s", origin)
            raise ValidationFailure()

        key = make_donation_key(payload["donor_name"], payload["amount"], payload.get("created_at"))
        if self._suppressor.seen_and_record(key):
            raise DuplicateSuppressed()

        try:
            donation = self._store.admit(payload)
        except Exception:
            # Not admitted, so the provider's retry must not look like a duplicate
            self._suppressor.discard(key)
            raise
        logger.info(
            "New donation received: id=%s donor=%s amount=%s",
            donation.id,
            donation.donor_name,
            donation.amount,
        )
        return AdmissionResult(donation=donation)
