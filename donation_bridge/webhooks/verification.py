"""Webhook signature verification: constant-time HMAC-SHA256.

Security contract:
- Expected signature = hex HMAC-SHA256(secret, canonical JSON of the payload)
- All comparisons go through constant_time_equals() (fixed-length digests,
  so a length mismatch is not observable through timing either)
- Never raises: missing secret, missing signature or an unserializable
  payload all verify as False
- Deployment policy (not a best practice): with no secret configured the
  pipeline skips verification entirely; see AdmissionPipeline
"""

from __future__ import annotations

import hashlib
import hmac
import json
import logging
from typing import Any

logger = logging.getLogger(__name__)

# Header names accepted for the signature, lowercase
SIGNATURE_HEADERS = ("x-webhook-signature", "x-saweria-signature")


def constant_time_equals(a: str | bytes, b: str | bytes) -> bool:
    """Compare two values in time independent of their content and length."""
    if isinstance(a, str):
        a = a.encode("utf-8")
    if isinstance(b, str):
        b = b.encode("utf-8")
    return hmac.compare_digest(hashlib.sha256(a).digest(), hashlib.sha256(b).digest())


def canonical_payload(payload: Any) -> bytes:
    """Serialize a parsed payload the way the provider signs it.

    Compact separators, keys in received order, non-ASCII left as-is.
    """
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def compute_signature(payload: Any, secret: str) -> str:
    """Hex HMAC-SHA256 of the canonical payload."""
    return hmac.new(
        secret.encode("utf-8"),
        canonical_payload(payload),
        hashlib.sha256,
    ).hexdigest()


def verify_signature(payload: Any, signature: str | None, secret: str | None) -> bool:
    """Verify a webhook signature.

    Args:
        payload: Parsed JSON body
        signature: Presented signature header value
        secret: Shared signing secret

    Returns:
        True if the signature matches
    """
    if not secret or not signature or not isinstance(signature, str):
        return False
    try:
        expected = compute_signature(payload, secret)
    except (TypeError, ValueError, RecursionError):
        logger.debug("Payload could not be canonicalized for signing")
        return False
    return constant_time_equals(expected, signature.strip().lower())


def extract_signature(headers: dict[str, str]) -> str | None:
    """Return the first signature header present (headers lowercase)."""
    for name in SIGNATURE_HEADERS:
        value = headers.get(name)
        if value:
            return value
    return None
