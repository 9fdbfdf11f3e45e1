"""HTTP security helpers: client origin resolution and CORS.

The webhook provider and the game server both call from outside the
browser, so CORS is permissive; it only matters for the dev test form.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from slowapi.util import get_remote_address

from donation_bridge.config import Settings
from donation_bridge.webhooks.verification import SIGNATURE_HEADERS

logger = logging.getLogger(__name__)

# Per-endpoint preflight answers
WEBHOOK_CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, X-Webhook-Signature, X-Saweria-Signature",
}
DONATIONS_CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, X-Api-Key",
}


def get_client_origin(request: Request, trust_forwarded_for: bool = True) -> str:
    """Normalized client address used as the submission limiter key."""
    if trust_forwarded_for:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            first = forwarded.split(",")[0].strip()
            if first:
                return first.lower()
    return get_remote_address(request)


def install_cors(app: FastAPI, settings: Settings) -> None:
    """Install CORS middleware for cross-origin (browser) callers."""
    allow_headers = ["Content-Type", "X-Api-Key", *(h.title() for h in SIGNATURE_HEADERS)]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=allow_headers,
    )
    logger.debug("CORS installed for origins %s", settings.cors_origins)
