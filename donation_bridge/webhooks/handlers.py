"""Webhook HTTP handlers: FastAPI routes for inbound donation webhooks.

Each submission:
1. Reads the raw body and parses JSON (unparseable -> treated as invalid)
2. Resolves the client origin and the signature header
3. Runs the AdmissionPipeline
4. Returns 200 with the new donation id

Security contract:
- Never return internal error details to the caller
- Duplicates get the same 200 success shape as fresh donations
- Log every outcome for the audit trail
"""

from __future__ import annotations

import json
import logging
import time

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response

from donation_bridge.errors import BridgeError, InternalFailure
from donation_bridge.security.middleware import WEBHOOK_CORS_HEADERS, get_client_origin
from donation_bridge.webhooks.verification import extract_signature

logger = logging.getLogger(__name__)

WEBHOOK_PATH = "/api/webhook"


def _log_webhook(request: Request, origin: str, status: str, donation_id: str = "") -> None:
    """Audit log for webhook activity."""
    counts: dict[str, int] = request.app.state.webhook_counts
    counts[status] = counts.get(status, 0) + 1
    logger.info(
        "WEBHOOK_AUDIT origin=%s status=%s id=%s count=%d",
        origin,
        status,
        donation_id or "-",
        counts[status],
    )


async def _handle_webhook(request: Request) -> JSONResponse:
    """Admit one donation webhook.

    Pipeline errors propagate as BridgeError and are rendered by the
    exception handlers installed in serve.create_app().
    """
    start = time.time()
    bridge = request.app.state.bridge
    origin = "unknown"

    try:
        origin = get_client_origin(request, bridge.settings.trust_forwarded_for)
        body = await request.body()
        headers = {k.lower(): v for k, v in request.headers.items()}

        try:
            payload = json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError, RecursionError):
            # Falls through to signature/validation failure
            payload = None

        result = bridge.pipeline.submit(payload, extract_signature(headers), origin)
    except BridgeError as exc:
        _log_webhook(request, origin, type(exc).__name__)
        raise
    except Exception:
        logger.exception("Webhook error from %s", origin)
        _log_webhook(request, origin, "internal_failure")
        raise InternalFailure()

    donation = result.donation
    _log_webhook(request, origin, "admitted", donation.id)
    elapsed_ms = (time.time() - start) * 1000
    logger.debug("Webhook processed in %.1fms", elapsed_ms)

    return JSONResponse(
        {
            "success": True,
            "message": "Donation received",
            "donation_id": donation.id,
        },
        status_code=200,
        headers=WEBHOOK_CORS_HEADERS,
    )


def register_webhook_routes(app: FastAPI) -> None:
    """Register the webhook endpoint on the FastAPI app."""
    app.state.webhook_counts = {}

    @app.post(WEBHOOK_PATH)
    async def donation_webhook(request: Request):
        """Receive a donation webhook (signature-verified when a secret is set)."""
        return await _handle_webhook(request)

    @app.options(WEBHOOK_PATH)
    async def donation_webhook_preflight():
        return Response(status_code=200, headers=WEBHOOK_CORS_HEADERS)

    logger.info("Webhook routes registered: %s", WEBHOOK_PATH)
