"""Donations API routes, polled by the game server."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response

from donation_bridge.errors import BridgeError, InternalFailure
from donation_bridge.security.middleware import DONATIONS_CORS_HEADERS

logger = logging.getLogger(__name__)

DONATIONS_PATH = "/api/donations"


def register_donation_routes(app: FastAPI) -> None:
    """Register the polling endpoint on the FastAPI app."""

    @app.get(DONATIONS_PATH)
    async def list_new_donations(request: Request):
        """Return donations not yet delivered, marking them delivered.

        Credential comes from the X-Api-Key header, or ?key= for clients
        that cannot set headers.
        """
        bridge = request.app.state.bridge
        credential = request.headers.get("x-api-key") or request.query_params.get("key")
        try:
            donations = bridge.gate.retrieve(credential)
        except BridgeError:
            raise
        except Exception:
            logger.exception("Donations API error")
            raise InternalFailure()

        return JSONResponse(
            {"success": True, "count": len(donations), "donations": donations},
            headers=DONATIONS_CORS_HEADERS,
        )

    @app.options(DONATIONS_PATH)
    async def list_new_donations_preflight():
        return Response(status_code=200, headers=DONATIONS_CORS_HEADERS)
