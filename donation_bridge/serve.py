"""FastAPI application factory and entry point.

create_app() wires one set of state objects (store, limiters, suppressor)
per app instance, so tests get isolated state by building a fresh app.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from donation_bridge.config import Settings, get_settings
from donation_bridge.devtools import register_dev_routes
from donation_bridge.donations.gate import RetrievalGate
from donation_bridge.donations.routes import register_donation_routes
from donation_bridge.donations.store import DonationStore
from donation_bridge.errors import BridgeError, RateLimited
from donation_bridge.security.middleware import install_cors
from donation_bridge.security.rate_limit import SlidingWindowLimiter
from donation_bridge.webhooks.handlers import register_webhook_routes
from donation_bridge.webhooks.idempotency import DuplicateSuppressor
from donation_bridge.webhooks.pipeline import AdmissionPipeline

logger = logging.getLogger(__name__)

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_HTTP_ERROR_MESSAGES = {
    404: "Not found",
    405: "Method not allowed",
}


@dataclass
class BridgeState:
    """Mutable state owned by one app instance."""

    settings: Settings
    store: DonationStore
    submission_limiter: SlidingWindowLimiter
    retrieval_limiter: SlidingWindowLimiter
    suppressor: DuplicateSuppressor
    pipeline: AdmissionPipeline
    gate: RetrievalGate


def build_state(settings: Settings) -> BridgeState:
    """Construct the store, limiters and pipeline from settings."""
    store = DonationStore(
        max_size=settings.max_donations,
        ttl_seconds=settings.donation_ttl_seconds,
    )
    submission_limiter = SlidingWindowLimiter(
        settings.submission_rate_limit, settings.rate_limit_window_seconds
    )
    retrieval_limiter = SlidingWindowLimiter(
        settings.retrieval_rate_limit, settings.rate_limit_window_seconds
    )
    suppressor = DuplicateSuppressor(settings.duplicate_window_seconds)
    return BridgeState(
        settings=settings,
        store=store,
        submission_limiter=submission_limiter,
        retrieval_limiter=retrieval_limiter,
        suppressor=suppressor,
        pipeline=AdmissionPipeline(settings, submission_limiter, suppressor, store),
        gate=RetrievalGate(settings.api_key, retrieval_limiter, store),
    )


async def bridge_error_handler(request: Request, exc: BridgeError) -> JSONResponse:
    """Render a BridgeError. Duplicates are rendered as success."""
    if exc.status_code == 200:
        return JSONResponse({"success": True, "message": exc.message})
    headers = None
    if isinstance(exc, RateLimited):
        headers = {"Retry-After": str(exc.retry_after)}
    return JSONResponse({"error": exc.message}, status_code=exc.status_code, headers=headers)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Routing errors (404/405) in the same {error: ...} shape."""
    message = _HTTP_ERROR_MESSAGES.get(exc.status_code) or str(exc.detail)
    return JSONResponse(
        {"error": message},
        status_code=exc.status_code,
        headers=getattr(exc, "headers", None),
    )


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the donation bridge app."""
    settings = settings or get_settings()
    app = FastAPI(title="Donation Bridge")
    app.state.bridge = build_state(settings)

    if not settings.webhook_secret:
        logger.warning("WEBHOOK_SECRET not set, webhook signatures will not be verified")
    if not settings.api_key:
        logger.warning("API_KEY not set, donation polling will reject every request")

    register_webhook_routes(app)
    register_donation_routes(app)
    register_dev_routes(app)

    @app.get("/health")
    async def health():
        return {"status": "ok", "donations": len(app.state.bridge.store)}

    app.add_exception_handler(BridgeError, bridge_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    install_cors(app, settings)
    return app


def configure_logging(level: str = "INFO") -> None:
    """Set the root log format and level once for the process."""
    logging.basicConfig(level=level.upper(), format=_LOG_FORMAT)


def main() -> None:
    import uvicorn

    settings = get_settings()
    configure_logging(settings.log_level)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
