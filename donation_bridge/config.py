"""Donation bridge configuration."""

from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Environment-driven settings for the donation bridge.

    No env prefix: deployments already export WEBHOOK_SECRET and API_KEY.
    """

    # Shared HMAC secret for inbound webhooks. Empty = verification skipped.
    webhook_secret: str = ""
    # Credential the game server presents when polling. Empty = polling disabled.
    api_key: str = ""

    environment: str = "development"
    # Honour X-Forwarded-For; disable when the service is reachable without a proxy
    trust_forwarded_for: bool = True
    cors_origins: list[str] = ["*"]

    submission_rate_limit: int = 10
    retrieval_rate_limit: int = 60
    rate_limit_window_seconds: float = 60.0

    max_donations: int = 100
    donation_ttl_seconds: float = 300.0
    duplicate_window_seconds: float = 600.0
    max_amount: int = 100_000_000

    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000

    model_config = {"env_file": ".env", "extra": "ignore"}

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()
