"""Donation data models.

Security contract:
- id is server-generated (16 random bytes, hex) and never derived from input
- processed is internal bookkeeping and never leaves the process
- donor_name/message are stored trimmed; validation happens before admission
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass
from typing import Any


def generate_donation_id() -> str:
    """Return a fresh 32-char hex identifier."""
    return secrets.token_hex(16)


@dataclass
class Donation:
    """An admitted donation held in the in-memory store."""

    id: str
    donor_name: str
    amount: int | float
    message: str = ""
    accepted_at: float = 0.0  # time.time() at admission
    processed: bool = False

    def mark_processed(self) -> None:
        self.processed = True

    def to_public(self) -> dict[str, Any]:
        """Projection returned to the polling consumer.

        timestamp is epoch milliseconds, which is what game-server
        clients already parse.
        """
        return {
            "id": self.id,
            "donor_name": self.donor_name,
            "amount": self.amount,
            "message": self.message,
            "timestamp": int(self.accepted_at * 1000),
        }


def create_donation(data: dict[str, Any], accepted_at: float) -> Donation:
    """Build a Donation from a validated payload."""
    amount = data["amount"]
    if isinstance(amount, float) and amount.is_integer():
        amount = int(amount)
    message = data.get("message") or ""
    return Donation(
        id=generate_donation_id(),
        donor_name=data["donor_name"].strip(),
        amount=amount,
        message=message.strip(),
        accepted_at=accepted_at,
    )
