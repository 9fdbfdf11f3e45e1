"""Shared fixtures for the donation bridge test suite."""

from __future__ import annotations

import pytest


class FakeClock:
    """Manually advanced clock for limiter, suppressor and store tests."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def donation_payload():
    """Factory for valid donation payloads."""

    def _make(donor_name: str = "Alice", amount: int = 5000, **extra):
        payload = {"donor_name": donor_name, "amount": amount}
        payload.update(extra)
        return payload

    return _make
