"""Donation payload validation.

Pure checks only; trimming happens at admission, after validation passes.
"""

from __future__ import annotations

import math
import re
from typing import Any

MAX_DONOR_NAME_LENGTH = 50
MAX_MESSAGE_LENGTH = 200
MAX_AMOUNT = 100_000_000  # smallest currency units

_DONOR_NAME_RE = re.compile(r"[A-Za-z0-9 _-]+")


def _valid_donor_name(value: Any) -> bool:
    # Must still name someone once trimmed at admission
    if not isinstance(value, str) or not value.strip():
        return False
    if len(value) > MAX_DONOR_NAME_LENGTH:
        return False
    return _DONOR_NAME_RE.fullmatch(value) is not None


def _valid_amount(value: Any, max_amount: int) -> bool:
    # bool is an int subclass; True is not a donation
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    if isinstance(value, float) and not math.isfinite(value):
        return False
    return 0 < value <= max_amount


def _valid_message(value: Any) -> bool:
    if value is None:
        return True
    return isinstance(value, str) and len(value) <= MAX_MESSAGE_LENGTH


def validate_donation(data: Any, max_amount: int = MAX_AMOUNT) -> bool:
    """Return True if data is an acceptable donation payload.

    Rejects when data is not a JSON object, donor_name is missing, blank, too
    long or has characters outside [A-Za-z0-9 _-], amount is missing, non-numeric,
    non-positive or above max_amount, or message is longer than 200 chars.
    """
    if not isinstance(data, dict):
        return False
    if not _valid_donor_name(data.get("donor_name")):
        return False
    if not _valid_amount(data.get("amount"), max_amount):
        return False
    return _valid_message(data.get("message"))
