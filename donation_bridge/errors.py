"""Admission and retrieval error hierarchy.

Pipeline stages raise these instead of returning status tuples so the
exception handlers in ``serve.py`` can map them to HTTP responses in one
place. Messages are public: they end up in the response body verbatim.
"""

from __future__ import annotations


class BridgeError(Exception):
    """Base for all bridge errors."""

    def __init__(self, message: str = "Internal server error", *, status_code: int = 500):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class AuthenticationFailure(BridgeError):
    """Bad webhook signature or retrieval credential (401)."""

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message, status_code=401)


class RateLimited(BridgeError):
    """Identity exceeded its sliding-window quota (429)."""

    def __init__(self, message: str = "Too many requests", *, retry_after: int = 60):
        super().__init__(message, status_code=429)
        self.retry_after = retry_after


class ValidationFailure(BridgeError):
    """Submitted donation payload failed validation (400)."""

    def __init__(self, message: str = "Invalid donation data"):
        super().__init__(message, status_code=400)


class DuplicateSuppressed(BridgeError):
    """Submission was already admitted recently.

    Not a client error: it is answered with a success body so a retrying
    sender cannot tell that detection happened.
    """

    def __init__(self, message: str = "Duplicate donation ignored"):
        super().__init__(message, status_code=200)


class InternalFailure(BridgeError):
    """Unexpected fault caught at the route boundary (500)."""

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message, status_code=500)
