"""Donation bridge: signed webhook intake plus a polled retrieval API."""
