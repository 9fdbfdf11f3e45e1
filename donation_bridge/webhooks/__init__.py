"""Inbound donation webhooks.

Each submission is signature-verified, rate limited per origin,
validated, deduplicated, then admitted to the donation store.
"""
