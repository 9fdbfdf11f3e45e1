"""Donation store and the polled retrieval API."""
