"""Stripe failed-payment monitor: webhook ingestion and notification fan-out."""

__version__ = "0.1.0"
