"""Utility helpers for the payment monitor."""
