"""Synthetic market-maker prices."""
