"""Ledger store and rows."""
