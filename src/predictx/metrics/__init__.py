"""Derived read-only metrics over market state."""
