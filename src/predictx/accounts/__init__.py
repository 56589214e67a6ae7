"""User registration and credential checks."""
