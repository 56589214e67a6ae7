"""Order execution."""
