"""Built-in bot strategies."""
