"""Bot load simulation against an in-memory exchange."""
