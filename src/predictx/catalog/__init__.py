"""Market catalog seeding."""
