"""ModelKit CLI."""
