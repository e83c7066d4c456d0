"""Repository reference parsing."""
