"""Command-line interface for agpm."""
