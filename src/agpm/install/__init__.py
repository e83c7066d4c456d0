"""Copying locked artifacts into agent tool directories."""
