"""Staging of source repositories as local working copies."""
