"""Content-addressed snapshot cache and integrity fingerprints."""
