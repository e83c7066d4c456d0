"""Lock file models, resolution and verification."""
