"""Format detection and artifact discovery."""
