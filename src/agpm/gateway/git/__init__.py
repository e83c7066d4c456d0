"""Git gateway: abstract interface plus real and fake implementations."""
