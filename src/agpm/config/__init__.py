"""Project configuration (agpm.toml) and lock file (agpm.lock) I/O."""
