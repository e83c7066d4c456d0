"""Locations of agpm's global on-disk stores."""

import os
from dataclasses import dataclass
from pathlib import Path

AGPM_HOME_ENV = "AGPM_HOME"

CONFIG_FILENAME = "agpm.toml"
LOCK_FILENAME = "agpm.lock"

# JSON files written by earlier agpm releases; detected but never read
LEGACY_CONFIG_FILENAME = "agpm.json"
LEGACY_LOCK_FILENAME = "agpm-lock.json"


@dataclass(frozen=True)
class AgpmPaths:
    """Root of the shared stores: one working copy per repository, one snapshot per commit."""

    root: Path

    @property
    def repos_dir(self) -> Path:
        return self.root / "repos"

    @property
    def cache_dir(self) -> Path:
        return self.root / "cache"

    @classmethod
    def from_environment(cls) -> "AgpmPaths":
        """Use $AGPM_HOME when set, else ~/.agpm."""
        override = os.environ.get(AGPM_HOME_ENV)
        if override:
            return cls(root=Path(override).expanduser())
        return cls(root=Path.home() / ".agpm")
