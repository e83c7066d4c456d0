"""Lock file models."""

from dataclasses import dataclass, field, replace

LOCK_VERSION = 1


@dataclass(frozen=True)
class LockedArtifact:
    """An artifact resolved to an exact commit and content fingerprint.

    path is relative to the repository root. ref is the symbolic ref the user
    pinned, if any; sha is what it resolved to.
    """

    sha: str
    integrity: str
    path: str
    ref: str | None
    metadata: dict[str, object]

    @property
    def name(self) -> str | None:
        name = self.metadata.get("name")
        return str(name) if name is not None else None

    @property
    def description(self) -> str | None:
        description = self.metadata.get("description")
        return str(description) if description is not None else None


@dataclass(frozen=True)
class AgpmLock:
    """Lock file contents: one entry per "<source>/<artifact>" key."""

    version: int = LOCK_VERSION
    artifacts: dict[str, LockedArtifact] = field(default_factory=dict)

    def get(self, lock_key: str) -> LockedArtifact | None:
        return self.artifacts.get(lock_key)

    def with_artifact(self, lock_key: str, entry: LockedArtifact) -> "AgpmLock":
        """Return new lock with entry set (maintaining immutability)."""
        return replace(self, artifacts={**self.artifacts, lock_key: entry})

    def without_artifact(self, lock_key: str) -> "AgpmLock":
        """Return new lock without lock_key."""
        remaining = {key: value for key, value in self.artifacts.items() if key != lock_key}
        return replace(self, artifacts=remaining)
