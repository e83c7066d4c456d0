"""Data models for artifact discovery."""

from dataclasses import dataclass, field
from typing import Literal

# Manifest convention a repository uses; "unknown" falls back to the simple strategy
RepoFormat = Literal["claude-marketplace", "claude-plugin", "simple", "unknown"]

# Kind of artifact; discovery currently yields skills only
ArtifactType = Literal["skill", "command", "hook"]


@dataclass(frozen=True)
class DiscoveredArtifact:
    """An artifact published by a repository.

    path is relative to the discovery root (repository root or the source's
    subdir) with POSIX separators.
    """

    name: str
    description: str | None
    artifact_type: ArtifactType
    path: str
    format: RepoFormat
    metadata: dict[str, object] | None


@dataclass(frozen=True)
class DiscoveredCollection:
    """A named group of artifacts published together; never nested."""

    name: str
    description: str | None
    artifacts: list[str]
    path: str
    metadata: dict[str, object] | None = None


@dataclass(frozen=True)
class DiscoveryResult:
    """Everything a repository publishes, tagged with the format used."""

    artifacts: list[DiscoveredArtifact] = field(default_factory=list)
    collections: list[DiscoveredCollection] = field(default_factory=list)
    format: RepoFormat = "unknown"

    def find_artifact(self, name: str) -> DiscoveredArtifact | None:
        for artifact in self.artifacts:
            if artifact.name == name:
                return artifact
        return None

    def find_collection(self, name: str) -> DiscoveredCollection | None:
        for collection in self.collections:
            if collection.name == name:
                return collection
        return None
