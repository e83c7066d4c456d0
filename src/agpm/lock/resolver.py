"""Resolve declared artifact references into lock entries.

For each reference the resolver either reuses the existing lock entry or
drives stager -> discovery -> cache to produce a new one:

1. stage the source repository (clone or fetch)
2. resolve the pinned ref (or HEAD) and get its cache snapshot
3. discover the snapshot's artifacts
4. find the artifact by name
5. fingerprint the artifact directory
"""

import logging
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from agpm.cache.integrity import compute_directory_integrity
from agpm.discovery.discover import discover_source
from agpm.discovery.models import DiscoveredArtifact, DiscoveryResult
from agpm.errors import ArtifactNotFoundError, CollectionNotFoundError
from agpm.lock.models import AgpmLock, LockedArtifact
from agpm.repos.stager import DEFAULT_REF, CachedCheckout, RepoInfo, RepositoryStager
from agpm.sources.parsing import Source, parse_source_string
from agpm.sources.references import ArtifactRef, CollectionRef

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UpdateOutcome:
    """Result of re-resolving one artifact against its source's latest commit."""

    lock_key: str
    entry: LockedArtifact
    previous: LockedArtifact | None

    @property
    def changed(self) -> bool:
        """True when the artifact now resolves to a different commit."""
        return self.previous is None or self.previous.sha != self.entry.sha


def _repo_relative_path(subdir: str | None, artifact_path: str) -> str:
    if not subdir:
        return artifact_path
    return (PurePosixPath(subdir) / artifact_path).as_posix()


def _lock_metadata(artifact: DiscoveredArtifact) -> dict[str, object]:
    metadata: dict[str, object] = {"name": artifact.name}
    if artifact.description is not None:
        metadata["description"] = artifact.description
    return metadata


class LockResolver:
    """Turns declared references into LockedArtifact entries.

    A resolver instance represents a single run: staging is done at most once
    per source and discovery at most once per (source, commit).
    """

    def __init__(self, *, stager: RepositoryStager, sources: list[Source]) -> None:
        self._stager = stager
        self._sources = {source.name: source for source in sources}
        self._staged: dict[str, RepoInfo] = {}
        self._discovered: dict[tuple[str, str], DiscoveryResult] = {}

    def find_source(self, source_name: str) -> Source:
        """Configured source by name, else the name parsed as a source reference.

        Raises:
            InvalidSourceFormatError: If the name is not configured and not parseable
        """
        configured = self._sources.get(source_name)
        if configured is not None:
            return configured
        return parse_source_string(source_name)

    def _stage(self, source: Source) -> RepoInfo:
        info = self._staged.get(source.name)
        if info is None:
            info = self._stager.ensure(source)
            self._staged[source.name] = info
        return info

    def _discover(self, source: Source, checkout: CachedCheckout) -> DiscoveryResult:
        key = (source.name, checkout.sha)
        result = self._discovered.get(key)
        if result is None:
            result = discover_source(checkout.cache_path, source)
            self._discovered[key] = result
        return result

    def _checkout(self, source_name: str, ref: str | None) -> tuple[Source, CachedCheckout]:
        source = self.find_source(source_name)
        info = self._stage(source)
        checkout = self._stager.checkout_and_cache(info.path, ref or DEFAULT_REF)
        return source, checkout

    def _build_entry(
        self, ref: ArtifactRef, source: Source, checkout: CachedCheckout
    ) -> LockedArtifact:
        result = self._discover(source, checkout)
        artifact = result.find_artifact(ref.artifact_name)
        if artifact is None:
            raise ArtifactNotFoundError(
                ref.source_name, ref.artifact_name, [a.name for a in result.artifacts]
            )

        path = _repo_relative_path(source.subdir, artifact.path)
        integrity = compute_directory_integrity(checkout.cache_path / path)
        logger.debug("resolved %s to %s (%s)", ref, checkout.sha, integrity)
        return LockedArtifact(
            sha=checkout.sha,
            integrity=integrity,
            path=path,
            ref=ref.ref,
            metadata=_lock_metadata(artifact),
        )

    def resolve(self, ref: ArtifactRef, lock: AgpmLock, *, force: bool = False) -> LockedArtifact:
        """Lock entry for ref: the existing one unless missing, re-pinned or forced.

        An entry recorded for a different pinned ref no longer describes the
        declaration and is resolved again.

        Raises:
            ResolutionError: If this reference can't be resolved
            RepositoryUnavailableError: If the source can't be cloned or fetched
        """
        existing = lock.get(ref.lock_key)
        if existing is not None and existing.ref == ref.ref and not force:
            return existing

        source, checkout = self._checkout(ref.source_name, ref.ref)
        return self._build_entry(ref, source, checkout)

    def update(self, ref: ArtifactRef, lock: AgpmLock) -> UpdateOutcome:
        """Re-resolve ref against the latest state of its pinned ref (or HEAD).

        The existing entry is kept when the commit is unchanged.
        """
        existing = lock.get(ref.lock_key)
        source, checkout = self._checkout(ref.source_name, ref.ref)

        if existing is not None and existing.sha == checkout.sha:
            if existing.ref == ref.ref:
                return UpdateOutcome(lock_key=ref.lock_key, entry=existing, previous=existing)

        entry = self._build_entry(ref, source, checkout)
        return UpdateOutcome(lock_key=ref.lock_key, entry=entry, previous=existing)

    def expand_collection(self, collection_ref: CollectionRef) -> list[ArtifactRef]:
        """Member artifact references of a collection, as published at HEAD.

        Raises:
            CollectionNotFoundError: If the source publishes no such collection
        """
        source, checkout = self._checkout(collection_ref.source_name, None)
        result = self._discover(source, checkout)
        collection = result.find_collection(collection_ref.collection_name)
        if collection is None:
            raise CollectionNotFoundError(
                collection_ref.source_name,
                collection_ref.collection_name,
                [c.name for c in result.collections],
            )
        return [
            ArtifactRef(source_name=collection_ref.source_name, artifact_name=name, ref=None)
            for name in collection.artifacts
        ]

    def discover(self, source_name: str, ref: str | None = None) -> DiscoveryResult:
        """Discovery result for a source at ref (or HEAD)."""
        source, checkout = self._checkout(source_name, ref)
        return self._discover(source, checkout)

    def materialize(self, source_name: str, entry: LockedArtifact) -> Path:
        """Directory of a locked artifact inside its cache snapshot.

        The source is only staged when the locked commit isn't cached yet.
        """
        snapshot = self._stager.cached_snapshot(entry.sha)
        if snapshot is None:
            _, checkout = self._checkout(source_name, entry.sha)
            snapshot = checkout.cache_path
        return snapshot / entry.path
