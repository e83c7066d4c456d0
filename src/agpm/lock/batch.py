"""Batch install/update over every declared reference.

Per-reference failures (ResolutionError) are recorded and the batch moves on;
partial success is normal. Repository and filesystem failures propagate.
"""

import logging
from dataclasses import dataclass, field

from agpm.errors import ResolutionError
from agpm.lock.models import AgpmLock, LockedArtifact
from agpm.lock.resolver import LockResolver, UpdateOutcome
from agpm.sources.references import ArtifactRef, parse_artifact_ref, parse_collection_ref

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolutionFailure:
    """A declared reference that could not be resolved."""

    reference: str
    error: ResolutionError


@dataclass(frozen=True)
class ResolvedArtifact:
    """A declared reference and its lock entry.

    was_resolved is False when an existing lock entry was reused as-is.
    """

    ref: ArtifactRef
    entry: LockedArtifact
    was_resolved: bool


@dataclass(frozen=True)
class InstallResult:
    lock: AgpmLock
    resolved: list[ResolvedArtifact] = field(default_factory=list)
    failures: list[ResolutionFailure] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def lock_changed(self) -> bool:
        return any(item.was_resolved for item in self.resolved)


@dataclass(frozen=True)
class UpdateResult:
    lock: AgpmLock
    outcomes: list[UpdateOutcome] = field(default_factory=list)
    failures: list[ResolutionFailure] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def changed(self) -> list[UpdateOutcome]:
        return [outcome for outcome in self.outcomes if outcome.changed]

    @property
    def lock_changed(self) -> bool:
        return any(outcome.entry != outcome.previous for outcome in self.outcomes)


def collect_artifact_refs(
    resolver: LockResolver,
    *,
    artifacts: list[str],
    collections: list[str],
    failures: list[ResolutionFailure],
    warnings: list[str],
) -> list[ArtifactRef]:
    """Declared artifact references plus expanded collection members.

    Duplicates (by lock key) keep the first occurrence, so an explicitly
    declared, possibly pinned, artifact wins over the same artifact pulled in
    by a collection.
    """
    refs: list[ArtifactRef] = []
    seen_keys: set[str] = set()

    def _add(ref: ArtifactRef) -> None:
        if ref.lock_key in seen_keys:
            return
        seen_keys.add(ref.lock_key)
        refs.append(ref)

    for reference in artifacts:
        try:
            _add(parse_artifact_ref(reference))
        except ResolutionError as e:
            failures.append(ResolutionFailure(reference=reference, error=e))

    for reference in collections:
        try:
            collection_ref = parse_collection_ref(reference)
            if collection_ref.ignored_ref is not None:
                message = (
                    f"Ignoring ref '{collection_ref.ignored_ref}' on collection {collection_ref}:"
                    " collections can't be pinned"
                )
                logger.warning(message)
                warnings.append(message)
            for member in resolver.expand_collection(collection_ref):
                _add(member)
        except ResolutionError as e:
            failures.append(ResolutionFailure(reference=reference, error=e))

    return refs


def install_all(
    resolver: LockResolver,
    lock: AgpmLock,
    *,
    artifacts: list[str],
    collections: list[str],
    force: bool,
) -> InstallResult:
    """Ensure every declared artifact has a lock entry.

    Existing entries are reused unless force is set.
    """
    failures: list[ResolutionFailure] = []
    warnings: list[str] = []
    refs = collect_artifact_refs(
        resolver,
        artifacts=artifacts,
        collections=collections,
        failures=failures,
        warnings=warnings,
    )

    resolved: list[ResolvedArtifact] = []
    for ref in refs:
        existing = lock.get(ref.lock_key)
        try:
            entry = resolver.resolve(ref, lock, force=force)
        except ResolutionError as e:
            logger.debug("failed to resolve %s: %s", ref, e)
            failures.append(ResolutionFailure(reference=str(ref), error=e))
            continue
        was_resolved = entry is not existing
        if was_resolved:
            lock = lock.with_artifact(ref.lock_key, entry)
        resolved.append(ResolvedArtifact(ref=ref, entry=entry, was_resolved=was_resolved))

    return InstallResult(lock=lock, resolved=resolved, failures=failures, warnings=warnings)


def matches_filter(ref: ArtifactRef, only: str) -> bool:
    """Whether ref is selected by a user-supplied name, lock key or full reference."""
    return only in (ref.artifact_name, ref.lock_key, str(ref))


def update_all(
    resolver: LockResolver,
    lock: AgpmLock,
    *,
    artifacts: list[str],
    collections: list[str],
    only: str | None,
) -> UpdateResult:
    """Re-resolve declared artifacts (optionally just one) to their latest commits.

    Collection members are included, so a collection picks up artifacts that
    were added to it upstream.
    """
    failures: list[ResolutionFailure] = []
    warnings: list[str] = []
    refs = collect_artifact_refs(
        resolver,
        artifacts=artifacts,
        collections=collections,
        failures=failures,
        warnings=warnings,
    )
    if only is not None:
        refs = [ref for ref in refs if matches_filter(ref, only)]

    outcomes: list[UpdateOutcome] = []
    for ref in refs:
        try:
            outcome = resolver.update(ref, lock)
        except ResolutionError as e:
            failures.append(ResolutionFailure(reference=str(ref), error=e))
            continue
        if outcome.entry != outcome.previous:
            lock = lock.with_artifact(outcome.lock_key, outcome.entry)
        outcomes.append(outcome)

    return UpdateResult(lock=lock, outcomes=outcomes, failures=failures, warnings=warnings)
