"""Declared artifact and collection reference strings.

Artifact references look like ``<sourceName>/<artifactName>[@<ref>]`` and
collection references like ``<sourceName>/<collectionName>``. Source names
usually contain a slash themselves ("owner/repo"), so the artifact name is
whatever follows the last slash.
"""

from dataclasses import dataclass

from agpm.errors import InvalidReferenceError


@dataclass(frozen=True)
class ArtifactRef:
    """A parsed declared artifact reference."""

    source_name: str
    artifact_name: str
    ref: str | None

    @property
    def lock_key(self) -> str:
        """Key of the lock entry; the pinned ref never appears in it."""
        return f"{self.source_name}/{self.artifact_name}"

    def __str__(self) -> str:
        return format_artifact_ref(self.source_name, self.artifact_name, self.ref)


@dataclass(frozen=True)
class CollectionRef:
    """A parsed collection reference.

    ignored_ref holds any ``@ref`` suffix the user supplied; collections are
    never pinned, so callers report it as a warning.
    """

    source_name: str
    collection_name: str
    ignored_ref: str | None

    def __str__(self) -> str:
        return f"{self.source_name}/{self.collection_name}"


def format_artifact_ref(source_name: str, artifact_name: str, ref: str | None) -> str:
    base = f"{source_name}/{artifact_name}"
    if ref is None:
        return base
    return f"{base}@{ref}"


def _split_name(reference: str, head: str) -> tuple[str, str]:
    source_name, slash, name = head.rpartition("/")
    if not slash or not source_name or not name:
        raise InvalidReferenceError(reference, "expected <source>/<name>")
    return source_name, name


def parse_artifact_ref(reference: str) -> ArtifactRef:
    """Parse ``<source>/<artifact>[@<ref>]``.

    The ref is split off at the first "@", so refs may contain slashes
    (e.g. "owner/repo/pdf@feature/x").

    Raises:
        InvalidReferenceError: If the reference has no source or artifact part,
            or an empty ref after "@"
    """
    head, at, ref = reference.strip().partition("@")
    if at and not ref:
        raise InvalidReferenceError(reference, "empty ref after '@'")
    source_name, artifact_name = _split_name(reference, head)
    return ArtifactRef(
        source_name=source_name,
        artifact_name=artifact_name,
        ref=ref if at else None,
    )


def parse_collection_ref(reference: str) -> CollectionRef:
    """Parse ``<source>/<collection>``, keeping any ``@ref`` aside.

    Raises:
        InvalidReferenceError: If the reference has no source or collection part
    """
    head, at, ref = reference.strip().partition("@")
    source_name, collection_name = _split_name(reference, head)
    return CollectionRef(
        source_name=source_name,
        collection_name=collection_name,
        ignored_ref=ref if at and ref else None,
    )
