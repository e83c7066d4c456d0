"""Exception hierarchy for agpm.

ResolutionError subclasses are scoped to a single declared reference: batch
operations catch them per item and keep going. Everything else propagates.
"""

from pathlib import Path


class AgpmError(Exception):
    """Base class for all agpm errors."""


class ResolutionError(AgpmError):
    """A failure that only affects the reference being resolved."""


class InvalidSourceFormatError(ResolutionError):
    """Raised when a source reference has no path-like structure at all."""

    def __init__(self, source: str) -> None:
        self.source = source
        super().__init__(f"Invalid source format: {source!r}")


class InvalidReferenceError(ResolutionError):
    """Raised when a declared artifact or collection reference can't be parsed."""

    def __init__(self, reference: str, reason: str) -> None:
        self.reference = reference
        self.reason = reason
        super().__init__(f"Invalid reference {reference!r}: {reason}")


class RefNotFoundError(ResolutionError):
    """Raised when a branch, tag or commit can't be resolved in a working copy."""

    def __init__(self, ref: str, repo_path: Path) -> None:
        self.ref = ref
        self.repo_path = repo_path
        super().__init__(f"Ref {ref!r} not found in {repo_path}")


class ManifestParseError(ResolutionError):
    """Raised when a manifest or descriptor file exists but is malformed."""

    def __init__(self, path: Path, detail: str) -> None:
        self.path = path
        self.detail = detail
        super().__init__(f"Malformed manifest {path}: {detail}")


class ArtifactNotFoundError(ResolutionError):
    """Raised when an artifact name is absent from a source's discovery results."""

    def __init__(self, source_name: str, artifact_name: str, available: list[str]) -> None:
        self.source_name = source_name
        self.artifact_name = artifact_name
        self.available = available
        super().__init__(f"Artifact {artifact_name!r} not found in source {source_name!r}")


class CollectionNotFoundError(ResolutionError):
    """Raised when a collection name is absent from a source's discovery results."""

    def __init__(self, source_name: str, collection_name: str, available: list[str]) -> None:
        self.source_name = source_name
        self.collection_name = collection_name
        self.available = available
        super().__init__(
            f"Collection {collection_name!r} not found in source {source_name!r}"
        )


class RepositoryUnavailableError(AgpmError):
    """Raised when cloning or fetching a repository fails (network, auth, missing repo)."""

    def __init__(self, url: str, detail: str) -> None:
        self.url = url
        self.detail = detail
        super().__init__(f"Repository unavailable: {url}\n{detail}".rstrip())


class IntegrityMismatchError(AgpmError):
    """Raised when a directory's fingerprint differs from the recorded one."""

    def __init__(self, path: Path, expected: str, actual: str) -> None:
        self.path = path
        self.expected = expected
        self.actual = actual
        super().__init__(f"Integrity mismatch for {path}: expected {expected}, got {actual}")


class ConfigValidationError(AgpmError):
    """Raised when agpm.toml or agpm.lock fails structural validation."""

    def __init__(self, path: Path, errors: tuple[str, ...]) -> None:
        self.path = path
        self.errors = errors
        details = "\n".join(f"  - {error}" for error in errors)
        super().__init__(f"Invalid {path.name}:\n{details}")


class CheckoutError(AgpmError):
    """Raised when a working copy can't be checked out at a resolved commit."""

    def __init__(self, repo_path: Path, sha: str, detail: str) -> None:
        self.repo_path = repo_path
        self.sha = sha
        self.detail = detail
        super().__init__(f"Checkout of {sha} failed in {repo_path}\n{detail}".rstrip())
