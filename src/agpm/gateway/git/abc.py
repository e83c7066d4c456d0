"""Abstract interface for the git operations the repository stager needs."""

from abc import ABC, abstractmethod
from pathlib import Path


class Git(ABC):
    """Abstract interface for git working-copy operations.

    All implementations (real, fake) must implement this interface.
    """

    # ============================================================================
    # Query Operations
    # ============================================================================

    @abstractmethod
    def is_repository(self, repo_path: Path) -> bool:
        """Check whether a usable working copy exists at repo_path.

        Args:
            repo_path: Candidate working copy location

        Returns:
            True if repo_path is the root of a git working copy
        """
        ...

    @abstractmethod
    def rev_parse(self, repo_path: Path, ref: str) -> str | None:
        """Resolve a ref expression to a full commit SHA.

        Does not change the checkout.

        Args:
            repo_path: Path to the working copy
            ref: Branch, tag, remote-tracking ref, short or full SHA, or HEAD

        Returns:
            Full commit SHA, or None if the ref does not resolve to a commit
        """
        ...

    # ============================================================================
    # Mutation Operations
    # ============================================================================

    @abstractmethod
    def clone(self, url: str, destination: Path) -> None:
        """Clone url into destination.

        Raises:
            RepositoryUnavailableError: If the clone fails (network, auth, missing repo)
        """
        ...

    @abstractmethod
    def fetch_all(self, repo_path: Path) -> None:
        """Fetch all remote refs and tags into an existing working copy.

        Raises:
            RepositoryUnavailableError: If the fetch fails
        """
        ...

    @abstractmethod
    def checkout(self, repo_path: Path, sha: str) -> None:
        """Force a detached checkout of sha, discarding local changes.

        Raises:
            CheckoutError: If git can't check out sha
        """
        ...
