"""Fake implementation of Git for testing."""

import shutil
from dataclasses import dataclass, field
from pathlib import Path

from agpm.errors import RepositoryUnavailableError
from agpm.gateway.git.abc import Git


@dataclass
class FakeRemoteRepo:
    """In-memory remote repository.

    refs maps ref names ("HEAD", "main", "v1.0") to commit SHAs; commits maps
    each SHA to the tree at that commit as {relative path: file content}.
    Tests mutate both to simulate pushes.
    """

    refs: dict[str, str]
    commits: dict[str, dict[str, str]] = field(default_factory=dict)


class FakeGit(Git):
    """In-memory fake implementation of Git.

    Working copies are real directories (so caching and discovery run against
    real files) but no git process is involved: a ".git" directory marks a
    working copy, and checkouts rewrite the tree from the remote's commits.

    Constructor Injection:
    ---------------------
    - remotes: Mapping of clone URL -> FakeRemoteRepo
    - fetch_raises: Exception to raise when fetch_all() is called
    - checkout_raises: Exception to raise when checkout() is called

    Mutation Tracking:
    -----------------
    - cloned: List of (url, destination) tuples from clone()
    - fetched: List of paths from fetch_all()
    - checkouts: List of (repo_path, sha) tuples from checkout()
    """

    def __init__(
        self,
        *,
        remotes: dict[str, FakeRemoteRepo] | None = None,
        fetch_raises: Exception | None = None,
        checkout_raises: Exception | None = None,
    ) -> None:
        self._remotes = remotes or {}
        self._fetch_raises = fetch_raises
        self._checkout_raises = checkout_raises

        # Per working copy: origin URL, remote refs as of last clone/fetch, current HEAD
        self._origins: dict[Path, str] = {}
        self._remote_refs: dict[Path, dict[str, str]] = {}
        self._heads: dict[Path, str] = {}

        # Mutation tracking
        self._cloned: list[tuple[str, Path]] = []
        self._fetched: list[Path] = []
        self._checkouts: list[tuple[Path, str]] = []

    def _remote_for(self, repo_path: Path) -> FakeRemoteRepo:
        return self._remotes[self._origins[repo_path]]

    def _write_tree(self, repo_path: Path, sha: str) -> None:
        for child in repo_path.iterdir():
            if child.name == ".git":
                continue
            if child.is_dir():
                shutil.rmtree(child)
            else:
                child.unlink()
        tree = self._remote_for(repo_path).commits.get(sha, {})
        for relative_path, content in tree.items():
            target = repo_path / relative_path
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")
        self._heads[repo_path] = sha

    def is_repository(self, repo_path: Path) -> bool:
        return repo_path in self._origins and (repo_path / ".git").is_dir()

    def rev_parse(self, repo_path: Path, ref: str) -> str | None:
        if repo_path not in self._origins:
            return None
        if ref == "HEAD":
            return self._heads.get(repo_path)

        remote_refs = self._remote_refs[repo_path]
        if ref.startswith("origin/"):
            return remote_refs.get(ref[len("origin/") :])
        if ref in remote_refs:
            return remote_refs[ref]

        # Full or abbreviated commit SHA
        commits = self._remote_for(repo_path).commits
        if len(ref) >= 4:
            matches = [sha for sha in commits if sha.startswith(ref)]
            if len(matches) == 1:
                return matches[0]
        return None

    def clone(self, url: str, destination: Path) -> None:
        self._cloned.append((url, destination))
        remote = self._remotes.get(url)
        if remote is None:
            raise RepositoryUnavailableError(url, "fatal: repository not found")
        (destination / ".git").mkdir(parents=True)
        self._origins[destination] = url
        self._remote_refs[destination] = dict(remote.refs)
        self._write_tree(destination, remote.refs["HEAD"])

    def fetch_all(self, repo_path: Path) -> None:
        self._fetched.append(repo_path)
        if self._fetch_raises is not None:
            raise self._fetch_raises
        self._remote_refs[repo_path] = dict(self._remote_for(repo_path).refs)

    def checkout(self, repo_path: Path, sha: str) -> None:
        self._checkouts.append((repo_path, sha))
        if self._checkout_raises is not None:
            raise self._checkout_raises
        self._write_tree(repo_path, sha)

    # ============================================================================
    # Mutation Tracking Properties
    # ============================================================================

    @property
    def cloned(self) -> list[tuple[str, Path]]:
        """Read-only access to clones for test assertions."""
        return list(self._cloned)

    @property
    def fetched(self) -> list[Path]:
        """Read-only access to fetched working copies for test assertions."""
        return list(self._fetched)

    @property
    def checkouts(self) -> list[tuple[Path, str]]:
        """Read-only access to checkouts for test assertions.

        Returns list of (repo_path, sha) tuples.
        """
        return list(self._checkouts)
