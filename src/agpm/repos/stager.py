"""Local working copies of source repositories.

Each source repository gets one full working copy at a location derived from
its clone URL (<repos_dir>/<host>/<owner>/<repo>), so "already cloned" is a
filesystem check rather than an index lookup.
"""

import logging
import threading
from dataclasses import dataclass
from pathlib import Path

from agpm.cache.store import ContentCache
from agpm.errors import RefNotFoundError
from agpm.gateway.git.abc import Git
from agpm.sources.parsing import Source, repo_storage_parts

logger = logging.getLogger(__name__)

DEFAULT_REF = "HEAD"
REMOTE_NAME = "origin"


@dataclass(frozen=True)
class RepoInfo:
    """A staged working copy and the commit it currently has checked out."""

    path: Path
    sha: str


@dataclass(frozen=True)
class CachedCheckout:
    """A resolved commit and its immutable cache snapshot."""

    sha: str
    cache_path: Path


class RepositoryStager:
    """Clones, fetches and checks out source repositories.

    The stager is the only component that mutates working copies. Checkouts
    against the same working copy are serialized.
    """

    def __init__(self, *, git: Git, cache: ContentCache, repos_dir: Path) -> None:
        self._git = git
        self._cache = cache
        self._repos_dir = repos_dir
        self._locks: dict[Path, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _lock_for(self, repo_path: Path) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(repo_path)
            if lock is None:
                lock = threading.Lock()
                self._locks[repo_path] = lock
            return lock

    def repo_path(self, source: Source) -> Path:
        """Working copy location for source; a pure function of its URL."""
        return self._repos_dir.joinpath(*repo_storage_parts(source.url))

    def ensure(self, source: Source) -> RepoInfo:
        """Clone source if it has no working copy yet, otherwise fetch all refs.

        Raises:
            RepositoryUnavailableError: If the clone or fetch fails
        """
        repo_path = self.repo_path(source)
        with self._lock_for(repo_path):
            if self._git.is_repository(repo_path):
                logger.debug("fetching %s in %s", source.url, repo_path)
                self._git.fetch_all(repo_path)
            else:
                logger.debug("cloning %s into %s", source.url, repo_path)
                repo_path.parent.mkdir(parents=True, exist_ok=True)
                self._git.clone(source.url, repo_path)

        sha = self._git.rev_parse(repo_path, DEFAULT_REF)
        if sha is None:
            raise RefNotFoundError(DEFAULT_REF, repo_path)
        return RepoInfo(path=repo_path, sha=sha)

    def resolve(self, repo_path: Path, ref: str) -> str:
        """Resolve a branch, tag, commit or HEAD to a full SHA without checking out.

        Remote-tracking refs are preferred because local branches and the local
        HEAD go stale after a fetch: HEAD means the remote's default branch.

        Raises:
            RefNotFoundError: If no candidate form of ref resolves
        """
        if ref.startswith("refs/"):
            candidates = [ref]
        else:
            candidates = [f"{REMOTE_NAME}/{ref}", ref]

        for candidate in candidates:
            sha = self._git.rev_parse(repo_path, candidate)
            if sha is not None:
                return sha
        raise RefNotFoundError(ref, repo_path)

    def cached_snapshot(self, sha: str) -> Path | None:
        """Snapshot path for sha if it is already cached, without touching any working copy."""
        if self._cache.has(sha):
            return self._cache.path_for(sha)
        return None

    def checkout_and_cache(self, repo_path: Path, ref: str) -> CachedCheckout:
        """Resolve ref and return its cache snapshot, creating it if needed.

        When the commit is already cached the working copy is left untouched.
        """
        sha = self.resolve(repo_path, ref)
        if self._cache.has(sha):
            logger.debug("%s (%s) already cached", ref, sha)
            return CachedCheckout(sha=sha, cache_path=self._cache.path_for(sha))

        with self._lock_for(repo_path):
            logger.debug("checking out %s (%s) in %s", ref, sha, repo_path)
            self._git.checkout(repo_path, sha)
            cache_path = self._cache.put(repo_path, sha)
        return CachedCheckout(sha=sha, cache_path=cache_path)
