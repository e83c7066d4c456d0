"""Content-addressed store of repository snapshots, keyed by commit SHA."""

import logging
import shutil
import uuid
from pathlib import Path

logger = logging.getLogger(__name__)


class ContentCache:
    """Immutable repository snapshots under <cache_dir>/<sha>.

    A snapshot is written once and never modified afterwards. Writes go to a
    hidden temporary sibling that is renamed into place, so a snapshot
    directory is either complete or absent.
    """

    def __init__(self, cache_dir: Path) -> None:
        self._cache_dir = cache_dir

    @property
    def cache_dir(self) -> Path:
        return self._cache_dir

    def path_for(self, sha: str) -> Path:
        """Deterministic snapshot location for sha (whether or not it exists)."""
        return self._cache_dir / sha

    def has(self, sha: str) -> bool:
        return self.path_for(sha).is_dir()

    def put(self, working_copy: Path, sha: str) -> Path:
        """Snapshot working_copy as the tree for sha.

        No-op when sha is already cached. The working copy must already be
        checked out at sha; .git is excluded from the snapshot.

        Returns:
            Path to the snapshot
        """
        cache_path = self.path_for(sha)
        if cache_path.is_dir():
            logger.debug("cache hit for %s", sha)
            return cache_path

        self._cache_dir.mkdir(parents=True, exist_ok=True)
        staging_path = self._cache_dir / f".{sha}.{uuid.uuid4().hex}.partial"
        logger.debug("caching %s from %s", sha, working_copy)
        shutil.copytree(
            working_copy,
            staging_path,
            symlinks=True,
            ignore=shutil.ignore_patterns(".git"),
        )
        try:
            staging_path.rename(cache_path)
        except OSError:
            # Another writer produced the same snapshot first
            shutil.rmtree(staging_path)
            if not cache_path.is_dir():
                raise
        return cache_path
