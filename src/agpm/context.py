"""Dependency container threaded through CLI commands."""

from dataclasses import dataclass
from pathlib import Path

from agpm.cache.store import ContentCache
from agpm.gateway.git.abc import Git
from agpm.gateway.git.real import RealGit
from agpm.lock.resolver import LockResolver
from agpm.paths import AgpmPaths
from agpm.repos.stager import RepositoryStager
from agpm.sources.parsing import Source


@dataclass(frozen=True)
class AgpmContext:
    """Immutable context holding all dependencies for agpm operations.

    Created at the CLI entry point and passed to commands via Click's context
    object. Tests build one with for_test() and inject it with
    CliRunner.invoke(..., obj=ctx).
    """

    git: Git
    paths: AgpmPaths
    cache: ContentCache
    stager: RepositoryStager
    cwd: Path

    def create_resolver(self, sources: list[Source]) -> LockResolver:
        """New resolver for one command run; its memoization lives as long as it does."""
        return LockResolver(stager=self.stager, sources=sources)

    @staticmethod
    def for_test(*, git: Git, cwd: Path, agpm_home: Path) -> "AgpmContext":
        """Create a context rooted at temporary directories.

        Args:
            git: Git implementation, usually a FakeGit
            cwd: Project directory commands operate on
            agpm_home: Root of the repos/ and cache/ stores
        """
        return _build(git=git, paths=AgpmPaths(root=agpm_home), cwd=cwd)


def _build(*, git: Git, paths: AgpmPaths, cwd: Path) -> AgpmContext:
    cache = ContentCache(paths.cache_dir)
    stager = RepositoryStager(git=git, cache=cache, repos_dir=paths.repos_dir)
    return AgpmContext(git=git, paths=paths, cache=cache, stager=stager, cwd=cwd)


def create_context() -> AgpmContext:
    """Create production context with real implementations."""
    return _build(git=RealGit(), paths=AgpmPaths.from_environment(), cwd=Path.cwd())
