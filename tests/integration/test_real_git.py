"""Integration tests for RealGit against local repositories.

These tests run actual git subprocesses against repositories created in a
temporary directory, so no network access is needed.

Tests are skipped if git is not installed on the system.
"""

import shutil
import subprocess
from pathlib import Path

import pytest

from agpm.cache.store import ContentCache
from agpm.errors import CheckoutError, RepositoryUnavailableError
from agpm.gateway.git.real import RealGit
from agpm.lock.models import AgpmLock
from agpm.lock.resolver import LockResolver
from agpm.repos.stager import RepositoryStager
from agpm.sources.parsing import Source
from agpm.sources.references import ArtifactRef

# Skip all tests in this module if git is not installed
pytestmark = pytest.mark.skipif(
    shutil.which("git") is None,
    reason="git not installed",
)


def _git(repo_path: Path, *args: str) -> str:
    result = subprocess.run(
        [
            "git",
            "-c",
            "user.name=Test",
            "-c",
            "user.email=test@example.com",
            "-c",
            "commit.gpgsign=false",
            *args,
        ],
        cwd=repo_path,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout.strip()


def _commit_skill(repo_path: Path, content: str, message: str) -> str:
    skill_dir = repo_path / "skills" / "pdf"
    skill_dir.mkdir(parents=True, exist_ok=True)
    (skill_dir / "metadata.json").write_text(f'{{"description": "{content}"}}', encoding="utf-8")
    _git(repo_path, "add", "-A")
    _git(repo_path, "commit", "--quiet", "-m", message)
    return _git(repo_path, "rev-parse", "HEAD")


@pytest.fixture
def upstream(tmp_path: Path) -> Path:
    repo_path = tmp_path / "upstream"
    repo_path.mkdir()
    _git(repo_path, "-c", "init.defaultBranch=main", "init", "--quiet")
    _commit_skill(repo_path, "first", "first")
    _git(repo_path, "tag", "v1")
    return repo_path


def test_clone_and_rev_parse(tmp_path: Path, upstream: Path) -> None:
    git = RealGit()
    destination = tmp_path / "clone"

    git.clone(str(upstream), destination)

    assert git.is_repository(destination)
    expected = _git(upstream, "rev-parse", "HEAD")
    assert git.rev_parse(destination, "HEAD") == expected
    assert git.rev_parse(destination, "origin/HEAD") == expected
    assert git.rev_parse(destination, "v1") == expected
    assert git.rev_parse(destination, "no-such-ref") is None


def test_is_repository_false_for_plain_directory(tmp_path: Path) -> None:
    assert RealGit().is_repository(tmp_path) is False


def test_clone_missing_repository_raises(tmp_path: Path) -> None:
    with pytest.raises(RepositoryUnavailableError):
        RealGit().clone(str(tmp_path / "missing"), tmp_path / "clone")


def test_fetch_sees_new_commits(tmp_path: Path, upstream: Path) -> None:
    git = RealGit(network_timeout=60)
    destination = tmp_path / "clone"
    git.clone(str(upstream), destination)

    new_sha = _commit_skill(upstream, "second", "second")
    git.fetch_all(destination)

    assert git.rev_parse(destination, "origin/HEAD") == new_sha


def test_fetch_failure_names_origin_url(tmp_path: Path, upstream: Path) -> None:
    git = RealGit()
    destination = tmp_path / "clone"
    git.clone(str(upstream), destination)
    shutil.rmtree(upstream)

    with pytest.raises(RepositoryUnavailableError) as exc_info:
        git.fetch_all(destination)

    assert exc_info.value.url == str(upstream)


def test_checkout_detaches_at_commit(tmp_path: Path, upstream: Path) -> None:
    git = RealGit()
    destination = tmp_path / "clone"
    first_sha = _git(upstream, "rev-parse", "HEAD")
    _commit_skill(upstream, "second", "second")
    git.clone(str(upstream), destination)

    git.checkout(destination, first_sha)

    metadata = (destination / "skills" / "pdf" / "metadata.json").read_text(encoding="utf-8")
    assert "first" in metadata


def test_checkout_unknown_commit_raises(tmp_path: Path, upstream: Path) -> None:
    git = RealGit()
    destination = tmp_path / "clone"
    git.clone(str(upstream), destination)

    with pytest.raises(CheckoutError) as exc_info:
        git.checkout(destination, "0" * 40)

    assert exc_info.value.repo_path == destination


def test_resolver_end_to_end(tmp_path: Path, upstream: Path) -> None:
    home = tmp_path / "home"
    stager = RepositoryStager(
        git=RealGit(), cache=ContentCache(home / "cache"), repos_dir=home / "repos"
    )
    source = Source(name="local/upstream", url=str(upstream))
    first_sha = _git(upstream, "rev-parse", "HEAD")
    _commit_skill(upstream, "second", "second")
    resolver = LockResolver(stager=stager, sources=[source])

    pinned = resolver.resolve(ArtifactRef("local/upstream", "pdf", "v1"), AgpmLock())
    latest = resolver.resolve(ArtifactRef("local/upstream", "pdf", None), AgpmLock())

    assert pinned.sha == first_sha
    assert latest.sha != first_sha
    assert pinned.integrity != latest.integrity
    assert not (home / "cache" / first_sha / ".git").exists()
